"""선택 순서 추적 — 경로 구간 순서를 결정하는 마커 id 시퀀스.

- 이미 선택된 id를 토글하면 제거, 없으면 맨 뒤에 추가한다.
- MarkerStore에 없는 id는 조용히 무시한다 (에러 아님).
- 마커가 삭제되면 시퀀스에서도 즉시 제거(prune)해 dangling 참조를 남기지 않는다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.data.marker_store import MarkerStore, StoreEvent

logger = logging.getLogger(__name__)

SelectionListener = Callable[[tuple[int, ...]], None]


class SelectionTracker:
    def __init__(self, store: MarkerStore) -> None:
        self._store = store
        self._ids: list[int] = []
        self._listeners: list[SelectionListener] = []
        self._unsubscribe = store.subscribe(self._on_store_event)

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def detach(self) -> None:
        """MarkerStore 구독 해제."""
        self._unsubscribe()

    def current(self) -> tuple[int, ...]:
        return tuple(self._ids)

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def position_of(self, marker_id: int) -> int | None:
        """선택 순서 (1부터). 선택되지 않았으면 None."""
        try:
            return self._ids.index(marker_id) + 1
        except ValueError:
            return None

    def toggle(self, marker_id: int) -> tuple[int, ...]:
        pruned = self._prune()

        if marker_id not in self._store:
            logger.debug("선택 토글 무시 (없는 마커): id=%s", marker_id)
            if pruned:
                self._emit()
            return self.current()

        if marker_id in self._ids:
            self._ids.remove(marker_id)
        else:
            self._ids.append(marker_id)
        self._emit()
        return self.current()

    def clear(self) -> None:
        if not self._ids:
            return
        self._ids.clear()
        self._emit()

    def _prune(self) -> bool:
        alive = [i for i in self._ids if i in self._store]
        if len(alive) == len(self._ids):
            return False
        logger.debug("선택 시퀀스 정리: %s -> %s", self._ids, alive)
        self._ids = alive
        return True

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.action in ("delete", "clear") and self._prune():
            self._emit()

    def _emit(self) -> None:
        snapshot = self.current()
        for listener in list(self._listeners):
            listener(snapshot)
