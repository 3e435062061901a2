"""마커 저장소 — 세션 내 마커 컬렉션의 단일 소유자.

생성/수정/삭제/초기화가 성공할 때마다 구독자에게 StoreEvent를 전달한다.
모든 변경은 all-or-nothing이며, 실패한 변경은 상태를 바꾸지 않는다.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError

from src.core.config import settings
from src.core.exceptions import InvalidCoordinateError, MarkerNotFoundError
from src.data.models import Coordinate, IconKind, Marker

logger = logging.getLogger(__name__)

StoreAction = Literal["create", "update", "delete", "clear"]

_UPDATABLE_FIELDS = frozenset({"lat", "lng", "name", "capacity_label", "icon_kind"})


@dataclass(frozen=True)
class StoreEvent:
    action: StoreAction
    marker_id: int | None = None
    # 선택된 마커의 위치가 바뀌면 경로를 다시 계산해야 한다
    position_changed: bool = False


StoreListener = Callable[[StoreEvent], None]


class MarkerStore:
    def __init__(self, name_prefix: str | None = None) -> None:
        self._markers: dict[int, Marker] = {}
        self._ids = itertools.count(1)
        self._listeners: list[StoreListener] = []
        self._name_prefix = name_prefix or settings.default_marker_prefix

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """변경 알림 구독. 반환된 함수를 호출하면 구독 해제."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def create(
        self,
        position: Coordinate,
        name: str | None = None,
        capacity_label: str = "",
        icon_kind: IconKind = "round",
    ) -> Marker:
        """새 마커를 저장 순서 맨 뒤에 추가. 이름 생략 시 'Point N'."""
        marker_id = next(self._ids)
        label = (name or "").strip() or f"{self._name_prefix} {len(self._markers) + 1}"
        marker = Marker(
            id=marker_id,
            lat=position.lat,
            lng=position.lng,
            name=label,
            capacity_label=capacity_label.strip(),
            icon_kind=icon_kind,
        )
        self._markers[marker_id] = marker
        logger.debug("마커 생성: id=%s name=%s (%.6f, %.6f)", marker_id, label, marker.lat, marker.lng)
        self._emit(StoreEvent("create", marker_id, position_changed=True))
        return marker.model_copy()

    def update(self, marker_id: int, **fields: Any) -> Marker:
        """마커 필드를 부분 수정.

        - 없는 id: MarkerNotFoundError
        - 위도/경도가 유한하지 않거나 범위 밖: InvalidCoordinateError
        - 알 수 없는 필드, 잘못된 이름/용량/아이콘 값: ValueError
        """
        current = self._require(marker_id)

        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"수정할 수 없는 필드: {sorted(unknown)}")

        merged = current.model_dump()
        merged.update(fields)
        try:
            updated = Marker.model_validate(merged)
        except ValidationError as exc:
            locs = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
            if locs & {"lat", "lng"}:
                raise InvalidCoordinateError(
                    f"좌표가 올바르지 않습니다: ({merged.get('lat')}, {merged.get('lng')})"
                ) from exc
            raise ValueError(f"마커 필드 값이 올바르지 않습니다: {sorted(locs)}") from exc

        moved = (updated.lat, updated.lng) != (current.lat, current.lng)
        self._markers[marker_id] = updated
        logger.debug("마커 수정: id=%s fields=%s", marker_id, sorted(fields))
        self._emit(StoreEvent("update", marker_id, position_changed=moved))
        return updated.model_copy()

    def move(self, marker_id: int, position: Coordinate) -> Marker:
        """드래그 종료 시 위치만 변경."""
        return self.update(marker_id, lat=position.lat, lng=position.lng)

    def delete(self, marker_id: int) -> None:
        self._require(marker_id)
        del self._markers[marker_id]
        logger.debug("마커 삭제: id=%s", marker_id)
        self._emit(StoreEvent("delete", marker_id, position_changed=True))

    def clear(self) -> None:
        count = len(self._markers)
        self._markers.clear()
        logger.debug("마커 전체 삭제: %s건", count)
        self._emit(StoreEvent("clear", None, position_changed=True))

    def get(self, marker_id: int) -> Marker:
        return self._require(marker_id).model_copy()

    def list(self) -> list[Marker]:
        """저장 순서대로 마커 복사본 목록."""
        return [m.model_copy() for m in self._markers.values()]

    def positions(self, marker_ids: tuple[int, ...] | list[int]) -> list[Coordinate]:
        """id 순서대로 현재 위치를 조회. 없는 id는 건너뛴다."""
        return [self._markers[i].position for i in marker_ids if i in self._markers]

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._markers

    def __len__(self) -> int:
        return len(self._markers)

    def _require(self, marker_id: int) -> Marker:
        marker = self._markers.get(marker_id)
        if marker is None:
            raise MarkerNotFoundError(marker_id)
        return marker
