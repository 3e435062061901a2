"""사용자 현재 위치 추적.

브라우저 위치 권한/폴링은 외부(UI)가 담당하고, 이 모듈은 전달받은 좌표만 보관한다.
위치를 받지 못하면(미지원/권한 거부/오류) 설정의 기본 위치를 사용한다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from src.core.config import settings
from src.data.models import Coordinate

logger = logging.getLogger(__name__)

LocationListener = Callable[[Coordinate], None]


def default_location() -> Coordinate:
    return Coordinate(lat=settings.default_lat, lng=settings.default_lng)


class LocationTracker:
    def __init__(self, fallback: Coordinate | None = None) -> None:
        self._fallback = fallback or default_location()
        self._current: Coordinate | None = None
        self._resolved = False
        self._listeners: list[LocationListener] = []

    @property
    def is_loading(self) -> bool:
        """첫 위치(또는 실패 통보)를 아직 받지 못한 상태."""
        return not self._resolved

    @property
    def is_fallback(self) -> bool:
        return self._resolved and self._current is None

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def current(self) -> Coordinate:
        return self._current or self._fallback

    def start(self, initial: Coordinate | None) -> None:
        """추적 시작. 초기 위치가 없으면(미지원/권한 거부) 기본 위치로 확정."""
        if initial is None:
            self.fail("위치 정보 없음")
        else:
            self.update(initial)

    def update(self, coordinate: Coordinate) -> None:
        """초기 위치 및 이후 위치 갱신."""
        self._current = coordinate
        self._resolved = True
        for listener in list(self._listeners):
            listener(coordinate)

    def fail(self, reason: str = "") -> None:
        """위치 조회 실패. 이미 받은 위치가 있으면 유지한다."""
        if self._current is None:
            logger.warning("위치 조회 실패, 기본 위치 사용: %s", reason or "unknown")
        else:
            logger.info("위치 갱신 실패 (마지막 위치 유지): %s", reason or "unknown")
        self._resolved = True
