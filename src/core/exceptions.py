"""커스텀 예외 클래스 모듈

앱에서 발생하는 모든 예외의 계층 구조를 정의한다.
마커/선택 조작 오류는 호출자에게 그대로 전달되고, 라우팅 오류는
RouteResolver 내부에서 직선 거리 계산으로 흡수된다.
"""

from __future__ import annotations


class MarkerMapError(Exception):
    """앱 전체 기본 예외

    모든 커스텀 예외의 부모 클래스.
    """

    def __init__(self, message: str = "알 수 없는 오류가 발생했습니다.") -> None:
        self.message = message
        super().__init__(self.message)


class MarkerNotFoundError(MarkerMapError):
    """존재하지 않는 마커 id를 참조했을 때."""

    def __init__(self, marker_id: int, message: str | None = None) -> None:
        self.marker_id = marker_id
        super().__init__(message or f"마커를 찾을 수 없습니다: id={marker_id}")


class InvalidCoordinateError(MarkerMapError):
    """위도/경도가 숫자가 아니거나, 유한하지 않거나, 범위를 벗어났을 때."""

    def __init__(self, message: str = "좌표가 올바르지 않습니다.") -> None:
        super().__init__(message)


class RoutingServiceError(MarkerMapError):
    """OSRM 라우팅 서비스 호출/파싱 관련 에러.

    RouteResolver 밖으로는 전파되지 않는다.
    """

    def __init__(
        self,
        message: str = "라우팅 서비스 호출 중 오류가 발생했습니다.",
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message)
