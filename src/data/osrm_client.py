"""OSRM 라우팅 서비스 비동기 클라이언트.

엔드포인트: {ROUTING_BASE_URL}/route/v1/{profile}/{lng,lat;lng,lat;...}
파라미터: overview=full&geometries=geojson

내부 좌표는 (lat, lng), OSRM 좌표는 [lng, lat] 순서다.
"""

from __future__ import annotations

import math
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from src.core.config import settings
from src.core.exceptions import RoutingServiceError
from src.data.models import Coordinate

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_HEADERS = {"User-Agent": "marker-distance-map/0.1 (contact: none)"}


@dataclass(frozen=True)
class RoadRoute:
    geometry: list[Coordinate]
    distance_km: float


def format_waypoints(coords: Sequence[Coordinate]) -> str:
    """(lat, lng) 목록을 OSRM 형식 'lng,lat;lng,lat;...'로 변환."""
    return ";".join(f"{c.lng},{c.lat}" for c in coords)


def parse_osrm_route(payload: Any) -> RoadRoute:
    """OSRM /route JSON을 RoadRoute로 변환.

    네트워크 호출 없이 테스트 가능하도록 파싱 로직을 분리한다.
    code != "Ok" 또는 형식 오류는 RoutingServiceError.
    """

    if not isinstance(payload, dict):
        raise RoutingServiceError("라우팅 응답 형식 오류 (object 아님)")

    code = payload.get("code")
    if code != "Ok":
        msg = payload.get("message") or "Unknown error"
        raise RoutingServiceError(f"라우팅 서비스 오류: {code}: {msg}")

    routes = payload.get("routes")
    if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
        raise RoutingServiceError("라우팅 응답에 routes가 없습니다.")
    route = routes[0]

    distance = route.get("distance")
    if isinstance(distance, bool) or not isinstance(distance, (int, float)):
        raise RoutingServiceError("라우팅 응답에 distance가 없습니다.")
    # resp.json()은 bare NaN/Infinity도 받아들인다
    if not math.isfinite(distance) or distance < 0:
        raise RoutingServiceError(f"라우팅 응답 distance 값 오류: {distance!r}")

    geometry = route.get("geometry")
    raw_coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(raw_coords, list):
        raise RoutingServiceError("라우팅 응답에 geometry.coordinates가 없습니다.")

    points: list[Coordinate] = []
    for pair in raw_coords:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            raise RoutingServiceError(f"라우팅 geometry 좌표 형식 오류: {pair!r}")
        lng, lat = pair[0], pair[1]
        try:
            points.append(Coordinate(lat=lat, lng=lng))
        except ValueError as exc:
            raise RoutingServiceError(f"라우팅 geometry 좌표 값 오류: {pair!r}") from exc

    if len(points) < 2:
        raise RoutingServiceError(f"라우팅 geometry 좌표가 부족합니다: {len(points)}개")

    return RoadRoute(geometry=points, distance_km=float(distance) / 1000.0)


class OsrmRouteClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.routing_base_url).rstrip("/")
        self._profile = profile or settings.routing_profile
        self._timeout = (
            timeout_seconds if timeout_seconds is not None else settings.routing_timeout_seconds
        )
        # None이면 요청마다 AsyncClient를 열고 닫는다 (이벤트 루프가 호출마다 달라질 수 있음)
        self._client = client

    def build_url(self, coords: Sequence[Coordinate]) -> str:
        return f"{self._base_url}/route/v1/{self._profile}/{format_waypoints(coords)}"

    async def fetch_route(self, coords: Sequence[Coordinate]) -> RoadRoute:
        """모든 경유점을 순서대로 지나는 도로 경로 1건을 조회."""
        if len(coords) < 2:
            raise ValueError("경로 조회에는 최소 2개의 좌표가 필요합니다.")

        url = self.build_url(coords)
        params = {"overview": "full", "geometries": "geojson"}

        try:
            if self._client is not None:
                resp = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout, headers=_HEADERS) as client:
                    resp = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise RoutingServiceError("라우팅 서비스 요청 시간 초과") from exc
        except httpx.HTTPError as exc:
            raise RoutingServiceError(f"라우팅 서비스 네트워크 오류: {exc}") from exc

        if resp.status_code >= 400:
            raise RoutingServiceError(
                f"라우팅 서비스 HTTP 오류: {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise RoutingServiceError(
                "라우팅 응답 JSON 파싱 실패", status_code=resp.status_code
            ) from exc

        route = parse_osrm_route(payload)
        logger.debug(
            "도로 경로 조회: 경유점 %s개, geometry %s점, %.3f km",
            len(coords),
            len(route.geometry),
            route.distance_km,
        )
        return route
