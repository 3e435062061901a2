"""경로 계산 — 직선(대원) 구간 또는 OSRM 도로 경로, 실패 시 직선 폴백.

- 좌표가 2개 미만이면 빈 결과 (에러 아님)
- straight: 입력 좌표를 그대로 잇고, 구간 거리는 haversine
- road: OSRM 1회 요청. 총거리는 서비스 보고값, 구간 거리는 경유점 간 haversine
  (그래서 구간 합과 총거리가 다를 수 있다)
- 라우팅 실패는 호출자에게 전파하지 않고 kind="straight_fallback" 결과로 대체

resolve()를 호출할 때마다 request_id가 증가한다. 늦게 도착한 이전 요청의 결과는
is_current()가 False이므로 호출자가 버려야 한다.
"""

from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING

from src.core.exceptions import RoutingServiceError
from src.data.geo import distance_km, midpoint
from src.data.models import ROUTE_MODES, RouteResult, Segment, empty_route
from src.data.osrm_client import OsrmRouteClient

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.data.models import Coordinate, RouteMode

logger = logging.getLogger(__name__)


def straight_segments(
    coords: Sequence[Coordinate],
    marker_ids: Sequence[int | None],
) -> list[Segment]:
    segments: list[Segment] = []
    for i in range(len(coords) - 1):
        a, b = coords[i], coords[i + 1]
        segments.append(
            Segment(
                from_id=marker_ids[i],
                to_id=marker_ids[i + 1],
                distance_km=distance_km(a, b),
                midpoint=midpoint(a, b),
            )
        )
    return segments


class RouteResolver:
    def __init__(self, client: OsrmRouteClient | None = None) -> None:
        self._client = client if client is not None else OsrmRouteClient()
        self._request_ids = itertools.count(1)
        self._latest_request_id = 0

    @property
    def latest_request_id(self) -> int:
        return self._latest_request_id

    def is_current(self, result: RouteResult) -> bool:
        """가장 최근 resolve() 호출의 결과인지."""
        return result.request_id == self._latest_request_id

    async def resolve(
        self,
        coordinates: Sequence[Coordinate],
        mode: RouteMode,
        marker_ids: Sequence[int | None] | None = None,
    ) -> RouteResult:
        if mode not in ROUTE_MODES:
            raise ValueError(f"알 수 없는 경로 모드: {mode!r}")

        request_id = next(self._request_ids)
        self._latest_request_id = request_id

        coords = list(coordinates)
        ids: list[int | None] = list(marker_ids) if marker_ids is not None else [None] * len(coords)
        if len(ids) != len(coords):
            raise ValueError("marker_ids와 coordinates의 길이가 다릅니다.")

        if len(coords) < 2:
            return empty_route(mode, request_id)

        segments = straight_segments(coords, ids)
        straight_total = sum(s.distance_km for s in segments)

        if mode == "straight":
            return RouteResult(
                kind="straight",
                requested_mode=mode,
                polyline=coords,
                segments=segments,
                total_km=straight_total,
                request_id=request_id,
            )

        try:
            road = await self._client.fetch_route(coords)
        except RoutingServiceError as exc:
            logger.warning("도로 경로 조회 실패, 직선 거리로 대체: %s", exc.message)
            return RouteResult(
                kind="straight_fallback",
                requested_mode=mode,
                polyline=coords,
                segments=segments,
                total_km=straight_total,
                request_id=request_id,
            )

        return RouteResult(
            kind="road",
            requested_mode=mode,
            polyline=road.geometry,
            segments=segments,
            total_km=road.distance_km,
            request_id=request_id,
        )
