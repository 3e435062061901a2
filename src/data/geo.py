"""거리/좌표 계산 유틸.

- 두 좌표 사이 대원(great-circle) 거리는 haversine 공식(지구 반지름 6371 km)으로 계산한다.
- 모든 함수는 순수 함수이며 네트워크/상태에 의존하지 않는다.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from src.data.models import Coordinate

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoBBox:
    """(south, west, north, east)"""

    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.south + self.north) / 2.0, (self.west + self.east) / 2.0


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """haversine 대원 거리(km).

    대칭이며 같은 점이면 0을 반환한다.
    """

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # 부동소수 오차로 1을 살짝 넘는 경우 방지
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def path_length_km(points: Iterable[Coordinate]) -> float:
    """연속 점들 사이 직선 거리 합."""
    total = 0.0
    prev: Coordinate | None = None
    for p in points:
        if prev is not None:
            total += distance_km(prev, p)
        prev = p
    return total


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """구간 거리 툴팁 위치. 위경도 산술 평균(근사)."""
    return Coordinate(lat=(a.lat + b.lat) / 2.0, lng=(a.lng + b.lng) / 2.0)


def format_km(value: float) -> str:
    """거리 표시 포맷. 예: 1.2345 -> '1.23 km'"""
    return f"{value:.2f} km"


def bounds_of(points: Iterable[Coordinate]) -> GeoBBox | None:
    """점들을 모두 포함하는 bbox. 점이 없으면 None."""
    lats: list[float] = []
    lngs: list[float] = []
    for p in points:
        lats.append(p.lat)
        lngs.append(p.lng)
    if not lats:
        return None
    return GeoBBox(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))
