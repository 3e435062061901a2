from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from src.data.marker_store import MarkerStore
from src.data.models import Coordinate
from src.data.osrm_client import OsrmRouteClient
from src.data.route_resolver import RouteResolver
from src.data.selection import SelectionTracker

# 마나도 시내 두 지점
POINT_A = Coordinate(lat=1.4748, lng=124.8421)
POINT_B = Coordinate(lat=1.4800, lng=124.8500)
POINT_C = Coordinate(lat=1.4900, lng=124.8600)

TEST_BASE_URL = "http://osrm.test"


def osrm_payload(
    distance_m: float = 1234.0,
    coordinates: list[list[float]] | None = None,
    code: str = "Ok",
) -> dict[str, Any]:
    """OSRM /route 응답 형태의 JSON."""
    if coordinates is None:
        coordinates = [
            [124.8421, 1.4748],
            [124.8460, 1.4770],
            [124.8500, 1.4800],
        ]
    return {
        "code": code,
        "routes": [
            {
                "distance": distance_m,
                "duration": 180.0,
                "geometry": {"type": "LineString", "coordinates": coordinates},
            }
        ],
        "waypoints": [],
    }


def make_osrm_client(handler: Callable[[httpx.Request], Any]) -> OsrmRouteClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), timeout=1.0)
    return OsrmRouteClient(base_url=TEST_BASE_URL, profile="driving", client=http_client)


def make_resolver(handler: Callable[[httpx.Request], Any]) -> RouteResolver:
    return RouteResolver(make_osrm_client(handler))


@pytest.fixture
def store() -> MarkerStore:
    return MarkerStore(name_prefix="Point")


@pytest.fixture
def tracker(store: MarkerStore) -> SelectionTracker:
    return SelectionTracker(store)


@pytest.fixture
def ok_resolver() -> RouteResolver:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=osrm_payload())

    return make_resolver(handler)


@pytest.fixture
def failing_resolver() -> RouteResolver:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route"})

    return make_resolver(handler)
