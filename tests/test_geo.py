from __future__ import annotations

import math

import pytest
from conftest import POINT_A, POINT_B, POINT_C

from src.data.geo import bounds_of, distance_km, format_km, midpoint, path_length_km
from src.data.models import Coordinate


def _haversine_reference(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    r = 6371.0
    d_lat = (lat2 - lat1) * math.pi / 180
    d_lng = (lng2 - lng1) * math.pi / 180
    a = math.sin(d_lat / 2) * math.sin(d_lat / 2) + math.cos(lat1 * math.pi / 180) * math.cos(
        lat2 * math.pi / 180
    ) * math.sin(d_lng / 2) * math.sin(d_lng / 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return r * c


class TestDistanceKm:
    def test_identical_points_zero(self) -> None:
        assert distance_km(POINT_A, POINT_A) == 0.0

    def test_symmetric(self) -> None:
        pairs = [
            (POINT_A, POINT_B),
            (POINT_B, POINT_C),
            (Coordinate(lat=-33.9, lng=151.2), Coordinate(lat=51.5, lng=-0.12)),
            (Coordinate(lat=89.9, lng=-179.9), Coordinate(lat=-89.9, lng=179.9)),
        ]
        for a, b in pairs:
            assert distance_km(a, b) == pytest.approx(distance_km(b, a), rel=1e-12)

    def test_manado_points_match_reference(self) -> None:
        d = distance_km(POINT_A, POINT_B)
        ref = _haversine_reference(1.4748, 124.8421, 1.4800, 124.8500)
        assert round(d, 2) == round(ref, 2)
        assert d == pytest.approx(1.05, abs=0.01)

    def test_collinear_segments_add_up(self) -> None:
        # 같은 경선 위 세 점
        a = Coordinate(lat=0.0, lng=10.0)
        b = Coordinate(lat=10.0, lng=10.0)
        c = Coordinate(lat=20.0, lng=10.0)
        assert distance_km(a, b) + distance_km(b, c) == pytest.approx(distance_km(a, c), rel=1e-9)

    def test_one_degree_latitude(self) -> None:
        d = distance_km(Coordinate(lat=0.0, lng=0.0), Coordinate(lat=1.0, lng=0.0))
        assert d == pytest.approx(111.195, abs=0.01)

    def test_antipodal_points(self) -> None:
        d = distance_km(Coordinate(lat=0.0, lng=0.0), Coordinate(lat=0.0, lng=180.0))
        assert d == pytest.approx(math.pi * 6371.0, rel=1e-9)


def test_path_length_sums_segments() -> None:
    expected = distance_km(POINT_A, POINT_B) + distance_km(POINT_B, POINT_C)
    assert path_length_km([POINT_A, POINT_B, POINT_C]) == pytest.approx(expected)
    assert path_length_km([POINT_A]) == 0.0
    assert path_length_km([]) == 0.0


def test_midpoint() -> None:
    m = midpoint(Coordinate(lat=1.0, lng=2.0), Coordinate(lat=3.0, lng=6.0))
    assert m.lat == pytest.approx(2.0)
    assert m.lng == pytest.approx(4.0)


def test_format_km() -> None:
    assert format_km(1.23456) == "1.23 km"
    assert format_km(0) == "0.00 km"


def test_bounds_of() -> None:
    bbox = bounds_of([POINT_A, POINT_B, POINT_C])
    assert bbox is not None
    assert bbox.south == 1.4748
    assert bbox.north == 1.4900
    assert bbox.west == 124.8421
    assert bbox.east == 124.8600
    assert bbox.center == pytest.approx((1.4824, 124.85105))
    assert bounds_of([]) is None
