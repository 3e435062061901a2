from __future__ import annotations

import pytest
from conftest import POINT_A, POINT_B, POINT_C

from src.data.distance import DistanceAggregator, SegmentView
from src.data.models import RouteResult, empty_route
from src.data.route_resolver import straight_segments


def _route(kind: str = "straight", total_km: float | None = None) -> RouteResult:
    segments = straight_segments([POINT_A, POINT_B, POINT_C], [1, 2, 3])
    total = total_km if total_km is not None else sum(s.distance_km for s in segments)
    return RouteResult(
        kind=kind,  # type: ignore[arg-type]
        requested_mode="road" if kind != "straight" else "straight",
        polyline=[POINT_A, POINT_B, POINT_C],
        segments=segments,
        total_km=total,
    )


def test_empty_route_hides_total() -> None:
    agg = DistanceAggregator(empty_route())
    assert agg.formatted_total is None
    assert agg.formatted_segments == []
    assert agg.total_km == 0.0


def test_formatted_segments_use_names() -> None:
    agg = DistanceAggregator(_route(), {1: "Point 1", 2: "Gardu", 3: "Point 3"})
    views = agg.formatted_segments
    assert [v.index for v in views] == [1, 2]
    assert views[0].label == "Point 1 → Gardu"
    assert views[1].label == "Gardu → Point 3"
    assert views[0].formatted_distance.endswith(" km")


def test_unknown_name_falls_back_to_id() -> None:
    agg = DistanceAggregator(_route(), {1: "Point 1"})
    assert agg.formatted_segments[0].to_name == "#2"


def test_road_total_differs_from_segment_sum() -> None:
    agg = DistanceAggregator(_route(kind="road", total_km=5.0))
    assert agg.formatted_total == "5.00 km"
    assert agg.segment_sum_km == pytest.approx(sum(s.distance_km for s in agg.route.segments))
    assert agg.segment_sum_km != pytest.approx(agg.total_km)


def test_segment_view_formatting() -> None:
    view = SegmentView(index=1, from_name="A", to_name="B", distance_km=0.8312)
    assert view.label == "A → B"
    assert view.formatted_distance == "0.83 km"
