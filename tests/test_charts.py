from __future__ import annotations

from conftest import POINT_A, POINT_B, POINT_C

from src.data.distance import DistanceAggregator
from src.data.models import RouteResult, empty_route
from src.data.route_resolver import straight_segments
from src.ui.charts import build_segment_chart


def test_segment_chart_lists_segments_in_order() -> None:
    route = RouteResult(
        kind="straight",
        requested_mode="straight",
        polyline=[POINT_A, POINT_B, POINT_C],
        segments=straight_segments([POINT_A, POINT_B, POINT_C], [1, 2, 3]),
        total_km=2.0,
    )
    agg = DistanceAggregator(route, {1: "A", 2: "B", 3: "C"})
    fig = build_segment_chart(agg)

    assert fig is not None
    bar = fig.data[0]
    # 수평 바 차트는 아래에서 위로 그려지므로 역순
    assert list(bar.y) == ["2. B → C", "1. A → B"]
    assert list(bar.x) == [s.distance_km for s in reversed(route.segments)]
    assert list(bar.text) == [v.formatted_distance for v in reversed(agg.formatted_segments)]


def test_segment_chart_empty_route() -> None:
    assert build_segment_chart(DistanceAggregator(empty_route())) is None
