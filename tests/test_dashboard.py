from __future__ import annotations

from conftest import POINT_A, POINT_B, POINT_C

from src.data.distance import DistanceAggregator
from src.data.models import Marker, RouteResult, empty_route
from src.data.route_resolver import straight_segments
from src.ui.dashboard import markers_to_dataframe, segments_to_dataframe


def test_segments_to_dataframe() -> None:
    route = RouteResult(
        kind="straight",
        requested_mode="straight",
        polyline=[POINT_A, POINT_B, POINT_C],
        segments=straight_segments([POINT_A, POINT_B, POINT_C], [1, 2, 3]),
        total_km=2.0,
    )
    agg = DistanceAggregator(route, {1: "Point 1", 2: "Point 2", 3: "Point 3"})
    df = segments_to_dataframe(agg)

    assert list(df.columns) == ["#", "구간", "거리", "거리(km)"]
    assert len(df) == 2
    assert df.iloc[0]["구간"] == "Point 1 → Point 2"
    assert df.iloc[1]["#"] == 2
    assert df.iloc[0]["거리"].endswith(" km")


def test_segments_to_dataframe_empty() -> None:
    df = segments_to_dataframe(DistanceAggregator(empty_route()))
    assert df.empty
    assert list(df.columns) == ["#", "구간", "거리", "거리(km)"]


def test_markers_to_dataframe_shows_selection_order() -> None:
    markers = [
        Marker(id=1, lat=1.4748, lng=124.8421, name="Point 1"),
        Marker(id=2, lat=1.48, lng=124.85, name="Gardu", capacity_label="50 kVA", icon_kind="substation"),
    ]
    df = markers_to_dataframe(markers, selection=(2,))

    assert list(df.columns) == ["순서", "이름", "용량", "위도", "경도"]
    assert df.iloc[1]["순서"] == 1
    assert df.iloc[1]["이름"] == "⚡ Gardu"
    assert df.iloc[1]["용량"] == "50 kVA"
    assert df.iloc[0]["이름"] == "🔴 Point 1"
