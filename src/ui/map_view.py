"""지도 시각화 UI.

마커(일반 ●, 변전소 ▲), 선택 순서, 경로 선(직선: 파랑, 도로: 초록), 구간 거리 라벨,
사용자 현재 위치를 folium(Leaflet) 지도로 그리고 streamlit-folium으로 렌더링한다.

- 빈 지도 클릭 → `last_clicked` (지점 추가 / 이동할 위치)
- 마커 클릭 → `last_object_clicked` (선택 토글)

지도 생성(build_map)과 클릭 해석은 Streamlit 렌더링과 분리해서 테스트 가능하게 유지한다.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import folium
from streamlit_folium import st_folium

from src.data.models import Coordinate
from src.ui.components import distance_label_html, marker_hover_text, marker_icon_html

if TYPE_CHECKING:
    from src.data.models import Marker
    from src.ui.renderer import Label, Polyline

# 마커 클릭 좌표 ↔ 마커 위치 비교 허용 오차 (약 0.1 m)
_CLICK_TOLERANCE_DEG = 1e-6


def build_map(
    markers: list[Marker],
    selection: tuple[int, ...],
    polylines: list[Polyline],
    labels: list[Label],
    center: Coordinate,
    zoom: float,
    user_location: Coordinate | None = None,
) -> folium.Map:
    fmap = folium.Map(
        location=[center.lat, center.lng],
        zoom_start=zoom,
        tiles="OpenStreetMap",
        control_scale=True,
    )

    # 경로 선
    for line in polylines:
        if len(line.points) < 2:
            continue
        folium.PolyLine(
            locations=[p.as_tuple() for p in line.points],
            color=line.color,
            weight=4,
            opacity=0.8,
        ).add_to(fmap)

    # 구간 거리 라벨 (클릭 불가)
    for lb in labels:
        folium.Marker(
            location=lb.position.as_tuple(),
            icon=folium.DivIcon(html=distance_label_html(lb.text), icon_anchor=(30, 22)),
            interactive=False,
        ).add_to(fmap)

    order = {marker_id: i for i, marker_id in enumerate(selection, start=1)}
    for m in markers:
        folium.Marker(
            location=m.position.as_tuple(),
            icon=folium.DivIcon(
                html=marker_icon_html(m.icon_kind, m.id in order, order.get(m.id)),
                icon_size=(24, 24),
                icon_anchor=(12, 12),
            ),
            tooltip=folium.Tooltip(marker_hover_text(m, order.get(m.id))),
        ).add_to(fmap)

    if user_location is not None:
        folium.CircleMarker(
            location=user_location.as_tuple(),
            radius=8,
            color="#ffffff",
            weight=2,
            fill=True,
            fill_color="#3b82f6",
            fill_opacity=0.9,
            tooltip="내 위치",
        ).add_to(fmap)

    return fmap


def _to_coordinate(raw: Any) -> Coordinate | None:
    if not isinstance(raw, dict):
        return None
    lat, lng = raw.get("lat"), raw.get("lng")
    if isinstance(lat, bool) or isinstance(lng, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    # Leaflet은 지도를 옆으로 넘기면 경도를 ±180 밖으로 보고한다
    lng = (lng + 180.0) % 360.0 - 180.0
    if not -90.0 <= lat <= 90.0:
        return None
    return Coordinate(lat=lat, lng=lng)


def extract_map_clicks(map_state: Any) -> tuple[Coordinate | None, Coordinate | None]:
    """st_folium 반환값에서 (빈 지도 클릭 좌표, 마커 클릭 좌표)를 읽는다."""
    if not hasattr(map_state, "get"):
        return None, None
    return _to_coordinate(map_state.get("last_clicked")), _to_coordinate(
        map_state.get("last_object_clicked")
    )


def find_marker_at(markers: list[Marker], position: Coordinate) -> int | None:
    """클릭 좌표에 있는 마커 id. 겹쳐 있으면 나중에 그려진(위에 있는) 마커."""
    for m in reversed(markers):
        if (
            abs(m.lat - position.lat) <= _CLICK_TOLERANCE_DEG
            and abs(m.lng - position.lng) <= _CLICK_TOLERANCE_DEG
        ):
            return m.id
    return None


def render_marker_map(fmap: folium.Map) -> tuple[Coordinate | None, Coordinate | None]:
    """지도를 렌더링하고 (빈 지도 클릭, 마커 클릭) 좌표를 반환."""
    map_state = st_folium(
        fmap,
        key="marker_map",
        height=640,
        use_container_width=True,
        returned_objects=["last_clicked", "last_object_clicked"],
    )
    return extract_map_clicks(map_state)
