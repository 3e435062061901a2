"""지점 거리 측정 지도 — Streamlit 메인 앱.

지도를 클릭해 지점을 추가하고, 선택한 순서대로 직선 거리 또는 OSRM 도로 경로 거리를 계산한다.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Literal

import streamlit as st

from src.core.config import settings
from src.core.exceptions import InvalidCoordinateError
from src.core.session import SessionController
from src.data.geo import bounds_of
from src.data.geolocation import LocationTracker
from src.data.models import Coordinate, make_coordinate, parse_coordinate_text
from src.ui.dashboard import render_distance_summary, render_marker_list
from src.ui.map_view import find_marker_at, render_marker_map
from src.ui.renderer import FoliumMapRenderer
from src.ui.sidebar import render_add_marker_form, render_location_button, render_mode_selector

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

MapAction = Literal["add", "move", "toggle"]


def apply_location_query(tracker: LocationTracker, raw_lat: str | None, raw_lng: str | None) -> None:
    """?lat=..&lng=.. 값을 현재 위치로 반영. 없거나 잘못되면 마지막 위치(또는 기본 위치) 유지."""
    if not raw_lat or not raw_lng:
        tracker.fail("위치 정보 없음")
        return
    try:
        position = make_coordinate(
            parse_coordinate_text(raw_lat, "위도"), parse_coordinate_text(raw_lng, "경도")
        )
    except InvalidCoordinateError as exc:
        tracker.fail(exc.message)
        return
    tracker.update(position)


def handle_map_clicks(
    controller: SessionController,
    map_click: Coordinate | None,
    object_click: Coordinate | None,
    seen: dict[str, Coordinate | None],
    moving_id: int | None = None,
) -> MapAction | None:
    """새로 들어온 지도 클릭만 반영한다.

    st_folium은 마지막 클릭 좌표를 rerun마다 다시 돌려주므로, 직전에 처리한 좌표를
    `seen`에 보관해 같은 클릭이 두 번 적용되지 않게 한다.

    - 마커 클릭 → 선택 토글
    - 빈 지도 클릭 + 이동 중인 마커 → 그 위치로 이동 (드래그 종료와 같은 처리)
    - 빈 지도 클릭 → 기본 이름/아이콘으로 지점 추가
    """
    new_object = object_click is not None and object_click != seen.get("object")
    new_map = map_click is not None and map_click != seen.get("map")
    seen["object"] = object_click
    seen["map"] = map_click

    if new_object:
        marker_id = find_marker_at(controller.markers(), object_click)
        if marker_id is not None:
            controller.toggle_selection(marker_id)
            return "toggle"

    if not new_map:
        return None

    if moving_id is not None and moving_id in controller.store:
        controller.move_marker(moving_id, map_click)
        return "move"
    controller.add_marker_at(map_click)
    return "add"


def _sync_location(tracker: LocationTracker) -> None:
    """쿼리 파라미터가 바뀐 rerun에서만 위치를 갱신한다."""
    query = (st.query_params.get("lat"), st.query_params.get("lng"))
    if not tracker.is_loading and query == st.session_state.get("_location_query"):
        return
    st.session_state["_location_query"] = query
    apply_location_query(tracker, *query)


def _get_session() -> tuple[SessionController, FoliumMapRenderer, LocationTracker]:
    controller = st.session_state.get("_controller")
    if isinstance(controller, SessionController):
        return controller, st.session_state["_renderer"], st.session_state["_location"]

    renderer = FoliumMapRenderer()
    controller = SessionController(renderer=renderer)
    location = LocationTracker()

    st.session_state["_controller"] = controller
    st.session_state["_renderer"] = renderer
    st.session_state["_location"] = location
    logger.info("새 세션 시작")
    return controller, renderer, location


def _refresh(controller: SessionController) -> None:
    asyncio.run(controller.refresh())


def _map_center(controller: SessionController, location: LocationTracker) -> Coordinate:
    center = st.session_state.get("_map_center")
    if isinstance(center, Coordinate):
        return center
    bbox = bounds_of(m.position for m in controller.markers())
    if bbox is None:
        return location.current()
    lat, lng = bbox.center
    return Coordinate(lat=lat, lng=lng)


def main() -> None:
    st.set_page_config(page_title="지점 거리 측정 지도", page_icon="📍", layout="wide")
    st.title("📍 지점 거리 측정 지도")
    st.caption("지도를 클릭해 지점을 표시하고, 선택한 순서대로 거리를 측정합니다.")

    controller, renderer, location = _get_session()
    _sync_location(location)

    mode = render_mode_selector(controller.mode)
    if mode != controller.mode:
        controller.set_mode(mode)
        with st.spinner("경로 계산 중..."):
            _refresh(controller)

    form = render_add_marker_form()
    if form is not None:
        try:
            marker = controller.add_marker_from_form(form)
        except InvalidCoordinateError as exc:
            st.sidebar.error(f"좌표가 올바르지 않습니다: {exc.message}")
        else:
            st.session_state["_map_center"] = marker.position
            _refresh(controller)

    if render_location_button(location.is_fallback):
        st.session_state["_map_center"] = location.current()

    if controller.is_route_pending:
        with st.spinner("경로 계산 중..."):
            _refresh(controller)

    moving_id = st.session_state.get("moving_marker_id")
    col_map, col_info = st.columns([0.62, 0.38], gap="large")

    with col_map:
        if moving_id is not None and moving_id in controller.store:
            st.info(f"📍 '{controller.store.get(moving_id).name}'의 새 위치를 지도에서 클릭하세요.")
        fmap = renderer.build_map(
            center=_map_center(controller, location),
            zoom=settings.default_zoom,
            user_location=location.current(),
        )
        map_click, object_click = render_marker_map(fmap)
        st.caption("빈 곳을 클릭하면 지점이 추가되고, 지점을 클릭하면 선택/해제됩니다.")

    with col_info:
        render_distance_summary(controller.snapshot(), controller.aggregate)
        st.divider()
        render_marker_list(controller)

    action = handle_map_clicks(
        controller,
        map_click,
        object_click,
        st.session_state.setdefault("_map_clicks_seen", {}),
        moving_id,
    )
    if action is None:
        return
    if action == "move":
        st.session_state.pop("moving_marker_id", None)
    logger.debug("지도 클릭 처리: %s", action)
    _refresh(controller)
    st.rerun()


if __name__ == "__main__":
    main()
