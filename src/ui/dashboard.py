"""메인 대시보드 — 거리 요약, 구간 테이블, 지점 목록(선택/수정/삭제)."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pandas as pd
import streamlit as st

from src.core.exceptions import InvalidCoordinateError, MarkerNotFoundError
from src.data.geo import format_km
from src.data.models import ICON_KINDS, MarkerForm
from src.ui.charts import render_segment_chart
from src.ui.components import marker_emoji, route_kind_label
from src.ui.sidebar import icon_kind_label

if TYPE_CHECKING:
    from src.core.session import SessionController, SessionSnapshot
    from src.data.distance import DistanceAggregator
    from src.data.models import Marker


def segments_to_dataframe(aggregate: DistanceAggregator) -> pd.DataFrame:
    """구간별 거리를 표시용 DataFrame으로 변환."""
    rows = [
        {
            "#": s.index,
            "구간": s.label,
            "거리": s.formatted_distance,
            "거리(km)": round(s.distance_km, 3),
        }
        for s in aggregate.formatted_segments
    ]
    return pd.DataFrame(rows, columns=["#", "구간", "거리", "거리(km)"])


def markers_to_dataframe(markers: list[Marker], selection: tuple[int, ...]) -> pd.DataFrame:
    """지점 목록 DataFrame. 선택 순서가 있으면 '순서' 열에 표시."""
    order = {marker_id: i for i, marker_id in enumerate(selection, start=1)}
    rows = [
        {
            "순서": order.get(m.id),
            "이름": f"{marker_emoji(m.icon_kind)} {m.name}",
            "용량": m.capacity_label,
            "위도": round(m.lat, 6),
            "경도": round(m.lng, 6),
        }
        for m in markers
    ]
    return pd.DataFrame(rows, columns=["순서", "이름", "용량", "위도", "경도"])


def render_distance_summary(snapshot: SessionSnapshot, aggregate: DistanceAggregator) -> None:
    route = snapshot.route

    col1, col2, col3 = st.columns(3)
    col1.metric("전체 지점", f"{len(snapshot.markers)}개")
    col2.metric("선택 지점", f"{len(snapshot.selection)}개")
    col3.metric("총 거리", snapshot.total_label or "-")

    if snapshot.is_route_pending:
        st.caption("⏳ 경로 계산 중...")
        return

    if len(snapshot.selection) < 2:
        st.info("지점을 2개 이상 선택하면 거리를 계산합니다. 지도에서 지점을 클릭하세요.")
        return

    if route.is_fallback:
        st.warning("도로 경로를 가져오지 못해 직선 거리로 표시합니다.")
    else:
        st.caption(route_kind_label(route.kind))

    df = segments_to_dataframe(aggregate)
    st.dataframe(df, use_container_width=True, hide_index=True)
    render_segment_chart(aggregate)

    if route.kind == "road":
        st.caption(
            f"구간 거리는 지점 간 직선 거리 합({format_km(aggregate.segment_sum_km)})이며, "
            "총 거리는 도로 경로 기준입니다."
        )


def _render_edit_form(controller: SessionController, marker: Marker) -> None:
    initial = MarkerForm.from_marker(marker)
    with st.form(f"edit_marker_{marker.id}"):
        name = st.text_input("이름", value=initial.name)
        capacity = st.text_input("용량", value=initial.capacity_label)
        col_lat, col_lng = st.columns(2)
        lat = col_lat.text_input("위도", value=initial.lat)
        lng = col_lng.text_input("경도", value=initial.lng)
        icon_kind = st.radio(
            "아이콘",
            options=list(ICON_KINDS),
            index=list(ICON_KINDS).index(initial.icon_kind),
            format_func=icon_kind_label,
            horizontal=True,
        )
        col_save, col_cancel = st.columns(2)
        saved = col_save.form_submit_button("💾 저장", use_container_width=True)
        cancelled = col_cancel.form_submit_button("취소", use_container_width=True)

    if cancelled:
        st.session_state.pop("editing_marker_id", None)
        st.rerun()

    if saved:
        form = MarkerForm(
            lat=lat, lng=lng, name=name, capacity_label=capacity, icon_kind=icon_kind
        )
        try:
            controller.edit_marker(marker.id, form)
        except InvalidCoordinateError as exc:
            st.error(f"좌표가 올바르지 않습니다: {exc.message}")
            return
        except MarkerNotFoundError:
            st.warning("이미 삭제된 지점입니다.")
        st.session_state.pop("editing_marker_id", None)
        asyncio.run(controller.refresh())
        st.rerun()


def render_marker_list(controller: SessionController) -> None:
    """지점 목록 + 선택/이동/수정/삭제 버튼."""
    markers = controller.markers()

    header_col, clear_col = st.columns([0.7, 0.3])
    header_col.subheader(f"📌 지점 목록 ({len(markers)})")
    if markers and clear_col.button("🗑️ 전체 삭제", use_container_width=True):
        controller.clear_markers()
        st.session_state.pop("editing_marker_id", None)
        st.session_state.pop("moving_marker_id", None)
        asyncio.run(controller.refresh())
        st.rerun()

    if not markers:
        st.info("아직 지점이 없습니다. 지도를 클릭하거나 사이드바에서 좌표를 입력해 추가하세요.")
        return

    editing_id = st.session_state.get("editing_marker_id")
    moving_id = st.session_state.get("moving_marker_id")
    for marker in markers:
        order = controller.tracker.position_of(marker.id)
        with st.container(border=True):
            if editing_id == marker.id:
                _render_edit_form(controller, marker)
                continue

            info_col, select_col, move_col, edit_col, delete_col = st.columns(
                [0.48, 0.13, 0.13, 0.13, 0.13]
            )
            badge = f"**{order}.** " if order is not None else ""
            info_col.markdown(f"{badge}{marker_emoji(marker.icon_kind)} **{marker.name}**")
            if marker.capacity_label:
                info_col.caption(f"⚡ {marker.capacity_label}")
            info_col.caption(f"{marker.lat:.6f}, {marker.lng:.6f}")

            if select_col.button("✔" if order else "○", key=f"select_{marker.id}"):
                controller.toggle_selection(marker.id)
                asyncio.run(controller.refresh())
                st.rerun()
            moving = moving_id == marker.id
            if move_col.button(
                "✖" if moving else "📍", key=f"move_{marker.id}", help="지도에서 새 위치 클릭"
            ):
                if moving:
                    st.session_state.pop("moving_marker_id", None)
                else:
                    st.session_state["moving_marker_id"] = marker.id
                st.rerun()
            if edit_col.button("✏️", key=f"edit_{marker.id}"):
                st.session_state["editing_marker_id"] = marker.id
                st.rerun()
            if delete_col.button("🗑️", key=f"delete_{marker.id}"):
                controller.delete_marker(marker.id)
                if moving:
                    st.session_state.pop("moving_marker_id", None)
                asyncio.run(controller.refresh())
                st.rerun()
