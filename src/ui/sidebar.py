"""사이드바 — 마커 추가 폼, 경로 모드 선택, 내 위치 이동."""

from __future__ import annotations

import streamlit as st

from src.data.models import ICON_KINDS, ROUTE_MODES, IconKind, MarkerForm, RouteMode

_ICON_LABELS: dict[IconKind, str] = {"round": "● 일반 점", "substation": "⚡ 변전소"}
_MODE_LABELS: dict[RouteMode, str] = {"straight": "📏 직선 거리", "road": "🚗 도로 경로"}


def icon_kind_label(kind: IconKind) -> str:
    return _ICON_LABELS.get(kind, str(kind))


def render_add_marker_form() -> MarkerForm | None:
    """좌표 입력으로 마커 추가. 제출되면 MarkerForm, 아니면 None을 반환.

    위도/경도 검증은 호출자가 MarkerForm.to_position()으로 수행한다.
    """
    st.sidebar.header("➕ 새 지점 추가")

    with st.sidebar.form("add_marker_form", clear_on_submit=True):
        name = st.text_input("이름 (선택)", placeholder="비우면 자동 이름")
        capacity = st.text_input("용량 (예: 50 kVA)")
        col_lat, col_lng = st.columns(2)
        lat = col_lat.text_input("위도", placeholder="1.4748")
        lng = col_lng.text_input("경도", placeholder="124.8421")
        icon_kind = st.radio(
            "아이콘",
            options=list(ICON_KINDS),
            format_func=icon_kind_label,
            horizontal=True,
        )
        submitted = st.form_submit_button("지점 추가", use_container_width=True)

    if not submitted:
        return None

    form = MarkerForm(
        lat=lat,
        lng=lng,
        name=name,
        capacity_label=capacity,
        icon_kind=icon_kind,
    )
    if not form.is_complete:
        st.sidebar.warning("위도와 경도를 모두 입력하세요.")
        return None
    return form


def render_mode_selector(current: RouteMode) -> RouteMode:
    st.sidebar.header("📐 측정 방식")
    options = list(ROUTE_MODES)
    selected = st.sidebar.radio(
        "경로 모드",
        options=options,
        index=options.index(current),
        format_func=lambda m: _MODE_LABELS.get(m, str(m)),
        horizontal=True,
        help="도로 경로는 OSRM 라우팅 서비스를 사용하며, 실패하면 직선 거리로 대체합니다.",
    )
    return selected or current


def render_location_button(is_fallback: bool) -> bool:
    """'내 위치로' 버튼. 기본 위치를 쓰는 중이면 안내 문구를 표시."""
    if is_fallback:
        st.sidebar.caption("현재 위치를 가져오지 못해 기본 위치를 사용합니다.")
    return st.sidebar.button("📍 내 위치로", use_container_width=True)
