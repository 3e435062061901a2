"""재사용 가능한 UI 컴포넌트 — 마커 색상/툴팁, 경로 상태 배지 등."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.data.models import IconKind, Marker, RouteKind

_ROUND_COLOR = "#ef4444"
_SUBSTATION_COLOR = "#eab308"
_SELECTED_COLOR = "#2563eb"


def marker_color(icon_kind: IconKind, selected: bool = False) -> str:
    """마커 색상 hex 코드.

    - 선택됨 → 파랑
    - 변전소(substation) → 노랑
    - 일반(round) → 빨강
    """
    if selected:
        return _SELECTED_COLOR
    if icon_kind == "substation":
        return _SUBSTATION_COLOR
    return _ROUND_COLOR


def marker_emoji(icon_kind: IconKind) -> str:
    return "⚡" if icon_kind == "substation" else "🔴"


def marker_hover_text(marker: Marker, order: int | None = None) -> str:
    """지도 툴팁. 이름, 용량 라벨(있으면), 위경도 6자리."""
    title = f"<b>{marker.name}</b>"
    if order is not None:
        title = f"<b>{order}. {marker.name}</b>"
    lines = [title]
    if marker.capacity_label:
        lines.append(f"⚡ {marker.capacity_label}")
    lines.append(f"Lat: {marker.lat:.6f}")
    lines.append(f"Lng: {marker.lng:.6f}")
    return "<br>".join(lines)


def route_kind_label(kind: RouteKind) -> str:
    if kind == "road":
        return "도로 경로"
    if kind == "straight_fallback":
        return "직선 거리 (도로 경로 조회 실패)"
    return "직선 거리"


def marker_icon_html(icon_kind: IconKind, selected: bool = False, order: int | None = None) -> str:
    """folium DivIcon용 마커 HTML. 일반은 원(●), 변전소는 삼각형(▲), 선택되면 순서 번호."""
    color = marker_color(icon_kind, selected)
    badge = str(order) if order is not None else ""
    if icon_kind == "substation":
        shape = (
            "width:0;height:0;border-left:12px solid transparent;"
            f"border-right:12px solid transparent;border-bottom:22px solid {color};"
        )
        badge_pos = "left:-12px;width:24px;top:8px;"
    else:
        shape = (
            f"width:20px;height:20px;border-radius:50%;background:{color};"
            "border:2px solid #ffffff;box-shadow:0 0 3px rgba(0,0,0,0.5);"
        )
        badge_pos = "left:0;right:0;top:2px;"
    return (
        f'<div style="position:relative;{shape}">'
        f'<span style="position:absolute;{badge_pos}text-align:center;'
        f'font:bold 11px sans-serif;color:#ffffff;">{badge}</span></div>'
    )


def distance_label_html(text: str) -> str:
    """구간 중간점에 표시하는 거리 라벨."""
    return (
        '<div style="display:inline-block;padding:1px 6px;border-radius:4px;'
        "background:rgba(255,255,255,0.9);border:1px solid #94a3b8;"
        f'font:12px sans-serif;color:#0f172a;white-space:nowrap;">{text}</div>'
    )
