"""Plotly 기반 구간 거리 차트."""

from __future__ import annotations

from typing import TYPE_CHECKING

import plotly.graph_objects as go
import streamlit as st

from src.core.config import settings

if TYPE_CHECKING:
    from src.data.distance import DistanceAggregator


def build_segment_chart(aggregate: DistanceAggregator) -> go.Figure | None:
    """구간별 직선 거리 수평 바 차트. 구간이 없으면 None."""
    views = aggregate.formatted_segments
    if not views:
        return None

    # 위에서 아래로 선택 순서대로 보이도록 뒤집는다
    views = list(reversed(views))
    fig = go.Figure(
        go.Bar(
            x=[v.distance_km for v in views],
            y=[f"{v.index}. {v.label}" for v in views],
            orientation="h",
            marker_color=settings.straight_line_color,
            text=[v.formatted_distance for v in views],
            textposition="auto",
        )
    )

    fig.update_layout(
        title="구간별 거리",
        xaxis_title="거리 (km)",
        yaxis_title="",
        height=max(220, len(views) * 40 + 80),
        margin=dict(l=10, r=10, t=40, b=30),
    )
    return fig


def render_segment_chart(aggregate: DistanceAggregator) -> None:
    fig = build_segment_chart(aggregate)
    if fig is None:
        return
    st.plotly_chart(fig, use_container_width=True)
