"""거리 집계 — RouteResult에서 총거리/구간별 표시값을 파생한다."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.data.geo import format_km

if TYPE_CHECKING:
    from collections.abc import Mapping

    from src.data.models import RouteResult


@dataclass(frozen=True)
class SegmentView:
    index: int
    from_name: str
    to_name: str
    distance_km: float

    @property
    def label(self) -> str:
        return f"{self.from_name} → {self.to_name}"

    @property
    def formatted_distance(self) -> str:
        return format_km(self.distance_km)


class DistanceAggregator:
    def __init__(self, route: RouteResult, names: Mapping[int, str] | None = None) -> None:
        self._route = route
        self._names = dict(names or {})

    @property
    def route(self) -> RouteResult:
        return self._route

    @property
    def total_km(self) -> float:
        return self._route.total_km

    @property
    def formatted_total(self) -> str | None:
        """구간이 없으면 None (화면에서 총거리 숨김)."""
        if self._route.is_empty:
            return None
        return format_km(self._route.total_km)

    @property
    def segment_sum_km(self) -> float:
        return sum(s.distance_km for s in self._route.segments)

    @property
    def formatted_segments(self) -> list[SegmentView]:
        views: list[SegmentView] = []
        for i, seg in enumerate(self._route.segments, start=1):
            views.append(
                SegmentView(
                    index=i,
                    from_name=self._name(seg.from_id),
                    to_name=self._name(seg.to_id),
                    distance_km=seg.distance_km,
                )
            )
        return views

    def _name(self, marker_id: int | None) -> str:
        if marker_id is None:
            return "?"
        return self._names.get(marker_id, f"#{marker_id}")
