"""지도 렌더링 인터페이스.

SessionController는 지도 위젯 내부를 직접 건드리지 않고 MapRenderer 프로토콜만 호출한다.
FoliumMapRenderer는 호출 내용을 렌더 모델로 보관했다가 rerun마다 folium 지도로 그린다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from src.ui.map_view import build_map

if TYPE_CHECKING:
    import folium

    from src.data.models import Coordinate, Marker


class MapRenderer(Protocol):
    def add_marker(self, marker: Marker) -> None: ...

    def update_marker(self, marker: Marker) -> None: ...

    def remove_marker(self, marker_id: int) -> None: ...

    def set_selected(self, selection: tuple[int, ...]) -> None: ...

    def draw_polyline(self, points: list[Coordinate], color: str) -> None: ...

    def draw_label(self, position: Coordinate, text: str) -> None: ...

    def clear_polylines(self) -> None: ...


@dataclass
class Polyline:
    points: list[Coordinate]
    color: str


@dataclass
class Label:
    position: Coordinate
    text: str


@dataclass
class FoliumMapRenderer:
    markers: dict[int, Marker] = field(default_factory=dict)
    selection: tuple[int, ...] = ()
    polylines: list[Polyline] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)

    def add_marker(self, marker: Marker) -> None:
        self.markers[marker.id] = marker

    def update_marker(self, marker: Marker) -> None:
        self.markers[marker.id] = marker

    def remove_marker(self, marker_id: int) -> None:
        self.markers.pop(marker_id, None)

    def set_selected(self, selection: tuple[int, ...]) -> None:
        self.selection = tuple(selection)

    def draw_polyline(self, points: list[Coordinate], color: str) -> None:
        self.polylines.append(Polyline(points=list(points), color=color))

    def draw_label(self, position: Coordinate, text: str) -> None:
        self.labels.append(Label(position=position, text=text))

    def clear_polylines(self) -> None:
        self.polylines.clear()
        self.labels.clear()

    def build_map(
        self,
        center: Coordinate,
        zoom: float,
        user_location: Coordinate | None = None,
    ) -> folium.Map:
        return build_map(
            markers=list(self.markers.values()),
            selection=self.selection,
            polylines=self.polylines,
            labels=self.labels,
            center=center,
            zoom=zoom,
            user_location=user_location,
        )
