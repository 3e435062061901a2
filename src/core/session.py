"""세션 컨트롤러 — 마커/선택/모드 변경을 경로 재계산으로 연결한다.

MarkerStore와 SelectionTracker의 변경 알림을 구독하고, 경로에 영향을 주는 변경이
생기면 세대(generation)를 올린다. refresh()는 선택 순서대로 MarkerStore에서 좌표를
새로 읽어 RouteResolver에 넘기고, 그 사이 더 새로운 요청/변경이 있었다면 결과를 버린다.

동기 호스트(Streamlit)는 변경 후 asyncio.run(controller.refresh())를 호출하고,
비동기 호스트는 auto_refresh=True로 두면 실행 중인 루프에 refresh 태스크가 예약된다.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.config import settings
from src.data.distance import DistanceAggregator
from src.data.geo import format_km
from src.data.marker_store import MarkerStore
from src.data.models import ROUTE_MODES, empty_route
from src.data.route_resolver import RouteResolver
from src.data.selection import SelectionTracker

if TYPE_CHECKING:
    from src.data.marker_store import StoreEvent
    from src.data.models import Coordinate, Marker, MarkerForm, RouteMode, RouteResult
    from src.ui.renderer import MapRenderer

logger = logging.getLogger(__name__)

RouteListener = Callable[["RouteResult"], None]


@dataclass(frozen=True)
class SessionSnapshot:
    """렌더링 레이어에 넘기는 읽기 전용 상태."""

    markers: list[Marker]
    selection: tuple[int, ...]
    mode: RouteMode
    route: RouteResult
    is_route_pending: bool

    @property
    def total_label(self) -> str | None:
        if self.route.is_empty:
            return None
        return format_km(self.route.total_km)


class SessionController:
    def __init__(
        self,
        store: MarkerStore | None = None,
        tracker: SelectionTracker | None = None,
        resolver: RouteResolver | None = None,
        renderer: MapRenderer | None = None,
        mode: RouteMode = "straight",
        auto_refresh: bool = False,
    ) -> None:
        self._store = store if store is not None else MarkerStore()
        self._tracker = tracker if tracker is not None else SelectionTracker(self._store)
        self._resolver = resolver if resolver is not None else RouteResolver()
        self._renderer = renderer
        self._mode: RouteMode = mode
        self._auto_refresh = auto_refresh

        self._route: RouteResult = empty_route(mode)
        self._generation = 0
        self._applied_generation = 0
        self._rendered_ids: set[int] = set()
        self._tasks: set[asyncio.Task[RouteResult]] = set()
        self._route_listeners: list[RouteListener] = []

        self._store.subscribe(self._on_store_event)
        self._tracker.subscribe(self._on_selection_changed)

        if self._renderer is not None:
            for marker in self._store.list():
                self._renderer.add_marker(marker)
                self._rendered_ids.add(marker.id)
            self._renderer.set_selected(self._tracker.current())

        if len(self._tracker) >= 2:
            self._invalidate()

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    @property
    def store(self) -> MarkerStore:
        return self._store

    @property
    def tracker(self) -> SelectionTracker:
        return self._tracker

    @property
    def mode(self) -> RouteMode:
        return self._mode

    @property
    def route(self) -> RouteResult:
        return self._route

    @property
    def is_route_pending(self) -> bool:
        """마지막 변경 이후 경로가 아직 반영되지 않았는지 (로딩 표시용)."""
        return self._applied_generation != self._generation

    @property
    def aggregate(self) -> DistanceAggregator:
        names = {m.id: m.name for m in self._store.list()}
        return DistanceAggregator(self._route, names)

    def markers(self) -> list[Marker]:
        return self._store.list()

    def selection(self) -> tuple[int, ...]:
        return self._tracker.current()

    def selected_markers(self) -> list[Marker]:
        return [self._store.get(i) for i in self._tracker.current() if i in self._store]

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            markers=self._store.list(),
            selection=self._tracker.current(),
            mode=self._mode,
            route=self._route,
            is_route_pending=self.is_route_pending,
        )

    def subscribe_route(self, listener: RouteListener) -> Callable[[], None]:
        self._route_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._route_listeners:
                self._route_listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # 사용자 입력 (모두 동기/원자적)
    # ------------------------------------------------------------------
    def add_marker_at(self, position: Coordinate) -> Marker:
        """지도 클릭으로 기본 이름/아이콘 마커 추가."""
        return self._store.create(position)

    def add_marker_from_form(self, form: MarkerForm) -> Marker:
        """입력 폼으로 마커 추가. 좌표 오류는 InvalidCoordinateError."""
        position = form.to_position()
        return self._store.create(
            position,
            name=form.name,
            capacity_label=form.capacity_label,
            icon_kind=form.icon_kind,
        )

    def move_marker(self, marker_id: int, position: Coordinate) -> Marker:
        return self._store.move(marker_id, position)

    def edit_marker(self, marker_id: int, form: MarkerForm) -> Marker:
        """수정 폼 저장. 이름을 비우면 기존 이름을 유지한다."""
        current = self._store.get(marker_id)
        position = form.to_position()
        return self._store.update(
            marker_id,
            lat=position.lat,
            lng=position.lng,
            name=form.name.strip() or current.name,
            capacity_label=form.capacity_label.strip(),
            icon_kind=form.icon_kind,
        )

    def delete_marker(self, marker_id: int) -> None:
        self._store.delete(marker_id)

    def clear_markers(self) -> None:
        self._store.clear()
        self._tracker.clear()

    def toggle_selection(self, marker_id: int) -> tuple[int, ...]:
        return self._tracker.toggle(marker_id)

    def set_mode(self, mode: RouteMode) -> None:
        if mode not in ROUTE_MODES:
            raise ValueError(f"알 수 없는 경로 모드: {mode!r}")
        if mode == self._mode:
            return
        self._mode = mode
        logger.debug("경로 모드 변경: %s", mode)
        self._invalidate()

    # ------------------------------------------------------------------
    # 경로 재계산
    # ------------------------------------------------------------------
    async def refresh(self) -> RouteResult:
        """현재 선택/모드/좌표로 경로를 계산하고, 최신 요청일 때만 반영한다."""
        generation = self._generation
        ids = [i for i in self._tracker.current() if i in self._store]
        coords = self._store.positions(ids)

        result = await self._resolver.resolve(coords, self._mode, ids)

        if not self._resolver.is_current(result) or generation != self._generation:
            logger.debug(
                "이전 경로 결과 폐기: request_id=%s (latest=%s)",
                result.request_id,
                self._resolver.latest_request_id,
            )
            return self._route

        self._apply(result, generation)
        return result

    def request_refresh(self) -> asyncio.Task[RouteResult] | None:
        """실행 중인 이벤트 루프가 있으면 refresh()를 태스크로 예약."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        task = loop.create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> RouteResult:
        """예약된 refresh 태스크가 모두 끝날 때까지 대기."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        return self._route

    def _invalidate(self) -> None:
        self._generation += 1
        if self._auto_refresh:
            self.request_refresh()

    def _apply(self, result: RouteResult, generation: int) -> None:
        self._route = result
        self._applied_generation = generation
        if result.is_fallback:
            logger.info("도로 경로 대신 직선 거리 표시: %s", format_km(result.total_km))
        self._draw_route(result)
        for listener in list(self._route_listeners):
            listener(result)

    def _draw_route(self, route: RouteResult) -> None:
        if self._renderer is None:
            return
        self._renderer.clear_polylines()
        if route.is_empty:
            return

        color = (
            settings.straight_line_color if route.kind == "straight" else settings.road_line_color
        )
        if route.kind == "straight":
            # 구간마다 별도 선으로 그려 구간 거리 툴팁을 붙인다
            for a, b in zip(route.polyline, route.polyline[1:]):
                self._renderer.draw_polyline([a, b], color)
        else:
            self._renderer.draw_polyline(route.polyline, color)

        for seg in route.segments:
            self._renderer.draw_label(seg.midpoint, format_km(seg.distance_km))

    # ------------------------------------------------------------------
    # 변경 알림
    # ------------------------------------------------------------------
    def _on_store_event(self, event: StoreEvent) -> None:
        if self._renderer is not None:
            self._sync_renderer(event)

        if (
            event.action == "update"
            and event.position_changed
            and event.marker_id in self._tracker
        ):
            self._invalidate()

    def _sync_renderer(self, event: StoreEvent) -> None:
        assert self._renderer is not None
        if event.action == "create" and event.marker_id is not None:
            self._renderer.add_marker(self._store.get(event.marker_id))
            self._rendered_ids.add(event.marker_id)
        elif event.action == "update" and event.marker_id is not None:
            self._renderer.update_marker(self._store.get(event.marker_id))
        elif event.action == "delete" and event.marker_id is not None:
            self._renderer.remove_marker(event.marker_id)
            self._rendered_ids.discard(event.marker_id)
        elif event.action == "clear":
            for marker_id in sorted(self._rendered_ids):
                self._renderer.remove_marker(marker_id)
            self._rendered_ids.clear()

    def _on_selection_changed(self, selection: tuple[int, ...]) -> None:
        if self._renderer is not None:
            self._renderer.set_selected(selection)
        self._invalidate()
