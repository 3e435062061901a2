"""SessionController 시나리오 테스트."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from conftest import POINT_A, POINT_B, POINT_C, make_resolver, osrm_payload

from src.core.config import settings
from src.core.exceptions import InvalidCoordinateError, MarkerNotFoundError
from src.core.session import SessionController
from src.data.geo import distance_km
from src.data.marker_store import MarkerStore
from src.data.models import Coordinate, MarkerForm, RouteResult
from src.data.route_resolver import RouteResolver
from src.data.selection import SelectionTracker
from src.ui.renderer import FoliumMapRenderer


def _controller(
    store: MarkerStore,
    tracker: SelectionTracker,
    resolver: RouteResolver,
    **kwargs,
) -> SessionController:
    return SessionController(store=store, tracker=tracker, resolver=resolver, **kwargs)


def _add_three(controller: SessionController) -> None:
    controller.add_marker_at(POINT_A)
    controller.add_marker_at(POINT_B)
    controller.add_marker_at(POINT_C)


def test_two_selected_markers_straight_distance(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    controller.add_marker_at(POINT_A)
    controller.add_marker_at(POINT_B)
    controller.toggle_selection(1)
    controller.toggle_selection(2)

    route = asyncio.run(controller.refresh())

    assert route.kind == "straight"
    assert len(route.segments) == 1
    assert route.total_km == pytest.approx(1.051, abs=0.005)
    assert controller.snapshot().total_label == f"{route.total_km:.2f} km"
    assert controller.is_route_pending is False


def test_reverse_selection_order(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    controller.toggle_selection(3)
    controller.toggle_selection(1)

    route = asyncio.run(controller.refresh())

    assert [(s.from_id, s.to_id) for s in route.segments] == [(3, 1)]
    assert route.polyline == [POINT_C, POINT_A]
    assert controller.aggregate.formatted_segments[0].label == "Point 3 → Point 1"


def test_single_selection_has_no_total(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    controller.toggle_selection(2)

    asyncio.run(controller.refresh())

    assert controller.route.is_empty
    assert controller.snapshot().total_label is None
    assert controller.aggregate.formatted_total is None


def test_delete_selected_marker_prunes_and_recomputes(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    for marker_id in (1, 2, 3):
        controller.toggle_selection(marker_id)
    asyncio.run(controller.refresh())
    assert len(controller.route.segments) == 2

    controller.delete_marker(2)
    assert controller.selection() == (1, 3)
    assert controller.is_route_pending is True

    route = asyncio.run(controller.refresh())
    assert [(s.from_id, s.to_id) for s in route.segments] == [(1, 3)]
    assert route.total_km == pytest.approx(distance_km(POINT_A, POINT_C))


def test_delete_unknown_marker_raises(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    with pytest.raises(MarkerNotFoundError):
        controller.delete_marker(7)


def test_clear_markers_resets_everything(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    asyncio.run(controller.refresh())

    controller.clear_markers()
    route = asyncio.run(controller.refresh())

    assert controller.markers() == []
    assert controller.selection() == ()
    assert route.is_empty


def test_road_mode_uses_service_distance(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    controller.add_marker_at(POINT_A)
    controller.add_marker_at(POINT_B)
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    controller.set_mode("road")

    route = asyncio.run(controller.refresh())

    assert route.kind == "road"
    assert route.total_km == pytest.approx(1.234)
    assert controller.snapshot().mode == "road"


def test_road_failure_shows_straight_fallback(
    store: MarkerStore, tracker: SelectionTracker, failing_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, failing_resolver, mode="road")
    controller.add_marker_at(POINT_A)
    controller.add_marker_at(POINT_B)
    controller.toggle_selection(1)
    controller.toggle_selection(2)

    route = asyncio.run(controller.refresh())

    assert route.kind == "straight_fallback"
    assert route.total_km == pytest.approx(distance_km(POINT_A, POINT_B))


def test_set_mode(store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver) -> None:
    controller = _controller(store, tracker, ok_resolver)
    asyncio.run(controller.refresh())
    assert controller.is_route_pending is False

    controller.set_mode("straight")
    assert controller.is_route_pending is False

    controller.set_mode("road")
    assert controller.is_route_pending is True

    with pytest.raises(ValueError):
        controller.set_mode("walk")  # type: ignore[arg-type]
    assert controller.mode == "road"


def test_stale_route_result_is_discarded(store: MarkerStore, tracker: SelectionTracker) -> None:
    async def scenario() -> tuple[SessionController, RouteResult, RouteResult]:
        gate = asyncio.Event()
        calls: list[httpx.Request] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                await gate.wait()
                return httpx.Response(200, json=osrm_payload(distance_m=9999.0))
            return httpx.Response(200, json=osrm_payload(distance_m=2000.0))

        controller = _controller(store, tracker, make_resolver(handler), mode="road")
        _add_three(controller)
        controller.toggle_selection(1)
        controller.toggle_selection(2)

        slow = asyncio.create_task(controller.refresh())
        while not calls:
            await asyncio.sleep(0)

        controller.toggle_selection(3)
        fresh = await controller.refresh()

        gate.set()
        late = await slow
        return controller, fresh, late

    controller, fresh, late = asyncio.run(scenario())

    assert fresh.total_km == pytest.approx(2.0)
    assert controller.route.total_km == pytest.approx(2.0)
    # 늦게 도착한 첫 요청 결과는 반영되지 않는다
    assert late is controller.route
    assert len(controller.route.segments) == 2
    assert controller.is_route_pending is False


def test_moving_selected_marker_invalidates_route(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    asyncio.run(controller.refresh())

    controller.move_marker(3, Coordinate(lat=1.5, lng=124.9))
    assert controller.is_route_pending is False

    moved = Coordinate(lat=1.4810, lng=124.8510)
    controller.move_marker(2, moved)
    assert controller.is_route_pending is True

    route = asyncio.run(controller.refresh())
    assert route.total_km == pytest.approx(distance_km(POINT_A, moved))


def test_rename_selected_marker_keeps_route(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    asyncio.run(controller.refresh())

    controller.edit_marker(1, MarkerForm(lat=str(POINT_A.lat), lng=str(POINT_A.lng), name="Tiang"))

    assert controller.is_route_pending is False
    assert controller.aggregate.formatted_segments[0].from_name == "Tiang"


def test_invalid_edit_leaves_state_unchanged(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    _add_three(controller)
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    asyncio.run(controller.refresh())
    before = controller.route

    with pytest.raises(InvalidCoordinateError):
        controller.edit_marker(1, MarkerForm(lat="95", lng="10", name="Bad"))

    assert store.get(1).name == "Point 1"
    assert store.get(1).position == POINT_A
    assert controller.route is before
    assert controller.is_route_pending is False


def test_edit_with_blank_name_keeps_name(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    controller.add_marker_at(POINT_A)
    updated = controller.edit_marker(
        1, MarkerForm(lat="1.5", lng="124.9", name="  ", capacity_label="50 kVA", icon_kind="substation")
    )
    assert updated.name == "Point 1"
    assert updated.capacity_label == "50 kVA"
    assert updated.icon_kind == "substation"
    assert updated.position == Coordinate(lat=1.5, lng=124.9)


def test_add_marker_from_form(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    marker = controller.add_marker_from_form(
        MarkerForm(lat="1.4748", lng="124.8421", name="", capacity_label="25 kVA")
    )
    assert marker.name == "Point 1"
    assert marker.capacity_label == "25 kVA"

    with pytest.raises(InvalidCoordinateError):
        controller.add_marker_from_form(MarkerForm(lat="abc", lng="124"))
    assert len(controller.markers()) == 1


def test_renderer_is_kept_in_sync(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    renderer = FoliumMapRenderer()
    controller = _controller(store, tracker, ok_resolver, renderer=renderer)
    _add_three(controller)
    assert sorted(renderer.markers) == [1, 2, 3]

    controller.toggle_selection(1)
    controller.toggle_selection(3)
    assert renderer.selection == (1, 3)

    asyncio.run(controller.refresh())
    assert len(renderer.polylines) == 1
    assert renderer.polylines[0].color == settings.straight_line_color
    assert [lb.text for lb in renderer.labels] == [f"{distance_km(POINT_A, POINT_C):.2f} km"]

    controller.set_mode("road")
    asyncio.run(controller.refresh())
    assert len(renderer.polylines) == 1
    assert renderer.polylines[0].color == settings.road_line_color
    assert len(renderer.polylines[0].points) == 3

    controller.move_marker(2, Coordinate(lat=1.0, lng=124.0))
    assert renderer.markers[2].lat == 1.0

    controller.delete_marker(3)
    assert 3 not in renderer.markers
    assert renderer.selection == (1,)

    asyncio.run(controller.refresh())
    assert renderer.polylines == []
    assert renderer.labels == []

    controller.clear_markers()
    assert renderer.markers == {}


def test_route_listener_receives_applied_results(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    seen: list[RouteResult] = []
    unsubscribe = controller.subscribe_route(seen.append)

    controller.add_marker_at(POINT_A)
    controller.add_marker_at(POINT_B)
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    asyncio.run(controller.refresh())
    assert len(seen) == 1

    unsubscribe()
    asyncio.run(controller.refresh())
    assert len(seen) == 1


def test_auto_refresh_schedules_on_running_loop(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    async def scenario() -> SessionController:
        controller = _controller(store, tracker, ok_resolver, auto_refresh=True)
        controller.add_marker_at(POINT_A)
        controller.add_marker_at(POINT_B)
        controller.toggle_selection(1)
        controller.toggle_selection(2)
        assert controller.is_route_pending is True
        await controller.wait_idle()
        return controller

    controller = asyncio.run(scenario())
    assert controller.is_route_pending is False
    assert len(controller.route.segments) == 1


def test_request_refresh_without_loop_returns_none(
    store: MarkerStore, tracker: SelectionTracker, ok_resolver: RouteResolver
) -> None:
    controller = _controller(store, tracker, ok_resolver)
    assert controller.request_refresh() is None
