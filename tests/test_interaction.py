"""
Unit tests for the interaction module.

Tests cover:
- hit_test: pointer hits against task bars
- handle_event: pointer-down / move / up / leave transitions and emitted intents
- wheel handling: zoom clamping and panning
"""

import pytest
from datetime import datetime, timedelta
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import HEADER_HEIGHT, PADDING, PREVIEW_ID, NEW_TASK_TITLE, MIN_TASK_WIDTH
from core_logic import TimelineConfig, x_to_date, resolve_task_rect
from interaction import (
    ViewState, PointerDown, PointerMove, PointerUp, PointerLeave, Wheel,
    handle_event, hit_test, CREATE_TASK, REQUEST_EDITOR,
)
from scene import Snapshot, build_scene

ORIGIN = datetime(2024, 1, 1)
ROW0_Y = HEADER_HEIGHT + PADDING + 10


@pytest.fixture
def config():
    return TimelineConfig(start_date=ORIGIN, time_unit='days', units_to_show=30, unit_width=100)


def make_task(task_id, start_day, end_day, row=0):
    return {
        "id": task_id,
        "title": f"Task {task_id}",
        "start": ORIGIN + timedelta(days=start_day),
        "end": ORIGIN + timedelta(days=end_day),
        "row": row,
    }


def ids():
    counter = iter(range(1, 100))
    return lambda: f"task-{next(counter)}"


def drag(config, x_from, x_to, y=ROW0_Y, tasks=()):
    state, _ = handle_event(ViewState(), PointerDown(x_from, y), list(tasks), config)
    state, _ = handle_event(state, PointerMove(x_to, y), list(tasks), config)
    return state


class TestHitTest:
    """Tests for hit_test."""

    def test_empty_board_misses(self, config):
        assert hit_test([], 150, ROW0_Y, config) is None

    def test_hit_inside_bar(self, config):
        task = make_task("a", 1, 5)
        assert hit_test([task], 300, ROW0_Y, config) is task

    def test_first_task_in_store_order_wins(self, config):
        first, second = make_task("a", 1, 5), make_task("b", 2, 6)
        assert hit_test([first, second], 350, ROW0_Y, config)['id'] == "a"
        assert hit_test([second, first], 350, ROW0_Y, config)['id'] == "b"

    def test_minimum_width_area_is_clickable(self, config):
        """Clicks land on what is drawn, including the widened part of short tasks."""
        task = make_task("a", 1, 1)
        task['end'] = task['start'] + timedelta(hours=1)
        x, y, width, height = resolve_task_rect(task, config)
        assert width == MIN_TASK_WIDTH
        assert hit_test([task], x + width - 1, y + 1, config) is task

    def test_matches_drawn_rectangles(self, config):
        tasks = [make_task("a", 1, 5), make_task("b", 3, 4, row=2)]
        snapshot = Snapshot(tasks=tasks, config=config, zoom=1.7, pan=-60)
        bars = [c for c in build_scene(snapshot, 2000, 600) if c['type'] == 'task_bar']
        for bar in bars:
            center = (bar['x'] + bar['width'] / 2, bar['y'] + bar['height'] / 2)
            assert hit_test(tasks, *center, config, 1.7, -60)['id'] == bar['task_id']

    def test_other_row_misses(self, config):
        assert hit_test([make_task("a", 1, 5, row=1)], 300, ROW0_Y, config) is None


class TestPointerDown:
    """Tests for pointer-down handling."""

    def test_click_on_task_requests_editor(self, config):
        tasks = [make_task("a", 1, 5)]
        state = ViewState()
        new_state, intents = handle_event(state, PointerDown(300, ROW0_Y), tasks, config)
        assert new_state == state
        assert new_state.mode == 'idle'
        assert [(i.kind, i.payload) for i in intents] == [(REQUEST_EDITOR, "a")]

    def test_click_on_empty_board_starts_drag(self, config):
        """Pointer-down at (150, 90) creates a preview on row 0 at x_to_date(150)."""
        state, intents = handle_event(ViewState(), PointerDown(150, 90), [], config)
        assert intents == []
        assert state.mode == 'dragging'
        assert state.drag_origin == (150, 90)
        assert state.preview['id'] == PREVIEW_ID
        assert state.preview['title'] == NEW_TASK_TITLE
        assert state.preview['row'] == 0
        assert state.preview['start'] == x_to_date(150, config)
        assert state.preview['end'] - state.preview['start'] == timedelta(days=1)

    def test_row_is_derived_from_y(self, config):
        state, _ = handle_event(ViewState(), PointerDown(150, HEADER_HEIGHT + PADDING + 3 * 40 + 5), [], config)
        assert state.preview['row'] == 3

    def test_click_in_header_does_nothing(self, config):
        state, intents = handle_event(ViewState(), PointerDown(150, HEADER_HEIGHT), [], config)
        assert state == ViewState()
        assert intents == []

    def test_preview_respects_zoom_and_pan(self, config):
        start_state = ViewState(zoom=2.0, pan=-300)
        state, _ = handle_event(start_state, PointerDown(500, ROW0_Y), [], config)
        assert state.preview['start'] == x_to_date(500, config, 2.0, -300)
        assert state.zoom == 2.0 and state.pan == -300

    def test_input_is_not_mutated(self, config):
        tasks = [make_task("a", 10, 12)]
        snapshot = [dict(t) for t in tasks]
        state = ViewState()
        handle_event(state, PointerDown(150, ROW0_Y), tasks, config)
        assert tasks == snapshot
        assert state == ViewState()


class TestDragging:
    """Tests for pointer-move while dragging."""

    def test_move_right_extends_end(self, config):
        state = drag(config, 150, 450)
        assert state.preview['start'] == x_to_date(150, config)
        assert state.preview['end'] == x_to_date(450, config) + timedelta(days=1)

    def test_move_left_moves_start(self, config):
        state = drag(config, 450, 150)
        assert state.preview['start'] == x_to_date(150, config)
        assert state.preview['end'] == x_to_date(450, config) + timedelta(days=1)

    @pytest.mark.parametrize("a,b", [(150, 450), (0, 1), (-320, 75.5), (200, 200)])
    def test_drag_direction_does_not_matter(self, config, a, b):
        forward, backward = drag(config, a, b), drag(config, b, a)
        assert (forward.preview['start'], forward.preview['end']) == \
               (backward.preview['start'], backward.preview['end'])
        assert forward.preview['end'] > forward.preview['start']

    def test_move_keeps_row(self, config):
        y = HEADER_HEIGHT + PADDING + 2 * 40 + 1
        state = drag(config, 100, 300, y=y)
        assert state.preview['row'] == 2

    def test_move_while_idle_is_ignored(self, config):
        state, intents = handle_event(ViewState(), PointerMove(300, ROW0_Y), [], config)
        assert state == ViewState()
        assert intents == []

    def test_second_pointer_down_while_dragging_is_ignored(self, config):
        state = drag(config, 150, 450)
        again, intents = handle_event(state, PointerDown(900, ROW0_Y), [], config)
        assert again == state
        assert intents == []


class TestPointerUp:
    """Tests for committing a drag."""

    def test_release_commits_preview(self, config):
        state = drag(config, 150, 450)
        preview = state.preview
        new_state, intents = handle_event(state, PointerUp(), [], config, id_factory=ids())

        assert new_state.mode == 'idle'
        assert new_state.preview is None
        assert new_state.drag_origin is None

        assert [i.kind for i in intents] == [CREATE_TASK, REQUEST_EDITOR]
        created = intents[0].payload
        assert created['id'] == "task-1"
        assert intents[1].payload == "task-1"
        assert (created['start'], created['end'], created['row']) == (preview['start'], preview['end'], preview['row'])
        # The preview in the previous state keeps its sentinel id.
        assert preview['id'] == PREVIEW_ID

    def test_leave_commits_like_release(self, config):
        state = drag(config, 150, 450)
        up_state, up_intents = handle_event(state, PointerUp(), [], config, id_factory=ids())
        leave_state, leave_intents = handle_event(state, PointerLeave(), [], config, id_factory=ids())
        assert up_state == leave_state
        assert up_intents == leave_intents

    def test_release_without_move_commits_one_unit_task(self, config):
        state, _ = handle_event(ViewState(), PointerDown(150, ROW0_Y), [], config)
        _, intents = handle_event(state, PointerUp(), [], config, id_factory=ids())
        created = intents[0].payload
        assert created['end'] - created['start'] == timedelta(days=1)

    def test_default_ids_are_unique(self, config):
        state = drag(config, 150, 450)
        _, first = handle_event(state, PointerUp(), [], config)
        _, second = handle_event(state, PointerUp(), [], config)
        assert first[0].payload['id'] != second[0].payload['id']
        assert first[0].payload['id'] != PREVIEW_ID

    @pytest.mark.parametrize("event", [PointerUp(), PointerLeave()])
    def test_release_while_idle_is_ignored(self, config, event):
        state, intents = handle_event(ViewState(zoom=1.5), event, [], config)
        assert state == ViewState(zoom=1.5)
        assert intents == []


class TestWheel:
    """Tests for wheel zoom and pan."""

    def test_ctrl_wheel_down_zooms_out(self, config):
        """Wheel delta_y=100 with ctrl held at zoom 1 gives zoom 0.9."""
        state, intents = handle_event(ViewState(), Wheel(0, 100, ctrl=True), [], config)
        assert state.zoom == pytest.approx(0.9)
        assert intents == []

    def test_meta_wheel_up_zooms_in(self, config):
        state, _ = handle_event(ViewState(), Wheel(0, -100, meta=True), [], config)
        assert state.zoom == pytest.approx(1.1)

    def test_zoom_out_is_clamped(self, config):
        state = ViewState()
        for _ in range(50):
            state, _ = handle_event(state, Wheel(0, 100, ctrl=True), [], config)
            assert state.zoom >= 0.5
        assert state.zoom == 0.5

    def test_zoom_in_is_clamped(self, config):
        state = ViewState()
        for _ in range(50):
            state, _ = handle_event(state, Wheel(0, -100, ctrl=True), [], config)
            assert state.zoom <= 3.0
        assert state.zoom == 3.0

    def test_plain_wheel_pans(self, config):
        state, _ = handle_event(ViewState(pan=10), Wheel(30, 100), [], config)
        assert state.pan == -120
        assert state.zoom == 1.0

    def test_pan_is_unbounded(self, config):
        state = ViewState()
        for _ in range(1000):
            state, _ = handle_event(state, Wheel(0, -500), [], config)
        assert state.pan == 500_000

    def test_wheel_during_drag_keeps_preview(self, config):
        state = drag(config, 150, 450)
        zoomed, _ = handle_event(state, Wheel(0, -100, ctrl=True), [], config)
        assert zoomed.preview == state.preview
        assert zoomed.mode == 'dragging'

    def test_unknown_event_raises_error(self, config):
        with pytest.raises(TypeError):
            handle_event(ViewState(), object(), [], config)
