"""
Pointer and wheel handling for the timeline.

The controller is a reducer: ``handle_event(state, event, tasks, config)``
returns a new ``ViewState`` plus a list of ``Intent`` objects for the store
and the shell. It never touches the committed task list and never draws.

States:
    idle      no drag origin; pointer-down either hits a task (open its
              editor) or starts a drag below the header.
    dragging  a preview task follows the pointer until pointer-up or
              pointer-leave commits it.
"""

from collections import namedtuple
from dataclasses import dataclass, replace
from typing import Optional, Tuple
import logging
import uuid

from config import HEADER_HEIGHT, PREVIEW_ID, NEW_TASK_TITLE, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR
from core_logic import (
    clamp_zoom, rect_contains, resolve_task_rect, row_at, unit_duration, x_to_date,
)

logger = logging.getLogger(__name__)

CREATE_TASK = 'create_task'
UPDATE_TASK = 'update_task'
DELETE_TASK = 'delete_task'
ADD_MEMBER = 'add_member'
REQUEST_EDITOR = 'request_editor'

Intent = namedtuple('Intent', ['kind', 'payload'])


def create_task(task):
    return Intent(CREATE_TASK, task)


def update_task(task):
    return Intent(UPDATE_TASK, task)


def delete_task(task_id):
    return Intent(DELETE_TASK, task_id)


def add_member(name, role=None):
    return Intent(ADD_MEMBER, {"name": name, "role": role})


def request_editor(task_id):
    return Intent(REQUEST_EDITOR, task_id)


# --- Events ---

@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerLeave:
    pass


@dataclass(frozen=True)
class Wheel:
    delta_x: float = 0.0
    delta_y: float = 0.0
    ctrl: bool = False
    meta: bool = False


@dataclass(frozen=True)
class ViewState:
    zoom: float = 1.0
    pan: float = 0.0
    preview: Optional[dict] = None
    drag_origin: Optional[Tuple[float, float]] = None

    @property
    def mode(self):
        return 'dragging' if self.drag_origin is not None else 'idle'


def hit_test(tasks, x, y, config, zoom=1.0, pan=0.0):
    """First task (in store order) whose bar contains the point, or None."""
    for task in tasks:
        if rect_contains(resolve_task_rect(task, config, zoom, pan), x, y):
            return task
    return None


def _default_id():
    return uuid.uuid4().hex


def on_pointer_down(state, event, tasks, config):
    if state.mode == 'dragging':
        return state, []

    clicked = hit_test(tasks, event.x, event.y, config, state.zoom, state.pan)
    if clicked is not None:
        return state, [request_editor(clicked['id'])]

    if event.y <= HEADER_HEIGHT:
        return state, []

    start = x_to_date(event.x, config, state.zoom, state.pan)
    preview = {
        "id": PREVIEW_ID,
        "title": NEW_TASK_TITLE,
        "start": start,
        "end": start + unit_duration(config.time_unit),
        "row": row_at(event.y),
    }
    return replace(state, preview=preview, drag_origin=(event.x, event.y)), []


def on_pointer_move(state, event, config):
    if state.mode != 'dragging' or state.preview is None:
        return state, []

    origin_date = x_to_date(state.drag_origin[0], config, state.zoom, state.pan)
    pointer_date = x_to_date(event.x, config, state.zoom, state.pan)
    preview = dict(state.preview)
    preview['start'] = min(origin_date, pointer_date)
    preview['end'] = max(origin_date, pointer_date) + unit_duration(config.time_unit)
    return replace(state, preview=preview), []


def on_pointer_up(state, id_factory=None):
    if state.mode != 'dragging':
        return state, []

    intents = []
    if state.preview is not None:
        task = dict(state.preview)
        task['id'] = (id_factory or _default_id)()
        # The insert must land before the editor opens on it.
        intents = [create_task(task), request_editor(task['id'])]
        logger.debug("Committing dragged task %s on row %s", task['id'], task.get('row'))
    return replace(state, preview=None, drag_origin=None), intents


def on_wheel(state, event):
    if event.ctrl or event.meta:
        factor = ZOOM_OUT_FACTOR if event.delta_y > 0 else ZOOM_IN_FACTOR
        return replace(state, zoom=clamp_zoom(state.zoom * factor)), []
    return replace(state, pan=state.pan - event.delta_x - event.delta_y), []


def handle_event(state, event, tasks, config, id_factory=None):
    """Applies one input event. Returns ``(new_state, intents)``."""
    if isinstance(event, PointerDown):
        return on_pointer_down(state, event, tasks, config)
    elif isinstance(event, PointerMove):
        return on_pointer_move(state, event, config)
    elif isinstance(event, (PointerUp, PointerLeave)):
        # Leaving the surface mid-drag commits, same as releasing.
        return on_pointer_up(state, id_factory)
    elif isinstance(event, Wheel):
        return on_wheel(state, event)
    raise TypeError(f"Unsupported event: {event!r}")
