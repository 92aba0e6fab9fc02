"""
Turns the board state into an ordered list of draw commands.

Each command is a plain dict with a ``type`` key (``header_cell``,
``task_bar``, ``progress``, ``marker`` or ``now_line``) and its geometry in
logical pixels. Commands are listed in paint order; the renderer draws them
as-is and never computes positions itself.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import math

from config import (
    HEADER_HEIGHT, PREVIEW_ID, PREVIEW_COLOR, PREVIEW_ALPHA, PRIORITY_COLORS,
)
from core_logic import (
    TimelineConfig, date_to_x, format_unit, is_current_unit, resolve_task_rect,
)

MARKER_INSET = 15
MARKER_DROP = 10
MARKER_RADIUS = 3


@dataclass
class Snapshot:
    """Everything a single frame depends on."""
    tasks: List[dict] = field(default_factory=list)
    members: List[dict] = field(default_factory=list)
    config: TimelineConfig = field(default_factory=TimelineConfig)
    preview: Optional[dict] = None
    zoom: float = 1.0
    pan: float = 0.0


def task_color(task, members_by_id):
    """Preview color first, then the assignee's roster color, then the priority color."""
    if task.get('id') == PREVIEW_ID:
        return PREVIEW_COLOR
    assignee = members_by_id.get(task.get('assignee_id'))
    if assignee and assignee.get('color'):
        return assignee['color']
    return PRIORITY_COLORS.get(task.get('priority') or 'medium', PRIORITY_COLORS['medium'])


def build_header_cells(config, zoom, pan, width, height, today=None):
    cells = []
    cell_width = config.unit_width * zoom
    for i in range(config.units_to_show):
        x = i * cell_width + pan
        if x > width:
            break
        if x < -cell_width:
            continue
        labels = format_unit(i, config)
        cells.append({
            "type": "header_cell",
            "index": i,
            "x": x,
            "width": cell_width,
            "height": height,
            "main": labels["main"],
            "sub": labels["sub"],
            "is_today": is_current_unit(i, config, today),
        })
    return cells


def build_task_commands(task, members_by_id, config, zoom, pan):
    is_preview = task.get('id') == PREVIEW_ID
    x, y, width, height = resolve_task_rect(task, config, zoom, pan)
    assignee = members_by_id.get(task.get('assignee_id'))

    commands = [{
        "type": "task_bar",
        "task_id": task.get('id'),
        "title": task.get('title', ''),
        "x": x,
        "y": y,
        "width": width,
        "height": height,
        "color": task_color(task, members_by_id),
        "alpha": PREVIEW_ALPHA if is_preview else 1.0,
        "is_preview": is_preview,
        "assignee": assignee['name'] if assignee and not is_preview else None,
    }]

    progress = task.get('progress') or 0
    if not is_preview and isinstance(progress, (int, float)) and math.isfinite(progress) and progress > 0:
        fill = max(0.0, min(width, width * progress / 100))
        commands.append({
            "type": "progress",
            "task_id": task.get('id'),
            "x": x,
            "y": y,
            "width": fill,
            "height": height,
        })

    if not is_preview and task.get('priority') == 'critical':
        commands.append({
            "type": "marker",
            "task_id": task.get('id'),
            "x": x + width - MARKER_INSET,
            "y": y + MARKER_DROP,
            "radius": MARKER_RADIUS,
        })
    return commands


def build_now_line(config, zoom, pan, width, height, now):
    if config.time_unit != 'days':
        return None
    x = date_to_x(now, config, zoom, pan)
    if not 0 <= x <= width:
        return None
    return {"type": "now_line", "x": x, "y0": HEADER_HEIGHT, "y1": height}


def build_scene(snapshot, width, height, now=None):
    """
    Builds the draw commands for one frame.

    Header cells come first, then one group of commands per stored task in
    store order, then the preview task (so it paints over committed bars
    during a drag), then the "now" line. Units entirely outside
    ``[0, width]`` produce no commands at all.
    """
    if now is None:
        now = datetime.now()
    config = snapshot.config
    members_by_id = {m['id']: m for m in snapshot.members}

    commands = build_header_cells(config, snapshot.zoom, snapshot.pan, width, height, today=now)

    tasks = list(snapshot.tasks)
    if snapshot.preview is not None:
        tasks.append(snapshot.preview)
    for task in tasks:
        commands.extend(build_task_commands(task, members_by_id, config, snapshot.zoom, snapshot.pan))

    now_line = build_now_line(config, snapshot.zoom, snapshot.pan, width, height, now)
    if now_line is not None:
        commands.append(now_line)
    return commands
