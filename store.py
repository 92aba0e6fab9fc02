import copy
import logging
import uuid
from datetime import datetime, timedelta

from config import TEAM_COLORS, PRIORITY_COLORS, PREVIEW_ID, sample_members, sample_tasks
from interaction import CREATE_TASK, UPDATE_TASK, DELETE_TASK, ADD_MEMBER, REQUEST_EDITOR
from scene import Snapshot

logger = logging.getLogger(__name__)


def _new_id():
    return uuid.uuid4().hex


def validate_task(task):
    """Raises ValueError describing the first problem found with a task record."""
    if not task.get('id'):
        raise ValueError("Task is missing an id.")
    if task['id'] == PREVIEW_ID:
        raise ValueError(f"'{PREVIEW_ID}' is reserved for the drag preview and cannot be stored.")
    if not str(task.get('title') or '').strip():
        raise ValueError(f"Task '{task['id']}' needs a title.")

    start, end = task.get('start'), task.get('end')
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        raise ValueError(f"Task '{task['title']}' needs a start and an end date.")
    if start.tzinfo is not None or end.tzinfo is not None:
        raise ValueError(f"Task '{task['title']}' must use dates without a time zone.")
    if end <= start:
        raise ValueError(f"Task '{task['title']}' must end after it starts.")

    priority = task.get('priority')
    if priority is not None and priority not in PRIORITY_COLORS:
        raise ValueError(f"Invalid priority '{priority}' for '{task['title']}'. "
                         f"Use one of: {', '.join(PRIORITY_COLORS)}.")

    progress = task.get('progress')
    if progress is not None and not 0 <= progress <= 100:
        raise ValueError(f"Progress for '{task['title']}' must be between 0 and 100.")

    row = task.get('row')
    if row is not None and (not isinstance(row, int) or row < 0):
        raise ValueError(f"Row for '{task['title']}' must be a non-negative whole number.")


class TaskStore:
    """
    Canonical task and team member collections.

    The timeline only reads snapshots of these lists; every change goes
    through the methods below (usually via ``apply`` with an intent emitted
    by the interaction controller or a dialog).
    """

    def __init__(self, tasks=None, members=None):
        self.tasks = []
        self.members = []
        for member in members or []:
            self.members.append(copy.deepcopy(member))
        for task in tasks or []:
            self.create_task(task)

    # --- Tasks ---

    def get_task(self, task_id):
        return next((t for t in self.tasks if t['id'] == task_id), None)

    def next_free_row(self):
        """First row below every stored task."""
        return max((t.get('row') or 0 for t in self.tasks), default=-1) + 1

    def create_task(self, task):
        validate_task(task)
        if self.get_task(task['id']) is not None:
            raise ValueError(f"A task with id '{task['id']}' already exists.")
        new_task = copy.deepcopy(task)
        self.tasks.append(new_task)
        logger.debug("Created task %s (%s)", new_task['id'], new_task['title'])
        return new_task

    def update_task(self, task):
        for i, existing in enumerate(self.tasks):
            if existing['id'] == task.get('id'):
                validate_task(task)
                self.tasks[i] = copy.deepcopy(task)
                logger.debug("Updated task %s", task['id'])
                return self.tasks[i]
        raise KeyError(f"No task with id '{task.get('id')}'.")

    def delete_task(self, task_id):
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t['id'] != task_id]
        if len(self.tasks) == before:
            logger.debug("Delete ignored, no task with id %s", task_id)
        else:
            logger.debug("Deleted task %s", task_id)

    # --- Members ---

    def get_member(self, member_id):
        return next((m for m in self.members if m['id'] == member_id), None)

    def add_member(self, name, role=None):
        name = (name or '').strip()
        if not name:
            raise ValueError("Team member needs a name.")
        member = {
            "id": _new_id(),
            "name": name,
            "role": (role or '').strip() or None,
            "color": TEAM_COLORS[len(self.members) % len(TEAM_COLORS)],
        }
        self.members.append(member)
        logger.debug("Added member %s with color %s", member['name'], member['color'])
        return member

    # --- Intents ---

    def apply(self, intent):
        """Carries out one intent. Editor requests return the task to edit."""
        if intent.kind == CREATE_TASK:
            return self.create_task(intent.payload)
        elif intent.kind == UPDATE_TASK:
            return self.update_task(intent.payload)
        elif intent.kind == DELETE_TASK:
            return self.delete_task(intent.payload)
        elif intent.kind == ADD_MEMBER:
            return self.add_member(intent.payload['name'], intent.payload.get('role'))
        elif intent.kind == REQUEST_EDITOR:
            return self.get_task(intent.payload)
        raise ValueError(f"Unknown intent '{intent.kind}'.")

    def snapshot(self, config, state):
        return Snapshot(
            tasks=copy.deepcopy(self.tasks),
            members=copy.deepcopy(self.members),
            config=config,
            preview=copy.deepcopy(state.preview),
            zoom=state.zoom,
            pan=state.pan,
        )

    def clear(self):
        self.tasks = []
        self.members = []

    def load_sample_data(self, today=None):
        """Replaces the board with a small sample roster and three tasks starting after ``today``."""
        if today is None:
            today = datetime.now()
        self.clear()
        added = [self.add_member(m['name'], m.get('role')) for m in sample_members]
        for sample in sample_tasks:
            self.create_task({
                "id": _new_id(),
                "title": sample['title'],
                "start": today + timedelta(days=sample['start_offset']),
                "end": today + timedelta(days=sample['end_offset']),
                "assignee_id": added[sample['assignee']]['id'],
                "progress": sample['progress'],
                "priority": sample['priority'],
                "row": sample['row'],
            })
