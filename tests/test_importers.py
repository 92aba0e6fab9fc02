"""
Unit tests for the importers module.

Tests cover:
- auto_map_columns: guessing the column mapping from header names
- tasks_from_frame: row conversion, defaults and skipped rows
- import_from_file: reading CSV files from disk
"""

import pytest
from datetime import datetime, timedelta
import sys
import os

import pandas as pd

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from importers import auto_map_columns, tasks_from_frame, import_from_file, read_table
from store import TaskStore, validate_task
from core_logic import TimelineConfig
from interaction import ViewState
from scene import build_scene

DEFAULT_START = datetime(2024, 1, 1)

CSV_TEXT = """Task Title,Start Date,End Date,Assignee,Progress,Priority
Research,2024-01-02,2024-01-06,sarah chen,80,High
Design,2024-01-04,,Nobody,45%,someday
,2024-01-05,2024-01-07,,,
Build,,2024-01-03,,,critical
"""


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "tasks.csv"
    path.write_text(CSV_TEXT)
    return path


@pytest.fixture
def members():
    store = TaskStore()
    store.add_member("Sarah Chen", "Project Manager")
    return store.members


class TestAutoMapColumns:
    """Tests for auto_map_columns."""

    def test_matches_by_name(self):
        mapping = auto_map_columns(["Task Title", "Start Date", "End Date", "Assignee", "Progress", "Priority"])
        assert mapping == {
            "Title": "Task Title",
            "Start": "Start Date",
            "End": "End Date",
            "Assignee": "Assignee",
            "Progress": "Progress",
            "Priority": "Priority",
        }

    def test_normalises_separators(self):
        assert auto_map_columns(["task_title", "row"]) == {"Title": "task_title", "Row": "row"}

    def test_unmatched_columns_are_left_out(self):
        assert auto_map_columns(["Budget", "Notes"]) == {}


class TestTasksFromFrame:
    """Tests for tasks_from_frame."""

    def test_title_mapping_required(self):
        with pytest.raises(ValueError) as exc_info:
            tasks_from_frame(pd.DataFrame({"Name": ["A"]}), {}, DEFAULT_START)
        assert "Title" in str(exc_info.value)

    def test_missing_column_raises_error(self):
        with pytest.raises(ValueError) as exc_info:
            tasks_from_frame(pd.DataFrame({"Name": ["A"]}), {"Title": "Task"}, DEFAULT_START)
        assert "does not exist" in str(exc_info.value)

    def test_minimal_rows(self):
        df = pd.DataFrame({"Name": ["A", "B"]})
        tasks = tasks_from_frame(df, {"Title": "Name"}, DEFAULT_START)
        assert [t['title'] for t in tasks] == ["A", "B"]
        assert [t['row'] for t in tasks] == [0, 1]
        assert all(t['start'] == DEFAULT_START for t in tasks)
        assert all(t['end'] == DEFAULT_START + timedelta(days=1) for t in tasks)
        assert len({t['id'] for t in tasks}) == 2

    def test_explicit_row_column(self):
        df = pd.DataFrame({"Name": ["A", "B"], "Lane": [4, -1]})
        tasks = tasks_from_frame(df, {"Title": "Name", "Row": "Lane"}, DEFAULT_START)
        assert [t['row'] for t in tasks] == [4, 0]

    def test_default_rows_start_at_first_row(self):
        df = pd.DataFrame({"Name": ["A", "B", "C"], "Lane": [None, 0, None]})
        tasks = tasks_from_frame(df, {"Title": "Name", "Row": "Lane"}, DEFAULT_START, first_row=5)
        assert [t['row'] for t in tasks] == [5, 0, 7]

    def test_zoned_timestamps_become_naive(self):
        df = pd.DataFrame({
            "Name": ["Launch"],
            "Start": ["2024-01-02T00:00:00Z"],
            "End": ["2024-01-05T00:00:00Z"],
        })
        tasks = tasks_from_frame(df, {"Title": "Name", "Start": "Start", "End": "End"}, DEFAULT_START)
        task = tasks[0]
        assert task['start'].tzinfo is None
        assert task['end'].tzinfo is None
        assert task['end'] - task['start'] == timedelta(days=3)

        # The board still renders with the imported task on it.
        store = TaskStore()
        store.create_task(task)
        config = TimelineConfig(start_date=DEFAULT_START)
        commands = build_scene(store.snapshot(config, ViewState()), 800, 400, now=DEFAULT_START)
        assert any(cmd['type'] == 'task_bar' for cmd in commands)


class TestImportFromFile:
    """Tests for import_from_file and read_table."""

    def test_unsupported_extension_raises_error(self, tmp_path):
        path = tmp_path / "tasks.txt"
        path.write_text("Title\nA\n")
        with pytest.raises(ValueError):
            read_table(path)

    def test_import_csv(self, csv_file, members):
        mapping = auto_map_columns(list(read_table(csv_file).columns))
        tasks = import_from_file(csv_file, mapping, DEFAULT_START, members)

        # The row without a title is skipped.
        assert [t['title'] for t in tasks] == ["Research", "Design", "Build"]

        research, design, build = tasks
        assert research['start'] == datetime(2024, 1, 2)
        assert research['end'] == datetime(2024, 1, 6)
        assert research['assignee_id'] == members[0]['id']
        assert research['progress'] == 80
        assert research['priority'] == "high"

        # No end date: one day long. Unknown assignee and priority are dropped.
        assert design['end'] == datetime(2024, 1, 5)
        assert 'assignee_id' not in design
        assert design['progress'] == 45
        assert 'priority' not in design

        # No start date: starts at the default.
        assert build['start'] == DEFAULT_START
        assert build['end'] == datetime(2024, 1, 3)
        assert build['priority'] == "critical"

    def test_imported_tasks_are_valid_for_the_store(self, csv_file, members):
        mapping = auto_map_columns(list(read_table(csv_file).columns))
        store = TaskStore(members=members)
        for task in import_from_file(csv_file, mapping, DEFAULT_START, members):
            validate_task(task)
            store.create_task(task)
        assert len(store.tasks) == 3
