import logging
import uuid
from datetime import timedelta

import pandas as pd

from config import PRIORITY_COLORS

logger = logging.getLogger(__name__)

# (field_name, required)
IMPORT_FIELDS = [
    ("Title", True),
    ("Start", False),
    ("End", False),
    ("Assignee", False),
    ("Progress", False),
    ("Priority", False),
    ("Row", False),
]


def read_table(filepath):
    """Reads a CSV or Excel file into a DataFrame."""
    lower = str(filepath).lower()
    if lower.endswith('.csv'):
        return pd.read_csv(filepath)
    elif lower.endswith('.xls') or lower.endswith('.xlsx'):
        return pd.read_excel(filepath)
    raise ValueError("Unsupported file type. Please select a CSV or Excel file.")


def auto_map_columns(columns):
    """Guesses which column feeds which field by comparing names."""
    mapping = {}
    for field_name, _ in IMPORT_FIELDS:
        field_lower = field_name.lower()
        for col in columns:
            col_lower = str(col).lower().replace("_", " ").replace("-", " ")
            if field_lower in col_lower or col_lower in field_lower:
                mapping[field_name] = col
                break
    return mapping


def _cell(row, mapping, field_name):
    column = mapping.get(field_name)
    if not column:
        return None
    value = row[column]
    if pd.isna(value):
        return None
    return value


def _to_datetime(value):
    if value is None:
        return None
    parsed = pd.to_datetime(value, errors='coerce')
    if pd.isna(parsed):
        return None
    parsed = parsed.to_pydatetime()
    if parsed.tzinfo is not None:
        # The timeline works in naive local time.
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def tasks_from_frame(df, mapping, default_start, members=None, first_row=0):
    """
    Converts DataFrame rows into task dicts.

    ``mapping`` maps field names from IMPORT_FIELDS to column names. Rows with
    no title are skipped. ``Assignee`` values are matched against member
    names (case-insensitive) and dropped when nobody matches. Rows without a
    ``Row`` value are placed one per row starting at ``first_row``.
    """
    if not mapping.get("Title"):
        raise ValueError("You must map a column to 'Title'.")
    missing = [col for col in mapping.values() if col and col not in df.columns]
    if missing:
        raise ValueError(f"The column '{missing[0]}' selected in the mapping does not exist in the file.")

    members_by_name = {m['name'].lower(): m['id'] for m in members or []}
    tasks = []
    for index, row in df.iterrows():
        title = _cell(row, mapping, "Title")
        if title is None or not str(title).strip():
            continue

        start = _to_datetime(_cell(row, mapping, "Start")) or default_start
        end = _to_datetime(_cell(row, mapping, "End"))
        if end is None or end <= start:
            end = start + timedelta(days=1)

        task = {
            "id": uuid.uuid4().hex,
            "title": str(title).strip(),
            "start": start,
            "end": end,
            "row": first_row + len(tasks),
        }

        assignee = _cell(row, mapping, "Assignee")
        if assignee is not None:
            member_id = members_by_name.get(str(assignee).strip().lower())
            if member_id:
                task["assignee_id"] = member_id
            else:
                logger.debug("Row %s: no team member named %r", index + 2, assignee)

        progress = _cell(row, mapping, "Progress")
        if progress is not None:
            try:
                task["progress"] = max(0, min(100, float(str(progress).rstrip('%'))))
            except ValueError:
                logger.debug("Row %s: ignoring progress %r", index + 2, progress)

        priority = _cell(row, mapping, "Priority")
        if priority is not None and str(priority).strip().lower() in PRIORITY_COLORS:
            task["priority"] = str(priority).strip().lower()

        row_value = _cell(row, mapping, "Row")
        if row_value is not None:
            try:
                task["row"] = max(0, int(row_value))
            except (TypeError, ValueError):
                logger.debug("Row %s: ignoring row index %r", index + 2, row_value)

        tasks.append(task)
    return tasks


def import_from_file(filepath, mapping, default_start, members=None, first_row=0):
    df = read_table(filepath)
    tasks = tasks_from_frame(df, mapping, default_start, members, first_row)
    logger.info("Imported %d tasks from %s", len(tasks), filepath)
    return tasks
