import tkinter as tk
from tkinter import ttk, simpledialog, messagebox
import copy
from datetime import datetime

from config import (
    PRIORITY_COLORS, TIME_UNITS, MIN_UNITS_TO_SHOW, MAX_UNITS_TO_SHOW,
)
from core_logic import TimelineConfig
from importers import IMPORT_FIELDS, auto_map_columns
from interaction import update_task, delete_task, add_member

DATE_FORMAT = "%d-%m-%Y"
NO_ASSIGNEE = "Unassigned"
NO_PRIORITY = "None"
NOT_MAPPED = "Not Mapped"


class EditTaskDialog(simpledialog.Dialog):
    """
    Edits one task. On OK ``result`` is an update intent, after Delete it is a
    delete intent, and it stays None when cancelled.
    """
    def __init__(self, parent, title, task, members):
        self.task_original = task
        self.task_copy = copy.deepcopy(task)
        self.members = members
        self.result = None
        super().__init__(parent, title)

    def body(self, master):
        main_frame = ttk.LabelFrame(master, text="Task Properties", padding=10)
        main_frame.pack(fill=tk.X, padx=10, pady=5)

        ttk.Label(main_frame, text="Task Title:").grid(row=0, column=0, sticky="w", padx=5, pady=2)
        self.title_var = tk.StringVar(value=self.task_copy.get('title', ''))
        title_entry = ttk.Entry(main_frame, textvariable=self.title_var, width=40)
        title_entry.grid(row=0, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(main_frame, text="Description:").grid(row=1, column=0, sticky="nw", padx=5, pady=2)
        self.description_text = tk.Text(main_frame, width=40, height=4)
        self.description_text.insert("1.0", self.task_copy.get('description') or "")
        self.description_text.grid(row=1, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(main_frame, text="Assignee:").grid(row=2, column=0, sticky="w", padx=5, pady=2)
        self.assignee_labels = {NO_ASSIGNEE: None}
        for member in self.members:
            label = f"{member['name']} ({member['role']})" if member.get('role') else member['name']
            self.assignee_labels[label] = member['id']
        current = next((label for label, member_id in self.assignee_labels.items()
                        if member_id and member_id == self.task_copy.get('assignee_id')), NO_ASSIGNEE)
        self.assignee_var = tk.StringVar(value=current)
        ttk.Combobox(main_frame, textvariable=self.assignee_var, values=list(self.assignee_labels),
                     state="readonly", width=37).grid(row=2, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(main_frame, text="Priority:").grid(row=3, column=0, sticky="w", padx=5, pady=2)
        self.priority_var = tk.StringVar(value=self.task_copy.get('priority') or NO_PRIORITY)
        ttk.Combobox(main_frame, textvariable=self.priority_var, values=[NO_PRIORITY] + list(PRIORITY_COLORS),
                     state="readonly", width=37).grid(row=3, column=1, sticky="w", padx=5, pady=2)

        self.progress_var = tk.IntVar(value=int(self.task_copy.get('progress') or 0))
        self.progress_label = ttk.Label(main_frame, text=f"Progress: {self.progress_var.get()}%")
        self.progress_label.grid(row=4, column=0, sticky="w", padx=5, pady=2)
        ttk.Scale(main_frame, from_=0, to=100, orient=tk.HORIZONTAL, length=250,
                  command=self._on_progress_change,
                  value=self.progress_var.get()).grid(row=4, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(main_frame, text="Start Date:").grid(row=5, column=0, sticky="w", padx=5, pady=2)
        self.start_var = tk.StringVar(value=self.task_copy['start'].strftime(DATE_FORMAT))
        ttk.Entry(main_frame, textvariable=self.start_var, width=40).grid(row=5, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(main_frame, text="End Date:").grid(row=6, column=0, sticky="w", padx=5, pady=2)
        self.end_var = tk.StringVar(value=self.task_copy['end'].strftime(DATE_FORMAT))
        ttk.Entry(main_frame, textvariable=self.end_var, width=40).grid(row=6, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(main_frame, text="Row:").grid(row=7, column=0, sticky="w", padx=5, pady=2)
        self.row_var = tk.StringVar(value=str(self.task_copy.get('row') or 0))
        ttk.Spinbox(main_frame, from_=0, to=999, textvariable=self.row_var, width=8).grid(
            row=7, column=1, sticky="w", padx=5, pady=2)

        ttk.Button(master, text="Delete Task", command=self._delete).pack(anchor="w", padx=10, pady=(0, 5))
        return title_entry

    def _on_progress_change(self, value):
        self.progress_var.set(int(float(value)))
        self.progress_label.config(text=f"Progress: {self.progress_var.get()}%")

    def _parse_date(self, text, original):
        """Keeps the original time of day so untouched dates survive a round trip unchanged."""
        if text == original.strftime(DATE_FORMAT):
            return original
        return datetime.strptime(text, DATE_FORMAT)

    def validate(self):
        if not self.title_var.get().strip():
            messagebox.showerror("Invalid Task", "The task needs a title.", parent=self)
            return False
        try:
            start = self._parse_date(self.start_var.get().strip(), self.task_copy['start'])
            end = self._parse_date(self.end_var.get().strip(), self.task_copy['end'])
        except ValueError:
            messagebox.showerror("Invalid Date", "Please use DD-MM-YYYY for dates.", parent=self)
            return False
        if end <= start:
            messagebox.showerror("Invalid Date", "The end date must be after the start date.", parent=self)
            return False
        try:
            row = int(self.row_var.get())
        except ValueError:
            row = -1
        if row < 0:
            messagebox.showerror("Invalid Row", "Row must be a non-negative whole number.", parent=self)
            return False
        self._parsed = (start, end, row)
        return True

    def _delete(self):
        if messagebox.askyesno("Delete Task", f"Delete '{self.task_original.get('title')}'?", parent=self):
            self.result = delete_task(self.task_original['id'])
            self.cancel()

    def apply(self):
        start, end, row = self._parsed
        self.task_copy['title'] = self.title_var.get().strip()
        description = self.description_text.get("1.0", tk.END).strip()
        self.task_copy['description'] = description or None
        self.task_copy['assignee_id'] = self.assignee_labels.get(self.assignee_var.get())
        priority = self.priority_var.get()
        self.task_copy['priority'] = priority if priority != NO_PRIORITY else None
        self.task_copy['progress'] = self.progress_var.get()
        self.task_copy['start'] = start
        self.task_copy['end'] = end
        self.task_copy['row'] = row
        self.result = update_task(self.task_copy)


class AddMemberDialog(simpledialog.Dialog):
    def __init__(self, parent, title):
        self.result = None
        super().__init__(parent, title)

    def body(self, master):
        frame = ttk.Frame(master, padding=10)
        frame.pack(fill=tk.X)

        ttk.Label(frame, text="Name:").grid(row=0, column=0, sticky="w", padx=5, pady=2)
        self.name_var = tk.StringVar()
        name_entry = ttk.Entry(frame, textvariable=self.name_var, width=35)
        name_entry.grid(row=0, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(frame, text="Role:").grid(row=1, column=0, sticky="w", padx=5, pady=2)
        self.role_var = tk.StringVar()
        ttk.Entry(frame, textvariable=self.role_var, width=35).grid(row=1, column=1, sticky="w", padx=5, pady=2)
        return name_entry

    def validate(self):
        if not self.name_var.get().strip():
            messagebox.showerror("Add Member", "Please enter a name.", parent=self)
            return False
        return True

    def apply(self):
        self.result = add_member(self.name_var.get().strip(), self.role_var.get().strip() or None)


class TimelineConfigDialog(simpledialog.Dialog):
    """Edits the timeline origin, unit and scale. ``result`` is a new TimelineConfig."""
    def __init__(self, parent, title, config):
        self.config_original = config
        self.result = None
        super().__init__(parent, title)

    def body(self, master):
        frame = ttk.LabelFrame(master, text="Timeline", padding=10)
        frame.pack(fill=tk.X, padx=10, pady=5)

        ttk.Label(frame, text="Start Date:").grid(row=0, column=0, sticky="w", padx=5, pady=2)
        self.start_var = tk.StringVar(value=self.config_original.start_date.strftime(DATE_FORMAT))
        start_entry = ttk.Entry(frame, textvariable=self.start_var, width=20)
        start_entry.grid(row=0, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(frame, text="Time Unit:").grid(row=1, column=0, sticky="w", padx=5, pady=2)
        self.unit_var = tk.StringVar(value=self.config_original.time_unit)
        ttk.Combobox(frame, textvariable=self.unit_var, values=list(TIME_UNITS), state="readonly",
                     width=17).grid(row=1, column=1, sticky="w", padx=5, pady=2)

        units = max(MIN_UNITS_TO_SHOW, min(MAX_UNITS_TO_SHOW, self.config_original.units_to_show))
        self.units_var = tk.IntVar(value=units)
        self.units_label = ttk.Label(frame, text=f"Units to Show: {units}")
        self.units_label.grid(row=2, column=0, sticky="w", padx=5, pady=2)
        ttk.Scale(frame, from_=MIN_UNITS_TO_SHOW, to=MAX_UNITS_TO_SHOW, orient=tk.HORIZONTAL, length=200,
                  value=units, command=self._on_units_change).grid(row=2, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(frame, text="Unit Width (px):").grid(row=3, column=0, sticky="w", padx=5, pady=2)
        self.width_var = tk.StringVar(value=str(self.config_original.unit_width))
        ttk.Entry(frame, textvariable=self.width_var, width=20).grid(row=3, column=1, sticky="w", padx=5, pady=2)
        return start_entry

    def _on_units_change(self, value):
        self.units_var.set(int(float(value)))
        self.units_label.config(text=f"Units to Show: {self.units_var.get()}")

    def validate(self):
        try:
            start = datetime.strptime(self.start_var.get().strip(), DATE_FORMAT)
            self._config = TimelineConfig(
                start_date=start,
                time_unit=self.unit_var.get(),
                units_to_show=self.units_var.get(),
                unit_width=float(self.width_var.get()),
            )
        except ValueError as e:
            messagebox.showerror("Invalid Timeline", str(e), parent=self)
            return False
        return True

    def apply(self):
        self.result = self._config


class ColumnMappingDialog(simpledialog.Dialog):
    """
    Dialog for mapping CSV/Excel columns to task fields during import.
    """
    def __init__(self, parent, title, columns):
        self.columns = [str(c) for c in columns]
        self.mapping = {}
        super().__init__(parent, title)

    def body(self, master):
        instruction_frame = ttk.Frame(master, padding=10)
        instruction_frame.pack(fill=tk.X)

        ttk.Label(
            instruction_frame,
            text="Map the columns from your file to the corresponding task fields.\n"
                 "Leave fields as 'Not Mapped' if not applicable.",
            justify=tk.LEFT
        ).pack(anchor="w")

        mapping_frame = ttk.LabelFrame(master, text="Column Mapping", padding=10)
        mapping_frame.pack(fill=tk.X, padx=10, pady=10)

        guessed = auto_map_columns(self.columns)
        self.mapping_vars = {}
        column_options = [NOT_MAPPED] + self.columns

        for i, (field_name, required) in enumerate(IMPORT_FIELDS):
            label_text = f"{field_name}*:" if required else f"{field_name}:"
            ttk.Label(mapping_frame, text=label_text).grid(row=i, column=0, sticky="w", padx=5, pady=3)

            var = tk.StringVar(value=guessed.get(field_name, NOT_MAPPED))
            ttk.Combobox(mapping_frame, textvariable=var, values=column_options, state="readonly",
                         width=30).grid(row=i, column=1, sticky="w", padx=5, pady=3)
            self.mapping_vars[field_name] = var

        ttk.Label(master, text="* Required field", font=("Arial", 8, "italic")).pack(anchor="w", padx=10, pady=(0, 10))
        return mapping_frame

    def validate(self):
        if self.mapping_vars["Title"].get() == NOT_MAPPED:
            messagebox.showerror("Mapping Required", "You must map a column to 'Title'.", parent=self)
            return False
        return True

    def apply(self):
        for field_name, var in self.mapping_vars.items():
            value = var.get()
            if value and value != NOT_MAPPED:
                self.mapping[field_name] = value
