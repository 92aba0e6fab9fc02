import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from datetime import datetime
import logging

from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

# Local imports
from config import BASE_DPI, WHEEL_STEP_PX
from core_logic import TimelineConfig
from dialogs import EditTaskDialog, AddMemberDialog, TimelineConfigDialog, ColumnMappingDialog
from importers import import_from_file, read_table
from interaction import (
    ViewState, PointerDown, PointerMove, PointerUp, PointerLeave, Wheel,
    handle_event, create_task, REQUEST_EDITOR,
)
from logs import setup_logging
from renderer import FrameRenderer, RenderLoop
from store import TaskStore

logger = logging.getLogger(__name__)


class GanttApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("Gantt Timeline Planner")
        self.geometry("1600x800")

        # --- App State ---
        self.store = TaskStore()
        self.timeline_config = TimelineConfig()
        self.view_state = ViewState()

        # --- Main Layout ---
        self.main_frame = ttk.Frame(self)
        self.main_frame.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        self.control_frame = ttk.Frame(self.main_frame, width=300, padding="10")
        self.control_frame.pack(side=tk.LEFT, fill=tk.Y, expand=False)

        self.chart_frame = ttk.Frame(self.main_frame)
        self.chart_frame.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True)

        # --- Initialization ---
        self.create_menu()
        self.setup_chart_canvas()
        self.build_controls()
        self.store.load_sample_data()
        self.populate_roster()
        self.connect_pointer_events()

        self.render_loop = RenderLoop(self, self.draw_frame)
        self.render_loop.start()
        self.protocol("WM_DELETE_WINDOW", self.on_close)

    def create_menu(self):
        menubar = tk.Menu(self)
        self.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="New Blank Board", command=self.new_blank_board)
        file_menu.add_command(label="Load Sample Board", command=self.load_sample_board)
        file_menu.add_command(label="Import Tasks...", command=self.import_tasks)
        file_menu.add_separator()
        file_menu.add_command(label="Export as PNG...", command=lambda: self.export_chart(".png"))
        file_menu.add_command(label="Export as PDF...", command=lambda: self.export_chart(".pdf"))
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.on_close)

        view_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="View", menu=view_menu)
        view_menu.add_command(label="Configure Timeline...", command=self.configure_timeline)
        view_menu.add_command(label="Reset Zoom && Pan", command=self.reset_view)

        team_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Team", menu=team_menu)
        team_menu.add_command(label="Add Member...", command=self.add_member)

    def setup_chart_canvas(self):
        self.figure = Figure(figsize=(12, 6), dpi=BASE_DPI)
        self.canvas = FigureCanvasTkAgg(self.figure, self.chart_frame)
        self.canvas.get_tk_widget().pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        self.frame_renderer = FrameRenderer(self.figure)

    def connect_pointer_events(self):
        self.canvas.mpl_connect('button_press_event', self.on_press)
        self.canvas.mpl_connect('motion_notify_event', self.on_motion)
        self.canvas.mpl_connect('button_release_event', self.on_release)
        self.canvas.mpl_connect('figure_leave_event', self.on_leave)
        self.canvas.mpl_connect('scroll_event', self.on_scroll)

    def build_controls(self):
        roster_frame = ttk.LabelFrame(self.control_frame, text="Team", padding="10")
        roster_frame.pack(fill=tk.BOTH, expand=True, pady=5)

        self.roster_tree = ttk.Treeview(roster_frame, columns=("role",), show="tree headings", height=12)
        self.roster_tree.heading("#0", text="Name")
        self.roster_tree.column("#0", width=150, anchor='w')
        self.roster_tree.heading("role", text="Role")
        self.roster_tree.column("role", width=130, anchor='w')
        self.roster_tree.pack(fill=tk.BOTH, expand=True)

        ttk.Button(self.control_frame, text="Add Member", command=self.add_member).pack(fill=tk.X, pady=5)
        ttk.Button(self.control_frame, text="Configure Timeline", command=self.configure_timeline).pack(fill=tk.X, pady=5)

        ttk.Label(self.control_frame,
                  text="Drag on an empty row to create a task.\n"
                       "Click a task to edit it.\n"
                       "Scroll to pan, Ctrl+scroll to zoom.",
                  font=("Arial", 9, "italic"), justify=tk.LEFT).pack(anchor="w", pady=10)

    def populate_roster(self):
        for item in self.roster_tree.get_children():
            self.roster_tree.delete(item)
        for member in self.store.members:
            tag = f"color_{member['id']}"
            self.roster_tree.insert("", "end", iid=member['id'], text=member['name'],
                                    values=(member.get('role') or "",), tags=(tag,))
            self.roster_tree.tag_configure(tag, foreground=member['color'])

    # --- Frame loop ---

    def _device_pixel_ratio(self):
        return getattr(self.canvas, 'device_pixel_ratio', 1.0) or 1.0

    def draw_frame(self):
        widget = self.canvas.get_tk_widget()
        if not widget.winfo_exists():
            return
        dpr = self._device_pixel_ratio()
        width = widget.winfo_width() / dpr
        height = widget.winfo_height() / dpr
        snapshot = self.store.snapshot(self.timeline_config, self.view_state)
        # Whole seconds keep the now-line stable between most frames.
        now = datetime.now().replace(microsecond=0)
        if self.frame_renderer.draw(snapshot, width, height, dpr, now=now):
            self.canvas.draw_idle()

    def on_close(self):
        self.render_loop.stop()
        self.destroy()

    # --- Pointer input ---

    def _logical_point(self, event):
        # matplotlib reports physical pixels from the bottom-left corner.
        dpr = self._device_pixel_ratio()
        return event.x / dpr, (self.figure.bbox.height - event.y) / dpr

    def dispatch(self, event):
        self.view_state, intents = handle_event(
            self.view_state, event, self.store.tasks, self.timeline_config
        )
        for intent in intents:
            try:
                result = self.store.apply(intent)
            except (ValueError, KeyError) as e:
                logger.warning("Rejected %s: %s", intent.kind, e)
                messagebox.showerror("Error", f"Could not update the board: {e}")
                continue
            if intent.kind == REQUEST_EDITOR and result is not None:
                self.edit_task(result)

    def on_press(self, event):
        if event.button != 1:
            return
        x, y = self._logical_point(event)
        self.dispatch(PointerDown(x, y))

    def on_motion(self, event):
        if self.view_state.mode != 'dragging':
            return
        x, y = self._logical_point(event)
        self.dispatch(PointerMove(x, y))

    def on_release(self, event):
        if event.button != 1:
            return
        self.dispatch(PointerUp())

    def on_leave(self, event):
        self.dispatch(PointerLeave())

    def on_scroll(self, event):
        # matplotlib gives +1 per notch scrolling up; the controller expects wheel-down positive.
        key = event.key or ""
        self.dispatch(Wheel(
            delta_x=0.0,
            delta_y=-event.step * WHEEL_STEP_PX,
            ctrl='control' in key or 'ctrl' in key,
            meta='cmd' in key or 'super' in key,
        ))

    # --- Dialogs ---

    def edit_task(self, task):
        dialog = EditTaskDialog(self, "Edit Task", task, self.store.members)
        if dialog.result is None:
            return
        try:
            self.store.apply(dialog.result)
        except (ValueError, KeyError) as e:
            messagebox.showerror("Edit Task", f"Could not save the task: {e}")

    def add_member(self):
        dialog = AddMemberDialog(self, "Add Team Member")
        if dialog.result is None:
            return
        try:
            self.store.apply(dialog.result)
        except ValueError as e:
            messagebox.showerror("Add Member", str(e))
            return
        self.populate_roster()

    def configure_timeline(self):
        dialog = TimelineConfigDialog(self, "Configure Timeline", self.timeline_config)
        if dialog.result is not None:
            self.timeline_config = dialog.result
            logger.info("Timeline set to %s from %s", dialog.result.time_unit, dialog.result.start_date.date())

    def reset_view(self):
        self.view_state = ViewState()

    def new_blank_board(self):
        self.store.clear()
        self.view_state = ViewState()
        self.populate_roster()

    def load_sample_board(self):
        self.store.load_sample_data()
        self.view_state = ViewState()
        self.populate_roster()

    # --- Import / export ---

    def import_tasks(self):
        filepath = filedialog.askopenfilename(
            title="Import Tasks",
            filetypes=[("CSV Files", "*.csv"), ("Excel Files", "*.xls *.xlsx"), ("All Files", "*.*")]
        )
        if not filepath:
            return

        try:
            columns = list(read_table(filepath).columns)
        except Exception as e:
            logger.exception("Could not read %s", filepath)
            messagebox.showerror("Error Reading File", f"An error occurred while reading the file: {e}")
            return

        dialog = ColumnMappingDialog(self, "Map Columns", columns)
        if not dialog.mapping:
            return # User cancelled

        try:
            tasks = import_from_file(filepath, dialog.mapping, self.timeline_config.start_date,
                                     self.store.members, first_row=self.store.next_free_row())
            for task in tasks:
                self.store.apply(create_task(task))
        except Exception as e:
            logger.exception("Import from %s failed", filepath)
            messagebox.showerror("Import Error", f"An error occurred while importing tasks: {e}")
            return
        messagebox.showinfo("Import Tasks", f"Imported {len(tasks)} tasks.")

    def export_chart(self, extension):
        filepath = filedialog.asksaveasfilename(
            title="Export Timeline",
            defaultextension=extension,
            initialfile=f"gantt-timeline-{datetime.now().strftime('%Y-%m-%d')}{extension}",
            filetypes=[
                ("PNG Image", "*.png"),
                ("PDF Document", "*.pdf"),
                ("All Files", "*.*")
            ]
        )
        if not filepath:
            return

        try:
            self.figure.savefig(filepath, dpi=2 * BASE_DPI, facecolor=self.figure.get_facecolor())
            messagebox.showinfo("Export Successful", f"Timeline successfully saved to\n{filepath}")
        except Exception as e:
            logger.exception("Export to %s failed", filepath)
            messagebox.showerror("Export Error", f"An error occurred while exporting the timeline: {e}")


def main():
    setup_logging()
    app = GanttApp()
    app.mainloop()


if __name__ == "__main__":
    main()
