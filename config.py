import collections

# --- Layout (logical pixels) ---

TASK_HEIGHT = 32
HEADER_HEIGHT = 80
TASK_SPACING = 8
PADDING = 20
MIN_TASK_WIDTH = 120
BAR_RADIUS = 8

# Matplotlib figures are sized in inches; one inch at BASE_DPI is 100 logical pixels.
BASE_DPI = 100

# --- Zoom / pan ---

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9
WHEEL_STEP_PX = 100

FRAME_INTERVAL_MS = 16

# --- Colors ---

TEAM_COLORS = ["#FF6B6B", "#343A40", "#4f81bd", "#5cb85c", "#f0ad4e"]

PRIORITY_COLORS = collections.OrderedDict([
    ('low', '#343A40'),
    ('medium', '#FF6B6B'),
    ('high', '#f0ad4e'),
    ('critical', '#c0504d'),
])

PREVIEW_COLOR = '#FF6B6B'
PREVIEW_ALPHA = 0.6
PROGRESS_ALPHA = 0.3

BACKGROUND_COLOR = '#FFFFFF'
HEADER_COLOR = '#F8F9FA'
TODAY_COLOR = '#FF6B6B'
TEXT_COLOR = '#343A40'
GRID_COLOR = '#343A40'
NOW_LINE_COLOR = '#FF6B6B'

# --- Timeline defaults ---

TIME_UNITS = ('days', 'weeks', 'months')
DEFAULT_TIME_UNIT = 'days'
DEFAULT_UNITS_TO_SHOW = 30
DEFAULT_UNIT_WIDTH = 100
MIN_UNITS_TO_SHOW = 10
MAX_UNITS_TO_SHOW = 100

PREVIEW_ID = 'preview'
NEW_TASK_TITLE = 'New Task'

# --- Sample Data ---

# Loaded into a fresh board so there is something to look at.
sample_members = [
    {"name": "Sarah Chen", "role": "Project Manager"},
    {"name": "Alex Rodriguez", "role": "Lead Developer"},
    {"name": "Maya Patel", "role": "UI/UX Designer"},
    {"name": "David Kim", "role": "Backend Developer"},
]

# Offsets are in days from today; assignee is an index into sample_members.
sample_tasks = [
    {
        "title": "Project Planning & Research",
        "start_offset": 1,
        "end_offset": 5,
        "assignee": 0,
        "progress": 80,
        "priority": "high",
        "row": 0,
    },
    {
        "title": "UI/UX Design System",
        "start_offset": 3,
        "end_offset": 10,
        "assignee": 2,
        "progress": 45,
        "priority": "medium",
        "row": 1,
    },
    {
        "title": "Backend API Development",
        "start_offset": 6,
        "end_offset": 15,
        "assignee": 3,
        "progress": 20,
        "priority": "critical",
        "row": 2,
    },
]
