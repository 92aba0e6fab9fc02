import logging

from matplotlib.lines import Line2D
from matplotlib.patches import Circle, FancyBboxPatch, Rectangle

from config import (
    BASE_DPI, BAR_RADIUS, HEADER_HEIGHT, BACKGROUND_COLOR, HEADER_COLOR,
    TODAY_COLOR, TEXT_COLOR, GRID_COLOR, NOW_LINE_COLOR, PROGRESS_ALPHA,
    FRAME_INTERVAL_MS,
)
from scene import build_scene

logger = logging.getLogger(__name__)

TEXT_INSET = 12


def px_to_pt(px):
    """Font sizes and line widths are given in points; the scene is in logical pixels."""
    return px * 72.0 / BASE_DPI


def _rounded_rect(x, y, width, height, radius, **kwargs):
    radius = max(0.0, min(radius, width / 2.0, height / 2.0))
    return FancyBboxPatch(
        (x, y), width, height,
        boxstyle=f"round,pad=0,rounding_size={radius}",
        linewidth=0, **kwargs
    )


def _draw_header_cell(ax, cmd):
    x, width = cmd['x'], cmd['width']
    if cmd['is_today']:
        ax.add_patch(Rectangle((x, 0), width, HEADER_HEIGHT, facecolor=TODAY_COLOR, linewidth=0))

    ax.add_line(Line2D([x, x], [0, cmd['height']], color=GRID_COLOR, alpha=0.1, linewidth=px_to_pt(1)))

    text_color = '#FFFFFF' if cmd['is_today'] else TEXT_COLOR
    center = x + width / 2.0
    ax.text(center, 35, cmd['main'], color=text_color, fontsize=px_to_pt(14), fontweight='bold',
            ha='center', va='baseline')
    ax.text(center, 55, cmd['sub'], color=text_color, fontsize=px_to_pt(12), alpha=0.7,
            ha='center', va='baseline')


def _draw_task_bar(ax, cmd):
    x, y, width, height = cmd['x'], cmd['y'], cmd['width'], cmd['height']
    ax.add_patch(_rounded_rect(x, y, width, height, BAR_RADIUS, facecolor=cmd['color'], alpha=cmd['alpha']))

    # Label text is clipped to the bar, minus the inset on both sides.
    clip = Rectangle((x + TEXT_INSET, y), max(0.0, width - 2 * TEXT_INSET), height, transform=ax.transData)
    title = ax.text(x + TEXT_INSET, y + 20, cmd['title'], color='#FFFFFF', fontsize=px_to_pt(13),
                    fontweight='bold', ha='left', va='baseline', parse_math=False)
    title.set_clip_path(clip)
    if cmd.get('assignee'):
        name = ax.text(x + TEXT_INSET, y + 30, cmd['assignee'], color='#FFFFFF', fontsize=px_to_pt(11),
                       alpha=0.9, ha='left', va='baseline', parse_math=False)
        name.set_clip_path(clip)


def _draw_progress(ax, cmd):
    if cmd['width'] <= 0:
        return
    ax.add_patch(_rounded_rect(cmd['x'], cmd['y'], cmd['width'], cmd['height'], BAR_RADIUS,
                               facecolor='#FFFFFF', alpha=PROGRESS_ALPHA))


def _draw_marker(ax, cmd):
    ax.add_patch(Circle((cmd['x'], cmd['y']), cmd['radius'], facecolor='#FFFFFF', linewidth=0))


def _draw_now_line(ax, cmd):
    ax.add_line(Line2D([cmd['x'], cmd['x']], [cmd['y0'], cmd['y1']], color=NOW_LINE_COLOR,
                       alpha=0.8, linewidth=px_to_pt(2)))


PAINTERS = {
    'header_cell': _draw_header_cell,
    'task_bar': _draw_task_bar,
    'progress': _draw_progress,
    'marker': _draw_marker,
    'now_line': _draw_now_line,
}


def paint_commands(figure, commands, width, height, device_pixel_ratio=1.0):
    """Clears the figure and paints ``commands`` onto it. Returns the axes used."""
    dpr = device_pixel_ratio if device_pixel_ratio and device_pixel_ratio > 0 else 1.0

    # Backing surface is width*dpr x height*dpr pixels; drawing stays in logical pixels.
    figure.set_dpi(BASE_DPI * dpr)
    figure.set_size_inches(width / BASE_DPI, height / BASE_DPI, forward=False)
    figure.clear()
    figure.patch.set_facecolor(BACKGROUND_COLOR)

    ax = figure.add_axes([0, 0, 1, 1])
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()
    ax.add_patch(Rectangle((0, 0), width, HEADER_HEIGHT, facecolor=HEADER_COLOR, linewidth=0))

    for cmd in commands:
        painter = PAINTERS.get(cmd['type'])
        if painter is None:
            logger.debug("No painter for draw command %r", cmd['type'])
            continue
        painter(ax, cmd)
    return ax


def render_frame(figure, snapshot, width, height, device_pixel_ratio=1.0, now=None):
    """
    Paints one frame of ``snapshot`` onto a matplotlib figure.

    A missing figure or a zero-sized area (both happen while the window is
    being created or torn down) skips the frame and returns False.
    """
    if figure is None or not width or not height or width <= 0 or height <= 0:
        return False
    commands = build_scene(snapshot, width, height, now=now)
    paint_commands(figure, commands, width, height, device_pixel_ratio)
    return True


class FrameRenderer:
    """Paints frames onto one figure, skipping frames identical to the last one."""

    def __init__(self, figure):
        self.figure = figure
        self._last_frame = None
        self.frames_painted = 0

    def invalidate(self):
        self._last_frame = None

    def draw(self, snapshot, width, height, device_pixel_ratio=1.0, now=None):
        if self.figure is None or not width or not height or width <= 0 or height <= 0:
            return False
        commands = build_scene(snapshot, width, height, now=now)
        frame = (commands, width, height, device_pixel_ratio)
        if frame == self._last_frame:
            return False
        paint_commands(self.figure, commands, width, height, device_pixel_ratio)
        self._last_frame = frame
        self.frames_painted += 1
        return True


class RenderLoop:
    """
    Calls ``callback`` once per frame while running.

    ``scheduler`` is anything with tk's ``after(ms, func)`` and
    ``after_cancel(id)`` (a Tk root or widget). ``stop()`` cancels the pending
    frame, so no callback fires after the loop is stopped.
    """

    def __init__(self, scheduler, callback, interval_ms=FRAME_INTERVAL_MS):
        self.scheduler = scheduler
        self.callback = callback
        self.interval_ms = interval_ms
        self._pending = None
        self._running = False

    @property
    def running(self):
        return self._running

    def start(self):
        if self._running:
            return
        self._running = True
        self._schedule()
        logger.debug("Render loop started")

    def stop(self):
        if not self._running:
            return
        self._running = False
        if self._pending is not None:
            self.scheduler.after_cancel(self._pending)
            self._pending = None
        logger.debug("Render loop stopped")

    def _schedule(self):
        self._pending = self.scheduler.after(self.interval_ms, self._tick)

    def _tick(self):
        self._pending = None
        if not self._running:
            return
        try:
            self.callback()
        finally:
            if self._running:
                self._schedule()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
