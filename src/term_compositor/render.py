"""
Double-buffered rendering with dirty-region flushing.

The :class:`RenderEngine` composes a flat list of components into a back
buffer, works out which rectangles of the terminal have to be rewritten and
sends only those to a :class:`TerminalSink`. A :class:`FrameThrottler` limits
how often a pass may run.
"""

import logging
import time
from typing import Callable, List, NamedTuple, Optional, Protocol

from . import config
from .buffer import CellBuffer, DirtyRegion
from .geometry import Rect

LOGGER = logging.getLogger(__name__)


class TerminalSize(NamedTuple):
    columns: int
    rows: int


class TerminalSink(Protocol):
    """Where rendered output goes.

    ``flush()`` is optional and called once at the end of every pass when
    present.
    """

    def set_cursor_position(self, col: int, row: int) -> None:
        """Move the cursor; ``col`` and ``row`` are 1-based."""
        ...

    def write(self, text: str) -> None:
        ...

    def get_terminal_size(self) -> TerminalSize:
        ...


class Component(Protocol):
    """Anything the engine can place on screen.

    ``position`` and ``size`` are :mod:`~term_compositor.geometry` values.
    ``render()`` returns rows separated by ``\\n``. A component may also
    carry a boolean ``redraw`` attribute; the engine re-renders it while the
    flag is set and clears it afterwards.
    """

    position: object
    size: object
    visible: bool

    def render(self) -> str:
        ...

    def handle_input(self, event) -> bool:
        ...


class FrameThrottler:
    """Time gate allowing at most ``target_fps`` render passes per second.

    Args:
        target_fps: Frames per second
        clock: Monotonic clock returning seconds, injectable for tests
    """

    def __init__(self, target_fps: float = config.DEFAULT_TARGET_FPS,
                 clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._last_frame_time: Optional[float] = None
        self.set_target_fps(target_fps)

    @property
    def target_fps(self):
        return self._target_fps

    @property
    def frame_interval(self):
        """Seconds between accepted frames."""
        return self._frame_interval

    def set_target_fps(self, fps):
        if fps <= 0:
            raise ValueError(f'target fps must be positive, got {fps}')
        self._target_fps = fps
        self._frame_interval = 1.0 / fps

    def should_render(self) -> bool:
        """Return True if a frame interval has passed since the last True."""
        now = self._clock()
        if self._last_frame_time is None or now - self._last_frame_time >= self._frame_interval:
            self._last_frame_time = now
            return True
        return False


def _component_rect(component):
    return Rect.from_position_size(component.position, component.size)


class RenderEngine:
    """Renders components to a terminal sink, writing only what changed.

    Attributes:
        sink: The terminal the output goes to
        front_buffer: What the terminal currently shows
        back_buffer: The frame being composed
    """

    def __init__(self, sink: TerminalSink, target_fps: float = config.DEFAULT_TARGET_FPS,
                 clock: Callable[[], float] = time.monotonic):
        self.sink = sink
        columns, rows = sink.get_terminal_size()
        self.front_buffer = CellBuffer(columns, rows)
        self.back_buffer = CellBuffer(columns, rows)
        self.throttler = FrameThrottler(target_fps, clock=clock)
        self._render_queue = {}
        # The terminal's contents are unknown until the first full pass.
        self._force_full_render = True
        self._rendering = False
        self.frames_rendered = 0

    @property
    def target_fps(self):
        return self.throttler.target_fps

    def set_target_fps(self, fps):
        self.throttler.set_target_fps(fps)

    def queue_component(self, component):
        """Treat ``component`` as dirty on the next pass."""
        self._render_queue[id(component)] = component

    def force_full_render(self):
        """Repaint the whole screen on the next pass, bypassing the throttle."""
        self._force_full_render = True

    @property
    def full_render_pending(self):
        return self._force_full_render

    def render(self, components: List[Component]) -> bool:
        """Run one render pass.

        Returns:
            True if a pass ran, False if the throttler skipped it.

        Raises:
            RuntimeError: If called while a pass is already running.
            BufferAllocationError: If the terminal reports unusable dimensions.
        """
        if self._rendering:
            raise RuntimeError('RenderEngine.render() re-entered during a render pass')
        if not self.throttler.should_render() and not self._force_full_render:
            return False

        self._rendering = True
        try:
            self._render_pass(components)
        finally:
            self._rendering = False
        return True

    def _render_pass(self, components):
        columns, rows = self.sink.get_terminal_size()
        if (columns, rows) != (self.back_buffer.width, self.back_buffer.height):
            LOGGER.info('terminal resized to %dx%d', columns, rows)
            self.front_buffer.resize(columns, rows)
            self.back_buffer.resize(columns, rows)
            self._force_full_render = True

        self.back_buffer.clear()
        dirty_rects = self._compose(components)
        screen = Rect(0, 0, columns, rows)

        if self._force_full_render:
            regions = [screen]
        else:
            # A component covering the whole screen composes the frame itself;
            # its changes come from the diff below.
            regions = [r for r in (rect.intersection(screen) for rect in dirty_rects)
                       if r and not r.contains_rect(screen)]
            # Whatever the dirty rectangles miss still has to converge.
            for region in self.front_buffer.diff(self.back_buffer):
                if not any(rect.contains_rect(region) for rect in regions):
                    regions.append(region)

        self._flush(regions)

        self.front_buffer, self.back_buffer = self.back_buffer, self.front_buffer
        self._render_queue.clear()
        self._force_full_render = False
        self.frames_rendered += 1

    def _compose(self, components):
        dirty_rects = []
        for component in components:
            if not getattr(component, 'visible', True):
                continue
            rect = _component_rect(component)
            needs_render = (getattr(component, 'redraw', False) or
                            id(component) in self._render_queue or
                            self._force_full_render)
            if needs_render:
                content = component.render()
                if content:
                    for i, line in enumerate(content.split('\n')[:rect.height]):
                        self.back_buffer.write(rect.x, rect.y + i, line, max_width=rect.width)
                if hasattr(component, 'redraw'):
                    component.redraw = False
                dirty_rects.append(rect)
            else:
                self.back_buffer.copy_rect_from(self.front_buffer, rect)
        return dirty_rects

    def _flush(self, regions: List[DirtyRegion]):
        """Write the back buffer's content for ``regions`` to the sink."""
        regions = sorted(regions, key=lambda r: (r.y, r.x))
        for region in regions:
            for y in range(region.y, region.bottom):
                col, text = self.back_buffer.row_text(y, region.x, region.width)
                if not text:
                    continue
                self.sink.set_cursor_position(col + 1, y + 1)
                self.sink.write(text)
        flush = getattr(self.sink, 'flush', None)
        if callable(flush):
            flush()
        LOGGER.debug('flushed %d region(s)', len(regions))
