"""
Windows: movable, resizable, stateful rectangles on the terminal grid.

A :class:`Window` implements the component contract itself and delegates its
chrome (border, title bar, controls, resize grip, scroll indicator) to a
:class:`ContentFrame`. The interior is filled by an optional content
component, for example a :class:`TextContent`.
"""

import enum
import logging
import textwrap
from dataclasses import dataclass
from typing import List, Optional

import wcwidth

from . import config
from .buffer import strip_sequences
from .events import (
    LEFT_BUTTON,
    EventChannel,
    KeyEvent,
    MouseEvent,
    WindowEvent,
    WindowEventKind,
)
from .geometry import Position, Rect, Size, _clamp, constrain_position

LOGGER = logging.getLogger(__name__)


class WindowState(enum.Enum):
    NORMAL = 'normal'
    MINIMIZED = 'minimized'
    MAXIMIZED = 'maximized'
    CLOSED = 'closed'


class HitRegion(enum.Enum):
    """Part of a window under a given cell."""
    NONE = 'none'
    CONTENT = 'content'
    TITLE = 'title'
    MINIMIZE = 'minimize'
    MAXIMIZE = 'maximize'
    CLOSE = 'close'
    RESIZE = 'resize'


# Right-aligned on the title row, in this order.
CONTROL_ORDER = (HitRegion.MINIMIZE, HitRegion.MAXIMIZE, HitRegion.CLOSE)

_GLYPHS = {
    HitRegion.MINIMIZE: '_',
    HitRegion.MAXIMIZE: '^',
    HitRegion.CLOSE: 'x',
}
_RESTORE_GLYPH = 'v'
_GRIP_GLYPH = '#'


def fit_width(text, width):
    """Truncate or pad ``text`` to exactly ``width`` display columns."""
    out = []
    used = 0
    for ch in strip_sequences(text):
        w = wcwidth.wcwidth(ch)
        if w < 0:
            continue
        if used + w > width:
            break
        out.append(ch)
        used += w
    return ''.join(out) + ' ' * (width - used)


@dataclass(frozen=True)
class _Gesture:
    kind: str  # 'drag' or 'resize'
    mouse: Position
    position: Position
    size: Size


class ContentFrame:
    """Draws the chrome of a window around its content lines."""

    def title_bar(self, window, inner_width):
        glyphs = ''.join(glyph for _, glyph in window.controls())
        if len(glyphs) > inner_width:
            glyphs = glyphs[len(glyphs) - inner_width:]
        available = inner_width - len(glyphs)
        title = f' {window.title} ' if window.title else ''
        if len(title) > available:
            title = title[:available - 3] + '...' if available >= 3 else title[:available]
        return title.center(available, '-') + glyphs

    def status_line(self, window, inner_width):
        if inner_width <= 0:
            return ''
        grip = _GRIP_GLYPH if window.can_resize else '-'
        info = f' {window.status_bar} ' if window.status_bar else ''
        dashes = '-' * max(0, inner_width - 1 - len(info))
        return (dashes + info)[:inner_width - 1] + grip

    def render(self, window, body: List[str]) -> List[str]:
        """Return ``window.size.height`` lines of ``window.size.width`` columns."""
        width, height = window.size.width, window.size.height
        if width <= 0 or height <= 0:
            return []
        inner_width = max(0, width - 2)
        inner_height = max(0, height - 2)

        scroll_pos = getattr(window.content, 'scroll_pos', None)
        scroll_row = None if scroll_pos is None else int(scroll_pos * max(0, inner_height - 1))

        lines = ['+' + self.title_bar(window, inner_width) + '+']
        for row in range(inner_height):
            text = body[row] if row < len(body) else ''
            right = '=' if row == scroll_row else '|'
            lines.append('|' + fit_width(text, inner_width) + right)
        if height >= 2:
            lines.append('+' + self.status_line(window, inner_width) + '+')
        return [fit_width(line, width) for line in lines]


class Window:
    """A movable, resizable window.

    Windows start in :attr:`WindowState.NORMAL`. ``close`` is final for the
    instance; ``minimize`` and ``maximize`` save the geometry on the first
    transition out of the normal state and ``restore`` puts it back. Every
    transition checks the matching capability flag and returns False
    without side effects when refused.

    Attributes:
        id: Identifier used by the window manager
        title: Text shown in the title bar
        status_bar: Optional text shown in the bottom border
        content: Component drawn inside the border, or None
        bounds: Size of the area the window lives in; maximize fills it and
            gestures are clamped to it. Injected by the owner (usually the
            window manager).
        events: :class:`EventChannel` carrying this window's events
        state: Current :class:`WindowState`
        visible: False while minimized or closed
        focused: Whether the window has keyboard focus
        redraw: Whether the window needs to be rendered again
    """

    def __init__(self, window_id, title='', *, position: Optional[Position] = None,
                 size: Optional[Size] = None, closable=True, minimizable=True,
                 maximizable=True, resizable=True, draggable=True, modal=False,
                 min_width=config.DEFAULT_MIN_WIDTH, min_height=config.DEFAULT_MIN_HEIGHT,
                 max_width=None, max_height=None, content=None,
                 bounds: Optional[Size] = None, status_bar=None):
        self.id = window_id
        self.title = title
        self.status_bar = status_bar
        self.closable = closable
        self.minimizable = minimizable
        self.maximizable = maximizable
        self.resizable = resizable
        self.draggable = draggable
        self.modal = modal
        self.min_width = min_width
        self.min_height = min_height
        self.max_width = max_width
        self.max_height = max_height
        self.content = content
        self.bounds = bounds
        self.frame = ContentFrame()
        self.events = EventChannel()

        self.state = WindowState.NORMAL
        self.visible = True
        self.focused = False
        self._redraw = True
        self._position = position if position is not None else Position(0, 0)
        self._size = size if size is not None else Size(*config.DEFAULT_WINDOW_SIZE)
        self._saved_position: Optional[Position] = None
        self._saved_size: Optional[Size] = None
        self._gesture: Optional[_Gesture] = None

    def __repr__(self):
        return f'Window({self.id!r}, state={self.state.value})'

    # -- geometry -----------------------------------------------------------

    @property
    def position(self):
        return self._position

    @position.setter
    def position(self, value):
        if value != self._position:
            self._position = value
            self._redraw = True

    @property
    def size(self):
        return self._size

    @size.setter
    def size(self, value):
        if value != self._size:
            self._size = value
            self._redraw = True

    @property
    def rect(self):
        return Rect.from_position_size(self._position, self._size)

    @property
    def saved_geometry(self):
        """The restore snapshot as ``(position, size)``, or None."""
        if self._saved_position is None:
            return None
        return self._saved_position, self._saved_size

    def move_to(self, position):
        """Move without changing state or firing events."""
        self.position = position

    def resize_to(self, size):
        """Resize without changing state or firing events."""
        self.size = size

    def place(self, position, size):
        """Set the geometry and return to the normal state.

        Used for snapping and tiling: any restore snapshot is dropped and a
        minimized or maximized window becomes a visible normal window.
        No events are fired. Closed windows are left alone.
        """
        if self.state is WindowState.CLOSED:
            return False
        self.cancel_gesture()
        self.state = WindowState.NORMAL
        self.visible = True
        self._clear_snapshot()
        self.position = position
        self.size = size
        self._redraw = True
        return True

    @property
    def redraw(self):
        return self._redraw or bool(getattr(self.content, 'redraw', False))

    @redraw.setter
    def redraw(self, value):
        self._redraw = value
        if not value and self.content is not None and hasattr(self.content, 'redraw'):
            self.content.redraw = False

    # -- state machine ------------------------------------------------------

    def _emit(self, kind, payload=None):
        self.events.emit(WindowEvent(kind, self.id, payload))

    def _save_snapshot(self):
        if self._saved_position is None:
            self._saved_position = self._position
            self._saved_size = self._size

    def _clear_snapshot(self):
        self._saved_position = None
        self._saved_size = None

    def _refuse(self, action, reason):
        LOGGER.debug('window %r: %s refused (%s)', self.id, action, reason)
        return False

    def close(self):
        """Close the window for good. Returns True if it was closed."""
        if not self.closable:
            return self._refuse('close', 'not closable')
        if self.state is WindowState.CLOSED:
            return self._refuse('close', 'already closed')
        self.cancel_gesture()
        self.state = WindowState.CLOSED
        self.visible = False
        self.focused = False
        self._redraw = True
        self._emit(WindowEventKind.CLOSE)
        return True

    def minimize(self):
        if not self.minimizable:
            return self._refuse('minimize', 'not minimizable')
        if self.state not in (WindowState.NORMAL, WindowState.MAXIMIZED):
            return self._refuse('minimize', f'state is {self.state.value}')
        self.cancel_gesture()
        self._save_snapshot()
        self.state = WindowState.MINIMIZED
        self.visible = False
        self._redraw = True
        self._emit(WindowEventKind.MINIMIZE)
        return True

    def maximize(self):
        """Fill :attr:`bounds`. Requires the normal state and known bounds."""
        if not self.maximizable:
            return self._refuse('maximize', 'not maximizable')
        if self.state is not WindowState.NORMAL:
            return self._refuse('maximize', f'state is {self.state.value}')
        if self.bounds is None:
            return self._refuse('maximize', 'no bounds')
        self.cancel_gesture()
        self._save_snapshot()
        self.state = WindowState.MAXIMIZED
        self.position = Position(0, 0)
        self.size = self.bounds
        self._emit(WindowEventKind.MAXIMIZE)
        return True

    def restore(self):
        """Return from minimized or maximized to the saved geometry."""
        if self.state not in (WindowState.MINIMIZED, WindowState.MAXIMIZED):
            return self._refuse('restore', f'state is {self.state.value}')
        if self._saved_position is not None:
            self.position = self._saved_position
            self.size = self._saved_size
        self._clear_snapshot()
        self.state = WindowState.NORMAL
        self.visible = True
        self._redraw = True
        self._emit(WindowEventKind.RESTORE)
        return True

    def toggle_maximize(self):
        if self.state is WindowState.MAXIMIZED:
            return self.restore()
        return self.maximize()

    def focus(self):
        if not self.focused:
            self.focused = True
            self._redraw = True
            self._emit(WindowEventKind.FOCUS)

    def blur(self):
        if self.focused:
            self.focused = False
            self._redraw = True
            self._emit(WindowEventKind.BLUR)

    # -- hit testing --------------------------------------------------------

    def controls(self):
        """Enabled title-bar controls as ``(HitRegion, glyph)``, left to right."""
        enabled = {
            HitRegion.MINIMIZE: self.minimizable,
            HitRegion.MAXIMIZE: self.maximizable,
            HitRegion.CLOSE: self.closable,
        }
        result = []
        for region in CONTROL_ORDER:
            if not enabled[region]:
                continue
            glyph = _GLYPHS[region]
            if region is HitRegion.MAXIMIZE and self.state is WindowState.MAXIMIZED:
                glyph = _RESTORE_GLYPH
            result.append((region, glyph))
        return result

    def control_columns(self):
        """Map each enabled control to its column relative to the window."""
        controls = self.controls()
        columns = {}
        # The last control sits just inside the top-right corner.
        for offset, (region, _) in enumerate(reversed(controls)):
            col = self._size.width - 2 - offset
            if col >= 1:
                columns[region] = col
        return columns

    def hit_test(self, position) -> HitRegion:
        """Return the part of the window under ``position``."""
        if not self.visible or not self.rect.contains(position):
            return HitRegion.NONE
        rel_x = position.x - self._position.x
        rel_y = position.y - self._position.y
        if rel_y == 0:
            for region, col in self.control_columns().items():
                if rel_x == col:
                    return region
            return HitRegion.TITLE
        grip_w, grip_h = config.RESIZE_HANDLE_SIZE
        if (self.resizable and rel_x >= self._size.width - grip_w and
                rel_y >= self._size.height - grip_h):
            return HitRegion.RESIZE
        return HitRegion.CONTENT

    # -- gestures -----------------------------------------------------------

    @property
    def can_drag(self):
        return self.draggable and self.state is WindowState.NORMAL

    @property
    def can_resize(self):
        return self.resizable and self.state is WindowState.NORMAL

    @property
    def is_dragging(self):
        return self._gesture is not None and self._gesture.kind == 'drag'

    @property
    def is_resizing(self):
        return self._gesture is not None and self._gesture.kind == 'resize'

    def begin_drag(self, mouse):
        if not self.can_drag:
            return self._refuse('drag', 'not draggable in this state')
        self._gesture = _Gesture('drag', mouse, self._position, self._size)
        return True

    def begin_resize(self, mouse):
        if not self.can_resize:
            return self._refuse('resize', 'not resizable in this state')
        self._gesture = _Gesture('resize', mouse, self._position, self._size)
        return True

    def update_gesture(self, mouse):
        """Apply the mouse offset since the gesture began."""
        gesture = self._gesture
        if gesture is None:
            return False
        dx = mouse.x - gesture.mouse.x
        dy = mouse.y - gesture.mouse.y
        if gesture.kind == 'drag':
            position = gesture.position.offset(dx, dy)
            if self.bounds is not None:
                position = constrain_position(position, self._size, self.bounds)
            self.position = position
        else:
            self.size = self._resized(gesture.size.width + dx, gesture.size.height + dy)
        return True

    def _resized(self, width, height):
        width = _clamp(width, self.min_width, self.max_width or width)
        height = _clamp(height, self.min_height, self.max_height or height)
        if self.bounds is not None:
            width = min(width, self.bounds.width - self._position.x)
            height = min(height, self.bounds.height - self._position.y)
        return Size(max(1, width), max(1, height))

    def end_gesture(self):
        """Finish a drag or resize and report the final geometry."""
        gesture = self._gesture
        if gesture is None:
            return False
        self._gesture = None
        if gesture.kind == 'drag':
            self._emit(WindowEventKind.MOVE, self._position)
        else:
            self._emit(WindowEventKind.RESIZE, self._size)
        return True

    def cancel_gesture(self):
        self._gesture = None

    # -- component contract -------------------------------------------------

    def handle_input(self, event):
        """Handle a mouse or key event. Returns True if it was consumed."""
        if self.state is WindowState.CLOSED:
            return False
        if isinstance(event, MouseEvent):
            return self._handle_mouse(event)
        if isinstance(event, KeyEvent):
            return self._handle_key(event)
        return False

    def _handle_mouse(self, event):
        if self._gesture is not None:
            if event.pressed:
                return self.update_gesture(event.position)
            return self.end_gesture()
        if event.button != LEFT_BUTTON or not event.pressed:
            if not self.rect.contains(event.position):
                return False
            return self._forward(event)

        match self.hit_test(event.position):
            case HitRegion.CLOSE:
                return self.close()
            case HitRegion.MINIMIZE:
                return self.minimize()
            case HitRegion.MAXIMIZE:
                return self.toggle_maximize()
            case HitRegion.RESIZE if self.can_resize:
                return self.begin_resize(event.position)
            case HitRegion.TITLE:
                return self.begin_drag(event.position)
            case HitRegion.NONE:
                return False
            case _:
                return self._forward(event)

    def _handle_key(self, event):
        if event.alt and self.focused:
            match event.key:
                case 'f4' if self.closable:
                    return self.close()
                case 'f9' if self.minimizable:
                    return self.minimize()
                case 'f10' if self.maximizable:
                    return self.toggle_maximize()
        return self._forward(event)

    def _forward(self, event):
        handler = getattr(self.content, 'handle_input', None)
        if handler is None or not self.visible:
            return False
        return bool(handler(event))

    def interior(self):
        """The content area in terminal coordinates."""
        return Rect(self._position.x + 1, self._position.y + 1,
                    max(0, self._size.width - 2), max(0, self._size.height - 2))

    def render(self):
        """Render the window as ``size.height`` lines, or '' when hidden."""
        if not self.visible:
            return ''
        body = []
        if self.content is not None:
            interior = self.interior()
            self.content.position = interior.position
            self.content.size = interior.size
            rendered = self.content.render()
            body = rendered.split('\n') if rendered else []
        return '\n'.join(self.frame.render(self, body))


class TextContent:
    """Scrollable, word-wrapped text for the inside of a window.

    Wraps to the width it is given and scrolls with the arrow and page keys.

    Attributes:
        text: Text content (string, list, or tuple of lines)
        scroll: Index of the first visible wrapped line
    """

    def __init__(self, text):
        self.text = "\n".join(text) if isinstance(text, (list, tuple)) else text
        self.scroll = 0
        self.position = Position(0, 0)
        self.visible = True
        self.redraw = True
        self._size = Size(0, 0)
        self._lines: List[str] = []

    @property
    def size(self):
        return self._size

    @size.setter
    def size(self, value):
        if value.width != self._size.width:
            self._size = value
            self._wrap()
        else:
            self._size = value
        self.scroll = min(self.scroll, self._max_scroll())

    @property
    def lines(self):
        return list(self._lines)

    def _wrap(self):
        self._lines = []
        width = max(1, self._size.width)
        for line in self.text.splitlines() or ['']:
            self._lines.extend(textwrap.wrap(line, width) or [''])
        self.redraw = True

    def _max_scroll(self):
        return max(0, len(self._lines) - self._size.height)

    @property
    def scroll_pos(self):
        """Scroll position between 0.0 and 1.0, or None if everything fits."""
        below_the_fold = self._max_scroll()
        if below_the_fold <= 0:
            return None
        return self.scroll / below_the_fold

    def render(self):
        return '\n'.join(self._lines[self.scroll:self.scroll + self._size.height])

    def handle_input(self, event):
        """Scroll on Up/Down/PgUp/PgDn. Returns True if the view moved."""
        if not isinstance(event, KeyEvent) or event.alt or event.ctrl:
            return False
        max_scroll = self._max_scroll()
        page = max(1, self._size.height)
        match event.key:
            case 'down':
                new = min(self.scroll + 1, max_scroll)
            case 'up':
                new = max(self.scroll - 1, 0)
            case 'pgdown':
                new = min(self.scroll + page, max_scroll)
            case 'pgup':
                new = max(self.scroll - page, 0)
            case _:
                return False
        if new == self.scroll:
            return False
        self.scroll = new
        self.redraw = True
        return True
