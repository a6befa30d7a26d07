"""
Blessed integration: terminal sink, keystroke decoding and the event loop.

:class:`Compositor` ties a :class:`~term_compositor.window_manager.WindowManager`
to a real terminal. It reads keystrokes with ``blessed``, routes them to the
manager, renders through a :class:`~term_compositor.render.RenderEngine` and
reacts to terminal resizes. Mouse decoding is left to the application, which
passes decoded :class:`~term_compositor.events.MouseEvent` objects to
:meth:`Compositor.feed`.
"""

import collections
import dataclasses
import logging
import signal
import sys
import time
from typing import Optional

from blessed import Terminal

from . import config
from .events import KeyEvent
from .geometry import Size
from .render import RenderEngine, TerminalSize
from .window import WindowState
from .window_manager import WindowManager

LOGGER = logging.getLogger(__name__)


class BlessedTerminalSink:
    """Terminal sink writing through a ``blessed.Terminal``.

    Args:
        term: Terminal to write to; a new one is created if omitted
        stream: Output stream
    """

    def __init__(self, term: Optional[Terminal] = None, stream=None):
        self.term = term or Terminal()
        self.stream = stream if stream is not None else sys.stdout

    def set_cursor_position(self, col, row):
        # blessed is 0-based, the sink contract is 1-based.
        print(self.term.move_xy(col - 1, row - 1), end='', file=self.stream)

    def write(self, text):
        print(text, end='', file=self.stream)

    def flush(self):
        print('', end='', flush=True, file=self.stream)

    def get_terminal_size(self):
        return TerminalSize(self.term.width, self.term.height)


def _key_name(name):
    return name.lower().replace('_', '')


# Keys blessed reports under more than one name, depending on the release.
_KEY_ALIASES = {
    'KEY_TAB': 'tab',
    'KEY_CTRL_I': 'tab',
    'KEY_ENTER': 'enter',
    'KEY_CTRL_M': 'enter',
    'KEY_CTRL_J': 'enter',
    'KEY_ESCAPE': 'escape',
    'KEY_CTRL_[': 'escape',
}

_MODIFIER_PREFIXES = (('KEY_ALT_', 'alt'), ('KEY_CTRL_', 'ctrl'), ('KEY_SHIFT_', 'shift'))


def _decode_name(name) -> KeyEvent:
    if name in _KEY_ALIASES:
        return KeyEvent(_KEY_ALIASES[name])
    for prefix, flag in _MODIFIER_PREFIXES:
        if name.startswith(prefix):
            event = _decode_name('KEY_' + name[len(prefix):])
            return dataclasses.replace(event, **{flag: True})
    if name.startswith('KEY_'):
        return KeyEvent(_key_name(name[4:]))
    return KeyEvent(_key_name(name))


def keystroke_to_event(term, keystroke) -> Optional[KeyEvent]:
    """Translate a blessed ``Keystroke`` into a :class:`KeyEvent`.

    Named keys lose their ``KEY_`` prefix and are lower-cased
    (``KEY_PGDOWN`` becomes ``'pgdown'``). Tab, Enter and Escape decode to
    ``'tab'``, ``'enter'`` and ``'escape'`` whether blessed names them as
    keys or as control characters. An escape immediately followed by
    another key is read as Alt plus that key. Other control characters
    become the matching letter with ``ctrl`` set.

    Returns:
        The event, or None for an empty keystroke.
    """
    name = keystroke.name
    if not (name or str(keystroke)):
        return None
    if name:
        if _KEY_ALIASES.get(name) == 'escape':
            follow = term.inkey(timeout=0)
            event = keystroke_to_event(term, follow) if follow is not None else None
            if event is None:
                return KeyEvent('escape')
            return dataclasses.replace(event, alt=True)
        return _decode_name(name)

    text = str(keystroke)
    match text:
        case '\t':
            return KeyEvent('tab')
        case '\r' | '\n':
            return KeyEvent('enter')
        case '\x1b':
            return KeyEvent('escape')
    if len(text) == 1 and ord(text) < 32:
        return KeyEvent(chr(ord(text) + 96), ctrl=True)
    return KeyEvent(text)


class Compositor:
    """Event loop driving a window manager on a terminal.

    Args:
        manager: The window manager; a new one sized to the terminal is
            created if omitted
        term: blessed Terminal
        target_fps: Maximum render passes per second
        inkey_timeout: Seconds to wait for a keystroke per tick
        idle_sleep: Seconds to sleep between ticks
        register_resize_handler: Install a SIGWINCH handler

    The loop runs until :meth:`stop` is called or no open window remains.
    Closed windows are removed from the manager on the tick after they close.
    """

    def __init__(
        self,
        manager: Optional[WindowManager] = None,
        *,
        term: Optional[Terminal] = None,
        target_fps: float = config.DEFAULT_TARGET_FPS,
        inkey_timeout: float = config.INKEY_TIMEOUT,
        idle_sleep: float = config.IDLE_SLEEP,
        register_resize_handler: bool = True,
    ):
        self.term = term or Terminal()
        size = Size(self.term.width, self.term.height)
        if manager is None:
            manager = WindowManager(size)
        elif manager.bounds != size:
            manager.update_terminal_size(size)
        self.manager = manager
        self.sink = BlessedTerminalSink(self.term)
        self.engine = RenderEngine(self.sink, target_fps)
        self.inkey_timeout = inkey_timeout
        self.idle_sleep = idle_sleep
        self._pending = collections.deque()
        self._resize_pending = False
        self._running = False
        if register_resize_handler:
            signal.signal(signal.SIGWINCH, self._handle_sigwinch)

    def _handle_sigwinch(self, signum, frame):
        """Mark the terminal as resized; applied on the next tick."""
        self._resize_pending = True

    def feed(self, event):
        """Queue an input event for the next tick."""
        self._pending.append(event)

    def stop(self):
        self._running = False

    @property
    def running(self):
        return self._running

    def on_tick(self):
        """Optional hook executed once per loop iteration after rendering."""

    def run(self):
        """Enter the main event loop."""
        if not self.manager.has_open_windows():
            raise RuntimeError(
                "Compositor.run() called with no windows. "
                "Add windows to the manager before run()."
            )

        self._running = True
        with self.term.fullscreen(), self.term.cbreak(), self.term.hidden_cursor():
            self.engine.force_full_render()
            while self._running and self.manager.has_open_windows():
                self.tick()
                time.sleep(self.idle_sleep)
        self._running = False

    def tick(self):
        """Run one loop iteration: resize, input, cleanup, render."""
        if self._resize_pending:
            self._process_resize()

        key = self.term.inkey(timeout=self.inkey_timeout)
        if key:
            event = keystroke_to_event(self.term, key)
            if event is not None:
                self._pending.append(event)

        while self._pending:
            self.manager.handle_input(self._pending.popleft())

        self._remove_closed()
        rendered = self.engine.render([self.manager])
        self.on_tick()
        return rendered

    def _remove_closed(self):
        for window in self.manager.windows:
            if window.state is WindowState.CLOSED:
                self.manager.remove_window(window.id)

    def _process_resize(self):
        """Fit the windows to the new terminal size and repaint everything."""
        self._resize_pending = False
        size = Size(self.term.width, self.term.height)
        LOGGER.info('terminal resized to %dx%d', size.width, size.height)
        self.sink.write(self.term.clear)
        self.manager.update_terminal_size(size)
        self.engine.force_full_render()
