"""
Input events consumed by the compositor and window events it emits.

Input events are produced by an external decoder (see
:func:`term_compositor.terminal.keystroke_to_event`). Window events replace
per-window callback fields: interested parties subscribe to a window's
:class:`EventChannel` and are called synchronously after each state change.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, List

from .geometry import Position

LOGGER = logging.getLogger(__name__)

LEFT_BUTTON = 0
MIDDLE_BUTTON = 1
RIGHT_BUTTON = 2


@dataclass(frozen=True)
class MouseEvent:
    """A mouse press, motion-while-pressed, or release.

    Attributes:
        position: Cell under the pointer
        button: 0 (left), 1 (middle) or 2 (right)
        pressed: True for press and for motion with the button held
    """
    position: Position
    button: int = LEFT_BUTTON
    pressed: bool = True

    @property
    def type(self):
        return 'mouse'


@dataclass(frozen=True)
class KeyEvent:
    """A decoded keystroke. ``key`` is lower-case: ``'f4'``, ``'left'``, ``'a'``."""
    key: str
    alt: bool = False
    ctrl: bool = False
    shift: bool = False

    @property
    def type(self):
        return 'key'


class WindowEventKind(enum.Enum):
    CLOSE = 'close'
    MINIMIZE = 'minimize'
    MAXIMIZE = 'maximize'
    RESTORE = 'restore'
    FOCUS = 'focus'
    BLUR = 'blur'
    MOVE = 'move'
    RESIZE = 'resize'


@dataclass(frozen=True)
class WindowEvent:
    """Something that happened to a window.

    ``payload`` is the new :class:`Position` for MOVE, the new
    :class:`~term_compositor.geometry.Size` for RESIZE and None otherwise.
    """
    kind: WindowEventKind
    window_id: str
    payload: Any = None


class EventChannel:
    """Synchronous publish/subscribe channel for :class:`WindowEvent`."""

    def __init__(self):
        self._subscribers: List[tuple] = []

    def subscribe(self, callback: Callable[[WindowEvent], None], kinds=None):
        """Register ``callback`` for all events or only the given kinds.

        Args:
            callback: Called with each matching :class:`WindowEvent`
            kinds: Iterable of :class:`WindowEventKind`, or None for all

        Returns:
            A function that removes the subscription when called.
        """
        entry = (callback, frozenset(kinds) if kinds is not None else None)
        self._subscribers.append(entry)

        def unsubscribe():
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def emit(self, event: WindowEvent):
        """Deliver ``event`` to every matching subscriber, in subscription order."""
        LOGGER.debug('window %s: %s', event.window_id, event.kind.value)
        for callback, kinds in list(self._subscribers):
            if kinds is None or event.kind in kinds:
                callback(event)

    def __len__(self):
        return len(self._subscribers)

