"""Exceptions raised by the compositor."""


class CompositorError(Exception):
    """Base class for compositor errors."""


class WindowNotFound(CompositorError, KeyError):
    """An operation named a window id the manager does not track."""

    def __init__(self, window_id):
        super().__init__(window_id)
        self.window_id = window_id

    def __str__(self):
        return f'unknown window: {self.window_id!r}'


class InvalidTransition(CompositorError):
    """A window was asked for a transition it does not support.

    Attributes:
        window_id: Id of the window the transition was requested for
        action: Name of the refused action (``'maximize'``, ``'snap'``, ...)
        reason: Human readable explanation
    """

    def __init__(self, window_id, action, reason=''):
        self.window_id = window_id
        self.action = action
        self.reason = reason
        message = f'cannot {action} window {window_id!r}'
        if reason:
            message += f': {reason}'
        super().__init__(message)


class BufferAllocationError(CompositorError, ValueError):
    """A cell buffer was requested with unusable dimensions."""
