"""
Terminal Compositor

A terminal window compositor built on the Blessed library. Renders overlapping,
movable, resizable windows with double buffering and minimal redraws, and
manages their z-order, focus, snapping and tiling layouts.
"""

from .buffer import CellBuffer, DirtyRegion
from .errors import BufferAllocationError, CompositorError, InvalidTransition, WindowNotFound
from .events import EventChannel, KeyEvent, MouseEvent, WindowEvent, WindowEventKind
from .geometry import Position, Rect, Size, constrain_position, constrain_size
from .layout import (
    CustomLayout,
    GridLayout,
    HorizontalLayout,
    MasterPaneLayout,
    SnapRegion,
    TilingLayout,
    VerticalLayout,
)
from .render import FrameThrottler, RenderEngine, TerminalSize
from .terminal import BlessedTerminalSink, Compositor, keystroke_to_event
from .window import ContentFrame, HitRegion, TextContent, Window, WindowState
from .window_manager import (
    DragState,
    ManagedWindow,
    SnapZones,
    WindowManager,
    WindowManagerOptions,
)

__all__ = [
    'BlessedTerminalSink',
    'BufferAllocationError',
    'CellBuffer',
    'Compositor',
    'CompositorError',
    'ContentFrame',
    'CustomLayout',
    'DirtyRegion',
    'DragState',
    'EventChannel',
    'FrameThrottler',
    'GridLayout',
    'HitRegion',
    'HorizontalLayout',
    'InvalidTransition',
    'KeyEvent',
    'ManagedWindow',
    'MasterPaneLayout',
    'MouseEvent',
    'Position',
    'Rect',
    'RenderEngine',
    'Size',
    'SnapRegion',
    'SnapZones',
    'TerminalSize',
    'TextContent',
    'TilingLayout',
    'VerticalLayout',
    'Window',
    'WindowEvent',
    'WindowEventKind',
    'WindowManager',
    'WindowManagerOptions',
    'WindowNotFound',
    'WindowState',
    'constrain_position',
    'constrain_size',
    'keystroke_to_event',
]

__version__ = '0.1.0'
