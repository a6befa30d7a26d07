"""
Window manager: registry, z-order, focus, snapping, tiling and composition.

The :class:`WindowManager` owns every window handed to it, keeps them in a
stack ordered back to front, routes input (drags, shortcuts, click-to-focus)
and renders all visible windows into one full-screen frame. It implements
the component contract, so it can be passed straight to a
:class:`~term_compositor.render.RenderEngine`.

Operations on unknown window ids or refused transitions are silent no-ops
logged at debug level. Pass ``strict=True`` to get
:class:`~term_compositor.errors.WindowNotFound` and
:class:`~term_compositor.errors.InvalidTransition` instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from . import config
from .buffer import CellBuffer
from .errors import InvalidTransition, WindowNotFound
from .events import LEFT_BUTTON, KeyEvent, MouseEvent, WindowEventKind
from .geometry import Position, Rect, Size, constrain_position, constrain_size
from .layout import (
    DEFAULT_LAYOUTS,
    SHORTCUT_LAYOUTS,
    CustomLayout,
    SnapRegion,
    TilingLayout,
    detect_snap_region,
    snap_rect,
)
from .window import HitRegion, Window, WindowState

LOGGER = logging.getLogger(__name__)


@dataclass
class SnapZones:
    """Which snap targets take part in drags.

    Attributes:
        enabled: Master switch for snapping while dragging
        threshold: Distance in cells from an edge that triggers an edge
            snap; corners use half of it
        snap_to_edges: Edge regions (left, right, top, bottom)
        snap_to_corners: Quarter regions
        snap_to_other_windows: Align a dragged window's edges with nearby
            edges of other visible windows
    """
    enabled: bool = True
    threshold: int = config.SNAP_THRESHOLD
    snap_to_edges: bool = True
    snap_to_corners: bool = True
    snap_to_other_windows: bool = False


@dataclass
class WindowManagerOptions:
    max_windows: int = config.MAX_WINDOWS
    cascade_offset: Position = Position(*config.CASCADE_OFFSET)
    default_window_position: Position = Position(*config.DEFAULT_WINDOW_POSITION)
    default_window_size: Size = Size(*config.DEFAULT_WINDOW_SIZE)
    allow_multiple_modals: bool = False


@dataclass
class ManagedWindow:
    """Bookkeeping the manager keeps for each window it owns.

    Attributes:
        window: The application's window
        z_index: Paint order; higher is further to the front
        is_modal: Modal windows are never snapped, tiled, minimized,
            maximized or dragged by the manager
        original_position: Position saved before the window was maximized
            or minimized, or the position it was added at
        original_size: Size saved alongside ``original_position``
        is_snapped: Whether the window occupies a snap region
        snap_region: The region it is snapped to
        snap_size: Size before the current snap episode began
        is_maximized: Whether the window fills the screen
    """
    window: Window
    z_index: int
    is_modal: bool = False
    original_position: Optional[Position] = None
    original_size: Optional[Size] = None
    is_snapped: bool = False
    snap_region: Optional[SnapRegion] = None
    snap_size: Optional[Size] = None
    is_maximized: bool = False
    unsubscribe: Optional[Callable[[], None]] = field(default=None, repr=False)

    @property
    def id(self):
        return self.window.id

    @property
    def is_visible(self):
        return self.window.visible

    def clear_snap(self):
        self.is_snapped = False
        self.snap_region = None
        self.snap_size = None


@dataclass
class DragState:
    """A window drag in progress, from press to release or snap.

    ``press_region`` is the snap region the pointer was pressed in. It does
    not snap until the pointer has left it.
    """
    is_dragging: bool = False
    window_id: Optional[str] = None
    initial_window_position: Position = Position(0, 0)
    initial_mouse_position: Position = Position(0, 0)
    last_mouse_position: Optional[Position] = None
    press_region: Optional[SnapRegion] = None


class WindowManager:
    """Manages windows on a terminal of size ``bounds``.

    Args:
        bounds: Terminal size; update it with :meth:`update_terminal_size`
        options: :class:`WindowManagerOptions`
        snap_zones: :class:`SnapZones`
        strict: Raise instead of ignoring unknown ids and refused transitions
    """

    def __init__(self, bounds: Optional[Size] = None, *,
                 options: Optional[WindowManagerOptions] = None,
                 snap_zones: Optional[SnapZones] = None, strict=False):
        self.bounds = bounds or Size(*config.DEFAULT_BOUNDS)
        self.options = options or WindowManagerOptions()
        self.snap_zones = snap_zones or SnapZones()
        self.strict = strict
        self.drag_state = DragState()
        self.position = Position(0, 0)
        self.visible = True
        self._windows: Dict[str, ManagedWindow] = {}
        self._stack: List[str] = []
        self._focused_id: Optional[str] = None
        self._next_z = config.FIRST_Z_INDEX
        self._resizing_id: Optional[str] = None
        self._layouts: Dict[str, TilingLayout] = dict(DEFAULT_LAYOUTS)
        self._redraw = True

    # -- lookups ------------------------------------------------------------

    def _lookup(self, window_id, action):
        managed = self._windows.get(window_id)
        if managed is None:
            if self.strict:
                raise WindowNotFound(window_id)
            LOGGER.debug('%s: unknown window %r', action, window_id)
        return managed

    def _refuse(self, window_id, action, reason):
        if self.strict:
            raise InvalidTransition(window_id, action, reason)
        LOGGER.debug('%s refused for window %r: %s', action, window_id, reason)
        return False

    def get_window(self, window_id) -> Optional[ManagedWindow]:
        return self._windows.get(window_id)

    @property
    def windows(self) -> List[Window]:
        """Tracked windows in the order they were added."""
        return [managed.window for managed in self._windows.values()]

    @property
    def managed_windows(self) -> List[ManagedWindow]:
        return list(self._windows.values())

    @property
    def window_stack(self) -> List[str]:
        """Window ids from back to front."""
        return list(self._stack)

    @property
    def focused_window(self) -> Optional[Window]:
        if self._focused_id is None:
            return None
        return self._windows[self._focused_id].window

    @property
    def focused_window_id(self):
        return self._focused_id

    def __len__(self):
        return len(self._windows)

    def __contains__(self, window_id):
        return window_id in self._windows

    def get_window_at_position(self, position) -> Optional[str]:
        """Return the id of the front-most visible window under ``position``."""
        for window_id in reversed(self._stack):
            window = self._windows[window_id].window
            if window.visible and window.rect.contains(position):
                return window_id
        return None

    def has_open_windows(self):
        return any(m.window.state is not WindowState.CLOSED for m in self._windows.values())

    # -- registry -----------------------------------------------------------

    def add_window(self, window: Window, position: Optional[Position] = None,
                   size: Optional[Size] = None) -> Optional[ManagedWindow]:
        """Track ``window`` and focus it.

        Adding a window that is already tracked only focuses it again. A new
        window without an explicit ``position`` is placed on the first of a
        few cascaded positions not already taken by a visible window.
        """
        if window.id in self._windows:
            self.focus_window(window.id)
            return self._windows[window.id]
        if len(self._windows) >= self.options.max_windows:
            if self.strict:
                raise InvalidTransition(window.id, 'add',
                                        f'maximum of {self.options.max_windows} windows reached')
            LOGGER.warning('not adding window %r: maximum of %d windows reached',
                           window.id, self.options.max_windows)
            return None
        if (window.modal and not self.options.allow_multiple_modals and
                any(m.is_modal for m in self._windows.values())):
            if self.strict:
                raise InvalidTransition(window.id, 'add', 'a modal window is already open')
            LOGGER.warning('not adding modal window %r: a modal window is already open', window.id)
            return None

        window.bounds = self.bounds
        size = constrain_size(size or window.size or self.options.default_window_size, self.bounds)
        if position is None:
            position = self._initial_position(size)
        position = self.constrain_position(position, size)
        window.move_to(position)
        window.resize_to(size)

        managed = ManagedWindow(
            window=window,
            z_index=self._next_z,
            is_modal=window.modal,
            original_position=position,
            original_size=size,
        )
        self._next_z += 1
        managed.unsubscribe = window.events.subscribe(self._on_window_event)
        self._windows[window.id] = managed
        self._stack.append(window.id)
        self._redraw = True
        LOGGER.info('added window %r at %s', window.id, position)
        self.focus_window(window.id)
        return managed

    def _initial_position(self, size):
        base = self.options.default_window_position
        step = self.options.cascade_offset
        taken = {m.window.position for m in self._windows.values() if m.is_visible}
        for i in range(config.CASCADE_CANDIDATES):
            candidate = self.constrain_position(base.offset(step.x * i, step.y * i), size)
            if candidate not in taken:
                return candidate
        return base

    def remove_window(self, window_id) -> Optional[Window]:
        """Stop tracking a window. Returns the window, or None if unknown."""
        managed = self._lookup(window_id, 'remove')
        if managed is None:
            return None
        if managed.unsubscribe is not None:
            managed.unsubscribe()
        del self._windows[window_id]
        self._stack.remove(window_id)
        if self.drag_state.window_id == window_id:
            self.drag_state = DragState()
        if self._resizing_id == window_id:
            self._resizing_id = None
        if self._focused_id == window_id:
            self._focused_id = None
            managed.window.blur()
            self._focus_next()
        self._redraw = True
        LOGGER.info('removed window %r', window_id)
        return managed.window

    def close_window(self, window_id):
        """Close a window. It stays tracked until :meth:`remove_window`."""
        managed = self._lookup(window_id, 'close')
        if managed is None:
            return False
        if not managed.window.close():
            return self._refuse(window_id, 'close', 'window refused to close')
        return True

    def close_all_windows(self):
        for managed in list(self._windows.values()):
            managed.window.close()

    # -- focus and z-order --------------------------------------------------

    def focus_window(self, window_id):
        """Focus a window and bring it to the front.

        Focusing a minimized window restores it first.
        """
        managed = self._lookup(window_id, 'focus')
        if managed is None:
            return False
        window = managed.window
        if window.state is WindowState.CLOSED:
            return self._refuse(window_id, 'focus', 'window is closed')
        if window.state is WindowState.MINIMIZED:
            return self.restore(window_id)

        if self._focused_id is not None and self._focused_id != window_id:
            previous = self._windows.get(self._focused_id)
            if previous is not None:
                previous.window.blur()
        window.focus()
        self._focused_id = window_id
        self._bring_to_front(window_id)
        return True

    def _bring_to_front(self, window_id):
        self._stack.remove(window_id)
        self._stack.append(window_id)
        self._reassign_z_indices()

    def _reassign_z_indices(self):
        for window_id in self._stack:
            self._windows[window_id].z_index = self._next_z
            self._next_z += 1
        self._redraw = True

    def send_to_back(self, window_id):
        managed = self._lookup(window_id, 'send to back')
        if managed is None:
            return False
        if managed.is_modal:
            return self._refuse(window_id, 'send to back', 'window is modal')
        self._stack.remove(window_id)
        self._stack.insert(0, window_id)
        self._reassign_z_indices()
        return True

    def _visible_ids(self):
        return [i for i in self._stack if self._windows[i].is_visible]

    def cycle_windows(self):
        """Focus the next visible window in stack order."""
        visible = self._visible_ids()
        if not visible:
            return False
        if self._focused_id in visible:
            index = (visible.index(self._focused_id) + 1) % len(visible)
        else:
            index = 0
        return self.focus_window(visible[index])

    def _focus_next(self):
        visible = self._visible_ids()
        if visible:
            self.focus_window(visible[-1])
        else:
            self._focused_id = None

    def _on_window_event(self, event):
        managed = self._windows.get(event.window_id)
        if managed is None:
            return
        kind = event.kind
        if kind is WindowEventKind.MAXIMIZE:
            managed.is_maximized = True
            managed.clear_snap()
            managed.original_position, managed.original_size = managed.window.saved_geometry
        elif kind is WindowEventKind.RESTORE:
            managed.is_maximized = False
        elif kind in (WindowEventKind.CLOSE, WindowEventKind.MINIMIZE):
            if kind is WindowEventKind.MINIMIZE and managed.window.saved_geometry:
                managed.original_position, managed.original_size = managed.window.saved_geometry
            managed.is_maximized = False
            if self.drag_state.window_id == event.window_id:
                self.drag_state = DragState()
            if self._focused_id == event.window_id:
                managed.window.blur()
                self._focused_id = None
                self._focus_next()
        self._redraw = True

    # -- state transitions --------------------------------------------------

    def maximize(self, window_id):
        """Fill the terminal with a window, saving its geometry the first time."""
        managed = self._lookup(window_id, 'maximize')
        if managed is None:
            return False
        if managed.is_modal:
            return self._refuse(window_id, 'maximize', 'window is modal')
        window = managed.window
        window.bounds = self.bounds
        if window.state is WindowState.MAXIMIZED:
            window.move_to(Position(0, 0))
            window.resize_to(self.bounds)
            return True
        if not window.maximize():
            return self._refuse(window_id, 'maximize', f'window is {window.state.value}')
        return True

    def minimize(self, window_id):
        managed = self._lookup(window_id, 'minimize')
        if managed is None:
            return False
        if managed.is_modal:
            return self._refuse(window_id, 'minimize', 'window is modal')
        if not managed.window.minimize():
            return self._refuse(window_id, 'minimize', f'window is {managed.window.state.value}')
        return True

    def restore(self, window_id):
        """Bring a minimized or maximized window back to its saved geometry."""
        managed = self._lookup(window_id, 'restore')
        if managed is None:
            return False
        window = managed.window
        if not window.restore():
            return self._refuse(window_id, 'restore', f'window is {window.state.value}')
        # The terminal may have shrunk since the geometry was saved.
        size = constrain_size(window.size, self.bounds)
        window.resize_to(size)
        window.move_to(self.constrain_position(window.position, size))
        self.focus_window(window_id)
        return True

    def toggle_maximize(self, window_id):
        managed = self._lookup(window_id, 'toggle maximize')
        if managed is None:
            return False
        if managed.window.state is WindowState.MAXIMIZED:
            return self.restore(window_id)
        return self.maximize(window_id)

    def move_window(self, window_id, position):
        """Move a normal window, clamped to the terminal."""
        managed = self._lookup(window_id, 'move')
        if managed is None:
            return False
        window = managed.window
        if window.state is not WindowState.NORMAL:
            return self._refuse(window_id, 'move', f'window is {window.state.value}')
        window.move_to(self.constrain_position(position, window.size))
        return True

    def resize_window(self, window_id, size):
        """Resize a normal window, clamped to the terminal."""
        managed = self._lookup(window_id, 'resize')
        if managed is None:
            return False
        window = managed.window
        if window.state is not WindowState.NORMAL:
            return self._refuse(window_id, 'resize', f'window is {window.state.value}')
        size = constrain_size(size, self.bounds)
        window.resize_to(size)
        window.move_to(self.constrain_position(window.position, size))
        return True

    # -- snapping -----------------------------------------------------------

    def snap_window(self, window_id, region):
        """Snap a window to half or a quarter of the screen.

        The size the window had before the first snap of an episode is kept
        for :meth:`unsnap_window`; snapping again to another region keeps
        the size from the first snap. ``'maximize'`` maximizes instead.
        """
        managed = self._lookup(window_id, 'snap')
        if managed is None:
            return False
        if managed.is_modal:
            return self._refuse(window_id, 'snap', 'window is modal')
        region = SnapRegion(region)
        if region is SnapRegion.MAXIMIZE:
            return self.maximize(window_id)
        window = managed.window
        if window.state is WindowState.CLOSED:
            return self._refuse(window_id, 'snap', 'window is closed')

        if not managed.is_snapped:
            saved = window.saved_geometry
            managed.snap_size = saved[1] if saved else window.size
        rect = snap_rect(region, self.bounds)
        window.place(rect.position, rect.size)
        managed.is_snapped = True
        managed.snap_region = region
        managed.is_maximized = False
        self._redraw = True
        return True

    def unsnap_window(self, window_id):
        """Give a snapped window back its pre-snap size.

        The window stays where it currently is (moved only as far as needed
        to keep it on screen); the pre-snap position is not restored, so a
        window dragged out of a snap keeps following the pointer.
        """
        managed = self._lookup(window_id, 'unsnap')
        if managed is None:
            return False
        if not managed.is_snapped:
            return self._refuse(window_id, 'unsnap', 'window is not snapped')
        window = managed.window
        if managed.snap_size is not None:
            size = constrain_size(managed.snap_size, self.bounds)
            window.resize_to(size)
            window.move_to(self.constrain_position(window.position, size))
        managed.clear_snap()
        self._redraw = True
        return True

    def detect_snap_region(self, position) -> Optional[SnapRegion]:
        """Return the snap region a drag at ``position`` would commit to."""
        zones = self.snap_zones
        if not zones.enabled:
            return None
        return detect_snap_region(position, self.bounds, zones.threshold,
                                  edges=zones.snap_to_edges, corners=zones.snap_to_corners)

    def constrain_position(self, position, size):
        """Clamp ``position`` so a window of ``size`` stays on screen."""
        return constrain_position(position, size, self.bounds)

    def _align_to_neighbours(self, position, size, window_id):
        threshold = self.snap_zones.threshold
        best_x, dist_x = position.x, threshold + 1
        best_y, dist_y = position.y, threshold + 1
        for other_id in self._visible_ids():
            if other_id == window_id:
                continue
            other = self._windows[other_id].window.rect
            for candidate in (other.x - size.width, other.right, other.x, other.right - size.width):
                distance = abs(position.x - candidate)
                if distance < dist_x:
                    best_x, dist_x = candidate, distance
            for candidate in (other.y - size.height, other.bottom, other.y, other.bottom - size.height):
                distance = abs(position.y - candidate)
                if distance < dist_y:
                    best_y, dist_y = candidate, distance
        return Position(best_x, best_y)

    # -- tiling -------------------------------------------------------------

    def register_layout(self, name, layout: TilingLayout):
        self._layouts[name] = layout

    @property
    def layouts(self):
        return dict(self._layouts)

    def apply_tiling_layout(self, layout):
        """Arrange all visible, non-modal windows.

        Args:
            layout: A registered layout name (``'grid-2x2'``, ``'grid-3x3'``,
                ``'master-pane'``, ``'vertical'``, ``'horizontal'`` or one
                added with :meth:`register_layout`) or a
                :class:`~term_compositor.layout.TilingLayout` instance

        Windows are taken in the order they were added. Every placed window
        loses its snapped and maximized status.
        """
        if isinstance(layout, str):
            name = layout
            layout = self._layouts.get(name)
            if layout is None:
                if self.strict:
                    raise KeyError(f'unknown tiling layout: {name!r}')
                LOGGER.warning('unknown tiling layout %r', name)
                return False
        targets = [m for m in self._windows.values() if m.is_visible and not m.is_modal]
        if not targets:
            return False

        if isinstance(layout, CustomLayout):
            placements = [(window, Rect.from_position_size(pos, size))
                          for window, pos, size in layout.place(targets, self.bounds)]
        else:
            rects = layout.arrange(len(targets), self.bounds)
            placements = [(m.window, rect) for m, rect in zip(targets, rects)]

        for window, rect in placements:
            managed = self._windows.get(window.id)
            if managed is None:
                continue
            window.place(rect.position, rect.size)
            managed.clear_snap()
            managed.is_maximized = False
        self._redraw = True
        LOGGER.info('applied %s to %d window(s)', type(layout).__name__, len(placements))
        return True

    def arrange_cascade(self):
        """Stack visible, non-modal windows diagonally at the default size."""
        base = self.options.default_window_position
        step = self.options.cascade_offset
        size = constrain_size(self.options.default_window_size, self.bounds)
        targets = [m for m in self._windows.values() if m.is_visible and not m.is_modal]
        for index, managed in enumerate(targets):
            position = self.constrain_position(base.offset(step.x * index, step.y * index), size)
            managed.window.place(position, size)
            managed.clear_snap()
            managed.is_maximized = False
        self._redraw = True
        return bool(targets)

    # -- dragging -----------------------------------------------------------

    def start_drag(self, window_id, mouse_position):
        managed = self._lookup(window_id, 'drag')
        if managed is None:
            return False
        if managed.is_modal:
            return self._refuse(window_id, 'drag', 'window is modal')
        window = managed.window
        if not window.begin_drag(mouse_position):
            return self._refuse(window_id, 'drag', 'window is not draggable in its state')
        self.drag_state = DragState(
            is_dragging=True,
            window_id=window_id,
            initial_window_position=window.position,
            initial_mouse_position=mouse_position,
            last_mouse_position=mouse_position,
            press_region=self.detect_snap_region(mouse_position),
        )
        return True

    def drag_to(self, mouse_position):
        """Advance the current drag to ``mouse_position``.

        Entering a snap region snaps the window and ends the drag. The
        region the drag started in only counts once the pointer has left it,
        so windows whose title bar lies in a snap band can still be moved.
        """
        state = self.drag_state
        if not state.is_dragging:
            return False
        managed = self._windows.get(state.window_id)
        if managed is None:
            self.drag_state = DragState()
            return False
        state.last_mouse_position = mouse_position

        region = self.detect_snap_region(mouse_position)
        if region is None:
            state.press_region = None
        elif region is not state.press_region:
            window_id = state.window_id
            self.drag_state = DragState()
            managed.window.cancel_gesture()
            self.snap_window(window_id, region)
            return True

        window = managed.window
        position = state.initial_window_position.offset(
            mouse_position.x - state.initial_mouse_position.x,
            mouse_position.y - state.initial_mouse_position.y,
        )
        if self.snap_zones.enabled and self.snap_zones.snap_to_other_windows:
            position = self._align_to_neighbours(position, window.size, state.window_id)
        window.move_to(self.constrain_position(position, window.size))
        if managed.is_snapped:
            self.unsnap_window(state.window_id)
        self._redraw = True
        return True

    def end_drag(self):
        """Finish the current drag; the window reports its final position."""
        state = self.drag_state
        if not state.is_dragging:
            return False
        self.drag_state = DragState()
        managed = self._windows.get(state.window_id)
        if managed is not None:
            managed.window.end_gesture()
        self._redraw = True
        return True

    # -- input --------------------------------------------------------------

    def handle_input(self, event):
        """Route an input event. Returns True if it was consumed.

        Priority: an active drag or resize takes all mouse events; then
        Alt shortcuts; then a left press focuses the front-most window
        under the pointer and may start a drag or go to that window; other
        keys go to the focused window.
        """
        if isinstance(event, MouseEvent):
            if self.drag_state.is_dragging:
                if event.pressed:
                    self.drag_to(event.position)
                else:
                    self.end_drag()
                return True
            if self._resizing_id is not None:
                managed = self._windows.get(self._resizing_id)
                if managed is not None:
                    managed.window.handle_input(event)
                    self._redraw = True
                if managed is None or not managed.window.is_resizing:
                    self._resizing_id = None
                return True

        if isinstance(event, KeyEvent) and event.alt and self._handle_shortcut(event):
            return True

        if isinstance(event, MouseEvent) and event.button == LEFT_BUTTON and event.pressed:
            window_id = self.get_window_at_position(event.position)
            if window_id is None:
                return False
            self.focus_window(window_id)
            managed = self._windows[window_id]
            window = managed.window
            if window.hit_test(event.position) is HitRegion.TITLE:
                if not managed.is_modal and window.can_drag:
                    self.start_drag(window_id, event.position)
                return True
            if self._modal_refuses(managed, event):
                return True
            window.handle_input(event)
            if window.is_resizing:
                self._resizing_id = window_id
            self._redraw = True
            return True

        if self._focused_id is not None:
            managed = self._windows[self._focused_id]
            if self._modal_refuses(managed, event):
                return True
            return managed.window.handle_input(event)
        return False

    def _modal_refuses(self, managed, event):
        """Minimize and maximize clicks and keys are ignored on modal windows."""
        if not managed.is_modal:
            return False
        if isinstance(event, MouseEvent):
            refused = (event.button == LEFT_BUTTON and event.pressed and
                       managed.window.hit_test(event.position) in (HitRegion.MINIMIZE, HitRegion.MAXIMIZE))
        else:
            refused = isinstance(event, KeyEvent) and event.alt and event.key in ('f9', 'f10')
        if refused:
            LOGGER.debug('ignored %r on modal window %r', event, managed.id)
        return refused

    def _handle_shortcut(self, event):
        if event.key == 'tab':
            return self.cycle_windows()
        window_id = self._focused_id
        if window_id is None:
            return False
        match event.key:
            case 'left':
                self.snap_window(window_id, SnapRegion.LEFT)
                return True
            case 'right':
                self.snap_window(window_id, SnapRegion.RIGHT)
                return True
            case 'up':
                self.snap_window(window_id, SnapRegion.MAXIMIZE)
                return True
            case 'down':
                if self._windows[window_id].is_snapped:
                    self.unsnap_window(window_id)
                else:
                    self.restore(window_id)
                return True
            case key if key.isascii() and key.isdigit() and 1 <= int(key) <= len(SHORTCUT_LAYOUTS):
                self.apply_tiling_layout(SHORTCUT_LAYOUTS[int(key) - 1])
                return True
        return False

    # -- terminal resize ----------------------------------------------------

    def update_terminal_size(self, bounds: Size):
        """Adopt new terminal bounds.

        Maximized and snapped windows are laid out again for the new bounds;
        every other window is shrunk and moved as needed to stay on screen.
        """
        LOGGER.info('terminal bounds %dx%d -> %dx%d', self.bounds.width, self.bounds.height,
                    bounds.width, bounds.height)
        self.bounds = bounds
        for managed in self._windows.values():
            window = managed.window
            window.bounds = bounds
            if window.state is WindowState.MAXIMIZED:
                window.move_to(Position(0, 0))
                window.resize_to(bounds)
            elif managed.is_snapped and managed.snap_region is not None:
                rect = snap_rect(managed.snap_region, bounds)
                window.move_to(rect.position)
                window.resize_to(rect.size)
            else:
                size = constrain_size(window.size, bounds)
                window.resize_to(size)
                window.move_to(constrain_position(window.position, size, bounds))
        self._redraw = True

    # -- composition --------------------------------------------------------

    @property
    def size(self):
        return self.bounds

    @property
    def redraw(self):
        return self._redraw or any(m.window.redraw for m in self._windows.values())

    @redraw.setter
    def redraw(self, value):
        self._redraw = value

    def compose(self) -> CellBuffer:
        """Paint all visible windows, back to front, into a new buffer."""
        buffer = CellBuffer(self.bounds.width, self.bounds.height)
        for window_id in self._stack:
            window = self._windows[window_id].window
            if not window.visible:
                window.redraw = False
                continue
            content = window.render()
            x, y = window.position.x, window.position.y
            for row, line in enumerate(content.split('\n')[:window.size.height]):
                buffer.write(x, y + row, line, max_width=window.size.width)
            window.redraw = False

        state = self.drag_state
        if state.is_dragging and state.last_mouse_position is not None:
            region = self.detect_snap_region(state.last_mouse_position)
            if region is not None:
                self._draw_snap_preview(buffer, snap_rect(region, self.bounds))
        self._redraw = False
        return buffer

    def _draw_snap_preview(self, buffer, rect):
        char = config.SNAP_PREVIEW_CHAR
        buffer.fill_rect(rect.x, rect.y, rect.width, 1, char)
        buffer.fill_rect(rect.x, rect.bottom - 1, rect.width, 1, char)
        buffer.fill_rect(rect.x, rect.y, 1, rect.height, char)
        buffer.fill_rect(rect.right - 1, rect.y, 1, rect.height, char)

    def render(self):
        """Render the composed frame as rows separated by newlines."""
        return str(self.compose())
