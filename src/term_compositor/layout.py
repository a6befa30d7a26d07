"""
Screen partitioning: snap regions and tiling layouts.

Everything here is pure geometry over a bounds :class:`Size`; applying the
results to windows is the window manager's job.
"""

import enum
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import config
from .geometry import Rect


class SnapRegion(enum.Enum):
    LEFT = 'left'
    RIGHT = 'right'
    TOP = 'top'
    BOTTOM = 'bottom'
    TOP_LEFT = 'topleft'
    TOP_RIGHT = 'topright'
    BOTTOM_LEFT = 'bottomleft'
    BOTTOM_RIGHT = 'bottomright'
    MAXIMIZE = 'maximize'


def snap_rect(region, bounds) -> Rect:
    """Return the rectangle ``region`` covers inside ``bounds``.

    Left/top halves and quarters take the floor of an odd dimension, the
    right/bottom ones the remainder, so opposite halves tile exactly.
    """
    region = SnapRegion(region)
    half_w = bounds.width // 2
    half_h = bounds.height // 2
    rest_w = bounds.width - half_w
    rest_h = bounds.height - half_h
    match region:
        case SnapRegion.LEFT:
            return Rect(0, 0, half_w, bounds.height)
        case SnapRegion.RIGHT:
            return Rect(half_w, 0, rest_w, bounds.height)
        case SnapRegion.TOP:
            return Rect(0, 0, bounds.width, half_h)
        case SnapRegion.BOTTOM:
            return Rect(0, half_h, bounds.width, rest_h)
        case SnapRegion.TOP_LEFT:
            return Rect(0, 0, half_w, half_h)
        case SnapRegion.TOP_RIGHT:
            return Rect(half_w, 0, rest_w, half_h)
        case SnapRegion.BOTTOM_LEFT:
            return Rect(0, half_h, half_w, rest_h)
        case SnapRegion.BOTTOM_RIGHT:
            return Rect(half_w, half_h, rest_w, rest_h)
        case SnapRegion.MAXIMIZE:
            return Rect(0, 0, bounds.width, bounds.height)


def detect_snap_region(position, bounds, threshold, *, edges=True, corners=True) -> Optional[SnapRegion]:
    """Return the snap region under ``position``, or None.

    Checked in priority order, first match wins: corners (within half the
    threshold of both edges), then edges, then a band along the top of the
    middle third of the screen, which maps to :attr:`SnapRegion.MAXIMIZE`.
    """
    x, y = position.x, position.y
    corner = threshold / 2
    near_left = x < corner
    near_right = x >= bounds.width - corner
    near_top = y < corner
    near_bottom = y >= bounds.height - corner

    if corners:
        if near_left and near_top:
            return SnapRegion.TOP_LEFT
        if near_right and near_top:
            return SnapRegion.TOP_RIGHT
        if near_left and near_bottom:
            return SnapRegion.BOTTOM_LEFT
        if near_right and near_bottom:
            return SnapRegion.BOTTOM_RIGHT

    if edges:
        inside_rows = corner <= y < bounds.height - corner
        inside_cols = corner <= x < bounds.width - corner
        if x < threshold and inside_rows:
            return SnapRegion.LEFT
        if x >= bounds.width - threshold and inside_rows:
            return SnapRegion.RIGHT
        if y < threshold and inside_cols:
            return SnapRegion.TOP
        if y >= bounds.height - threshold and inside_cols:
            return SnapRegion.BOTTOM

    if y < threshold and bounds.width / 3 <= x < bounds.width * 2 / 3:
        return SnapRegion.MAXIMIZE
    return None


def _split(total, count):
    """Equal segments of ``total``; the last one absorbs the remainder."""
    step = total // count
    return [(i * step, step if i < count - 1 else total - i * step) for i in range(count)]


class TilingLayout:
    """Base class of the tiling layouts.

    ``arrange`` returns one rectangle per window, in window order; windows
    that do not get a rectangle are left where they are.
    """

    def arrange(self, count, bounds) -> List[Rect]:
        raise NotImplementedError


@dataclass(frozen=True)
class GridLayout(TilingLayout):
    """Row-major grid. ``rows`` defaults to as many as ``count`` needs.

    The last row and column absorb the remainder so the cells cover the
    bounds without gaps. Windows beyond ``cols * rows`` are not placed.
    """
    cols: int = 2
    rows: Optional[int] = None

    def arrange(self, count, bounds):
        if count <= 0:
            return []
        cols = max(1, self.cols)
        rows = self.rows if self.rows else math.ceil(count / cols)
        columns = _split(bounds.width, cols)
        lines = _split(bounds.height, rows)
        rects = []
        for index in range(min(count, cols * rows)):
            x, w = columns[index % cols]
            y, h = lines[index // cols]
            rects.append(Rect(x, y, w, h))
        return rects


@dataclass(frozen=True)
class VerticalLayout(TilingLayout):
    """Windows stacked top to bottom, full width."""

    def arrange(self, count, bounds):
        if count <= 0:
            return []
        return [Rect(0, y, bounds.width, h) for y, h in _split(bounds.height, count)]


@dataclass(frozen=True)
class HorizontalLayout(TilingLayout):
    """Windows side by side, full height."""

    def arrange(self, count, bounds):
        if count <= 0:
            return []
        return [Rect(x, 0, w, bounds.height) for x, w in _split(bounds.width, count)]


@dataclass(frozen=True)
class MasterPaneLayout(TilingLayout):
    """First window on the left at ``ratio`` of the width; the rest stack on the right."""
    ratio: float = config.MASTER_PANE_RATIO

    def __post_init__(self):
        if not 0 < self.ratio < 1:
            raise ValueError(f'master pane ratio must be between 0 and 1, got {self.ratio}')

    def arrange(self, count, bounds):
        if count <= 0:
            return []
        if count == 1:
            return [Rect(0, 0, bounds.width, bounds.height)]
        master_width = math.floor(bounds.width * self.ratio)
        rects = [Rect(0, 0, master_width, bounds.height)]
        for y, h in _split(bounds.height, count - 1):
            rects.append(Rect(master_width, y, bounds.width - master_width, h))
        return rects


@dataclass(frozen=True)
class CustomLayout(TilingLayout):
    """Delegates placement to ``place(managed_windows, bounds)``.

    ``place`` returns ``(window, position, size)`` tuples; the window
    manager applies them as given.
    """
    place: Callable = None

    def arrange(self, count, bounds):
        raise TypeError('CustomLayout is applied through its place function')


DEFAULT_LAYOUTS = {
    'grid-2x2': GridLayout(2, 2),
    'grid-3x3': GridLayout(3, 3),
    'master-pane': MasterPaneLayout(config.MASTER_PANE_RATIO),
    'vertical': VerticalLayout(),
    'horizontal': HorizontalLayout(),
}

# Alt+1 .. Alt+5
SHORTCUT_LAYOUTS = ('grid-2x2', 'grid-3x3', 'master-pane', 'vertical', 'horizontal')
