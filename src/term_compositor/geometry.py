"""
Cell-grid geometry used throughout the compositor.

Positions, sizes and rectangles are separate immutable types. Coordinates
are zero-based cell offsets from the top-left corner of the terminal.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """A cell coordinate. May be negative while a drag is being computed."""
    x: int = 0
    y: int = 0

    def offset(self, dx, dy):
        """Return a new position moved by ``dx`` columns and ``dy`` rows."""
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Size:
    """A width/height pair in cells."""
    width: int = 0
    height: int = 0

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f'negative size: {self.width}x{self.height}')


@dataclass(frozen=True)
class Rect:
    """A rectangle of cells.

    Attributes:
        x: Left column
        y: Top row
        width: Number of columns
        height: Number of rows
    """
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_position_size(cls, position, size):
        """Build a rectangle from a :class:`Position` and a :class:`Size`."""
        return cls(position.x, position.y, size.width, size.height)

    @property
    def position(self):
        return Position(self.x, self.y)

    @property
    def size(self):
        return Size(self.width, self.height)

    @property
    def right(self):
        """First column past the rectangle."""
        return self.x + self.width

    @property
    def bottom(self):
        """First row past the rectangle."""
        return self.y + self.height

    @property
    def area(self):
        return self.width * self.height

    def contains(self, position):
        """Return True if ``position`` lies inside the rectangle."""
        return (self.x <= position.x < self.right and
                self.y <= position.y < self.bottom)

    def contains_rect(self, other):
        """Return True if ``other`` lies entirely inside the rectangle."""
        return (self.x <= other.x and self.y <= other.y and
                other.right <= self.right and other.bottom <= self.bottom)

    def intersects(self, other):
        """Return True if the two rectangles share at least one cell."""
        return not (self.right <= other.x or other.right <= self.x or
                    self.bottom <= other.y or other.bottom <= self.y)

    def intersection(self, other):
        """Return the overlapping rectangle, or None when disjoint."""
        if not self.intersects(other):
            return None
        x = max(self.x, other.x)
        y = max(self.y, other.y)
        return Rect(x, y, min(self.right, other.right) - x, min(self.bottom, other.bottom) - y)


def _clamp(val, minval, maxval):
    """Clamp a value between min and max. ``minval`` wins if they cross."""
    return max(minval, min(maxval, val))


def constrain_position(position, size, bounds):
    """Clamp ``position`` so a window of ``size`` stays inside ``bounds``.

    The origin is never negative and the rectangle never extends past the
    right or bottom edge. A size larger than the bounds anchors at 0.
    """
    return Position(
        _clamp(position.x, 0, bounds.width - size.width),
        _clamp(position.y, 0, bounds.height - size.height),
    )


def constrain_size(size, bounds):
    """Clamp ``size`` so it is no larger than ``bounds``."""
    return Size(
        _clamp(size.width, 0, bounds.width),
        _clamp(size.height, 0, bounds.height),
    )
