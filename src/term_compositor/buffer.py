"""
Cell buffers: one rendered frame of the terminal grid.

A :class:`CellBuffer` holds one grapheme per cell. Wide characters (display
width 2 according to ``wcwidth``) occupy their own cell plus a continuation
cell holding :data:`WIDE_CONTINUATION`; zero-width characters are combined
into the cell before them. Buffers can be diffed against each other to find
the rectangles that need repainting.
"""

import logging
import re
from typing import List, Optional

import wcwidth

from . import config
from .errors import BufferAllocationError
from .geometry import Rect, Size

LOGGER = logging.getLogger(__name__)

BLANK = ' '
WIDE_CONTINUATION = ''

# A rectangle that needs repainting.
DirtyRegion = Rect

_SEQUENCE_RE = re.compile(
    r'\x1b\[[0-?]*[ -/]*[@-~]'  # CSI
    r'|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)'  # OSC
    r'|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)'  # APC
    r'|\x1b[@-Z\\-_]'  # two-byte escapes
)


def strip_sequences(text):
    """Remove terminal escape sequences from ``text``."""
    return _SEQUENCE_RE.sub('', text)


def _check_dimensions(width, height):
    if width < 0 or height < 0:
        raise BufferAllocationError(f'negative buffer dimensions: {width}x{height}')
    if width * height > config.MAX_BUFFER_CELLS:
        raise BufferAllocationError(
            f'buffer of {width}x{height} exceeds {config.MAX_BUFFER_CELLS} cells'
        )


class CellBuffer:
    """A width x height grid of cells.

    Writes outside the grid are clipped silently; only unusable dimensions
    are an error (:class:`~term_compositor.errors.BufferAllocationError`).
    """

    def __init__(self, width: int, height: int, fill: str = BLANK):
        _check_dimensions(width, height)
        self._width = width
        self._height = height
        self._rows: List[List[str]] = [[fill] * width for _ in range(height)]

    @classmethod
    def from_lines(cls, lines, width=None):
        """Build a buffer holding ``lines``; width defaults to the widest line."""
        lines = list(lines)
        if width is None:
            width = max((wcwidth.wcswidth(strip_sequences(line)) for line in lines), default=0)
            width = max(width, 0)
        buffer = cls(width, len(lines))
        for row, line in enumerate(lines):
            buffer.write(0, row, line)
        return buffer

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def size(self):
        return Size(self._width, self._height)

    def get_cell(self, x, y):
        """Return the cell at (x, y), or a blank outside the grid."""
        if 0 <= y < self._height and 0 <= x < self._width:
            return self._rows[y][x]
        return BLANK

    def _put(self, cells, col, value):
        # Never leave half of a wide character behind.
        old = cells[col]
        if old == WIDE_CONTINUATION and value != WIDE_CONTINUATION and col > 0:
            cells[col - 1] = BLANK
        nxt = col + 1
        if old != WIDE_CONTINUATION and nxt < len(cells) and cells[nxt] == WIDE_CONTINUATION:
            cells[nxt] = BLANK
        cells[col] = value

    def write(self, x: int, y: int, text: str, max_width: Optional[int] = None):
        """Write ``text`` with its first character at (x, y).

        Each ``\\n`` in ``text`` continues on the next row at column ``x``.
        Escape sequences are dropped. Anything outside the buffer, or past
        ``max_width`` columns from ``x``, is clipped.
        """
        limit = self._width if max_width is None else min(self._width, x + max_width)
        for i, line in enumerate(strip_sequences(text).split('\n')):
            row = y + i
            if row >= self._height:
                break
            if row >= 0:
                self._write_line(self._rows[row], x, line, limit)

    def _write_line(self, cells, col, line, limit):
        last = None
        for ch in line:
            if col >= limit:
                break
            w = wcwidth.wcwidth(ch)
            if w < 0:
                continue
            if w == 0:
                if last is not None:
                    cells[last] += ch
                continue
            if w == 1:
                if col >= 0:
                    self._put(cells, col, ch)
                    last = col
                col += 1
                continue
            if col + 1 >= limit:
                # No room for the right half.
                if col >= 0:
                    self._put(cells, col, BLANK)
                break
            if col >= 0:
                self._put(cells, col, ch)
                self._put(cells, col + 1, WIDE_CONTINUATION)
                last = col
            elif col == -1:
                self._put(cells, 0, BLANK)
                last = None
            col += 2

    def fill_rect(self, x, y, width, height, char=BLANK):
        """Fill a rectangle with ``char``, clipped to the buffer."""
        for row in range(max(0, y), min(self._height, y + height)):
            cells = self._rows[row]
            for col in range(max(0, x), min(self._width, x + width)):
                self._put(cells, col, char)

    def clear_rect(self, x, y, width, height):
        """Fill a rectangle with blanks."""
        self.fill_rect(x, y, width, height, BLANK)

    def clear(self):
        self.fill_rect(0, 0, self._width, self._height, BLANK)

    def _span(self, cells, x, width):
        """Clip [x, x + width) to the row and widen it to whole wide characters."""
        start = max(0, x)
        end = min(len(cells), x + width)
        if start >= end:
            return start, start
        if cells[start] == WIDE_CONTINUATION and start > 0:
            start -= 1
        if end < len(cells) and cells[end] == WIDE_CONTINUATION:
            end += 1
        return start, end

    def row_text(self, y, x, width):
        """Return ``(column, text)`` for a span of row ``y``.

        The span is clipped to the buffer and widened so it never starts or
        ends in the middle of a wide character; ``column`` is where the
        returned text begins.
        """
        if not 0 <= y < self._height:
            return x, ''
        cells = self._rows[y]
        start, end = self._span(cells, x, width)
        return start, ''.join(cells[start:end])

    def copy_rect_from(self, other, rect):
        """Copy the cells of ``rect`` from ``other`` into this buffer."""
        for row in range(max(0, rect.y), min(self._height, other.height, rect.bottom)):
            source = other._rows[row]
            start, end = self._span(source, rect.x, rect.width)
            end = min(end, self._width)
            if start < end:
                self._rows[row][start:end] = source[start:end]

    def diff(self, other) -> List[DirtyRegion]:
        """Return the regions where ``other`` differs from this buffer.

        Changed cells are grouped into horizontal spans per row; a span with
        the same x and width as one on the row above extends that region
        downward. Copying ``other``'s cells at the returned regions onto this
        buffer reproduces ``other`` exactly.
        """
        width = max(self._width, other.width)
        height = max(self._height, other.height)
        regions = []
        open_regions = {}
        for y in range(height):
            still_open = {}
            for x0, x1 in self._changed_spans(other, y, width):
                key = (x0, x1 - x0)
                region = open_regions.pop(key, None)
                if region is None:
                    region = [x0, y, x1 - x0, 1]
                else:
                    region[3] += 1
                still_open[key] = region
            regions.extend(open_regions.values())
            open_regions = still_open
        regions.extend(open_regions.values())
        return sorted((DirtyRegion(*r) for r in regions), key=lambda r: (r.y, r.x))

    def _row(self, y, width):
        if y < self._height:
            cells = self._rows[y]
            if len(cells) == width:
                return cells
            return cells + [BLANK] * (width - len(cells))
        return [BLANK] * width

    def _changed_spans(self, other, y, width):
        mine = self._row(y, width)
        theirs = other._row(y, width)
        if mine == theirs:
            return []
        changed = [a != b for a, b in zip(mine, theirs)]
        pending = [x for x in range(width) if changed[x]]
        while pending:
            x = pending.pop()
            for cells in (mine, theirs):
                partners = []
                if cells[x] == WIDE_CONTINUATION and x > 0:
                    partners.append(x - 1)
                if x + 1 < width and cells[x + 1] == WIDE_CONTINUATION:
                    partners.append(x + 1)
                for partner in partners:
                    if not changed[partner]:
                        changed[partner] = True
                        pending.append(partner)

        spans = []
        start = None
        for x, flag in enumerate(changed):
            if flag and start is None:
                start = x
            elif not flag and start is not None:
                spans.append((start, x))
                start = None
        if start is not None:
            spans.append((start, width))
        return spans

    def resize(self, width, height):
        """Change the dimensions, keeping the top-left overlap of the old content."""
        _check_dimensions(width, height)
        rows = [[BLANK] * width for _ in range(height)]
        keep = min(width, self._width)
        for y in range(min(height, self._height)):
            rows[y][:keep] = self._rows[y][:keep]
            if keep < self._width and keep > 0 and self._rows[y][keep] == WIDE_CONTINUATION:
                rows[y][keep - 1] = BLANK
        LOGGER.debug('buffer resized %dx%d -> %dx%d', self._width, self._height, width, height)
        self._rows = rows
        self._width = width
        self._height = height

    def copy(self):
        clone = CellBuffer(self._width, self._height)
        clone._rows = [list(row) for row in self._rows]
        return clone

    def lines(self):
        """Return the buffer as a list of strings, one per row."""
        return [''.join(row) for row in self._rows]

    def __str__(self):
        return '\n'.join(self.lines())

    def __repr__(self):
        return f'CellBuffer({self._width}, {self._height})'

    def __eq__(self, other):
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self.size == other.size and self._rows == other._rows
