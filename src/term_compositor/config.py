"""Default values for the compositor.

Everything here can be overridden per instance through constructor keyword
arguments or the option dataclasses in :mod:`term_compositor.window_manager`.
"""

# === Rendering ===
DEFAULT_TARGET_FPS = 60  # render passes per second allowed by the throttler
MAX_BUFFER_CELLS = 10_000_000  # larger cell buffers are refused

# === Windows ===
DEFAULT_MIN_WIDTH = 20  # smallest width reachable by a resize gesture
DEFAULT_MIN_HEIGHT = 5  # smallest height reachable by a resize gesture
RESIZE_HANDLE_SIZE = (3, 2)  # bottom-right grip, columns x rows

# === Window manager ===
DEFAULT_BOUNDS = (80, 24)  # terminal size assumed until told otherwise
MAX_WINDOWS = 50
CASCADE_OFFSET = (2, 1)  # diagonal step between cascaded windows
CASCADE_CANDIDATES = 10  # positions probed by add_window
DEFAULT_WINDOW_POSITION = (10, 3)
DEFAULT_WINDOW_SIZE = (40, 15)
FIRST_Z_INDEX = 1000

# === Snapping ===
SNAP_THRESHOLD = 4  # cells from an edge that trigger an edge snap
SNAP_PREVIEW_CHAR = '░'
MASTER_PANE_RATIO = 0.6

# === Event loop ===
INKEY_TIMEOUT = 0.05  # seconds to wait for a keystroke per tick
IDLE_SLEEP = 0.01  # seconds to sleep between ticks
