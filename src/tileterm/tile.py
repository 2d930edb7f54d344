"""A single rectangular region of a ``TileTerm`` session.

A tile owns a text buffer, its scroll and line-edit state, and one of the
four variant behaviours from :mod:`tileterm.handlers`. Output methods
(``print``, ``println``, ``printf``, ``write``, ``reset_buffer``) are safe
to call from any thread; each one takes the tile's lock only for the
duration of that single mutation.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Callable, Literal

from tileterm import csi
from tileterm.drawing import BoxChars, box, clear_rect
from tileterm.geometry import Point, Rect, inc_rect
from tileterm.history import DEFAULT_HISTORY_SIZE, HistoryRing
from tileterm.utils import DEFAULT_TAB_SIZE

if TYPE_CHECKING:
    from tileterm.handlers import TileHandler
    from tileterm.keys import KeyToken

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

# SCROLL_DOWN: top to bottom, word-wrapped; scrolls up/down.
# SCROLL_DOWN_CLIP: top to bottom, clipped at the tile edge; scrolls in all
#   four directions.
# SCROLL_DOWN_CLIP_RAW: rendered like SCROLL_DOWN_CLIP, every key goes to a
#   caller-supplied callback.
# SCROLL_UP: terminal-like, bottom row is a prompt with an input line.
TileType = Literal["scroll_down", "scroll_down_clip", "scroll_down_clip_raw", "scroll_up"]

SCROLL_DOWN: TileType = "scroll_down"
SCROLL_DOWN_CLIP: TileType = "scroll_down_clip"
SCROLL_DOWN_CLIP_RAW: TileType = "scroll_down_clip_raw"
SCROLL_UP: TileType = "scroll_up"

TILE_TYPES: tuple[TileType, ...] = (SCROLL_DOWN, SCROLL_DOWN_CLIP, SCROLL_DOWN_CLIP_RAW, SCROLL_UP)

# Where a child sits inside its parent's remaining rectangle.
Edge = Literal["top", "bottom", "left", "right"]

EDGE_TOP: Edge = "top"
EDGE_BOTTOM: Edge = "bottom"
EDGE_LEFT: Edge = "left"
EDGE_RIGHT: Edge = "right"

EDGES: tuple[Edge, ...] = (EDGE_TOP, EDGE_BOTTOM, EDGE_LEFT, EDGE_RIGHT)

# Returning True from either callback ends the session.
KeyCallback = Callable[["KeyToken"], bool]
LineCallback = Callable[[str], bool]


class Tile:
    """State for one tile. Created through :meth:`TileTerm.add_tile`."""

    def __init__(
        self,
        tile_id: int,
        title: str,
        cursor: str,
        outline: BoxChars | None,
        fraction: float,
        edge: Edge,
        parent_id: int | None,
        tile_type: TileType,
        *,
        tab_size: int = DEFAULT_TAB_SIZE,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        from tileterm.handlers import TILE_HANDLERS

        if tile_type not in TILE_HANDLERS:
            raise ValueError(f"unknown tile type: {tile_type!r}")
        if edge not in EDGES:
            raise ValueError(f"unknown edge: {edge!r}")

        self.tile_id = tile_id
        self.title = title
        self.outline = outline
        self.fraction = fraction
        self.edge: Edge = edge
        self.parent_id = parent_id
        self.tab_size = tab_size
        self.bounds = Rect()
        # Cursor position reported by the last render.
        self.cursor_pos = Point()
        # Scroll offset into the rendered document.
        self.start = Point()

        self._handler: TileHandler = TILE_HANDLERS[tile_type]
        self._cursor = cursor
        self._buffer: list[str] = []
        self._dirty = False
        self._lock = threading.Lock()

        self._key_callback: KeyCallback | None = None
        self._line_callback: LineCallback | None = None

        # Line editing (SCROLL_UP)
        self._line = ""
        self.history = HistoryRing(history_size)
        # Currently shown history entry; -1 means the line being typed.
        self.history_index = -1
        # The uncommitted line, restored when paging back past entry 0.
        self.history_pending = ""

    def __repr__(self) -> str:
        return f"Tile(id={self.tile_id}, title={self.title!r}, type={self.tile_type})"

    # -- properties ---------------------------------------------------------

    @property
    def tile_type(self) -> TileType:
        return self._handler.tile_type

    @property
    def handler(self) -> TileHandler:
        return self._handler

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    @property
    def cursor(self) -> str:
        """Prompt string shown before the input line."""
        return self._cursor

    @property
    def line(self) -> str:
        """Current input line."""
        return self._line

    def set_line(self, line: str) -> None:
        with self._lock:
            self._line = line
            self._dirty = True

    @property
    def key_callback(self) -> KeyCallback | None:
        return self._key_callback

    @property
    def line_callback(self) -> LineCallback | None:
        return self._line_callback

    def set_key_callback(self, callback: KeyCallback | None) -> None:
        """Attach the callback that receives every key of a SCROLL_DOWN_CLIP_RAW tile."""
        with self._lock:
            if self.tile_type != SCROLL_DOWN_CLIP_RAW:
                raise ValueError(f"tile type {self.tile_type} does not support a key callback")
            self._key_callback = callback

    def set_line_callback(self, callback: LineCallback | None) -> None:
        """Attach the callback that receives each submitted line of a SCROLL_UP tile."""
        with self._lock:
            if self.tile_type != SCROLL_UP:
                raise ValueError(f"tile type {self.tile_type} does not support a line callback")
            self._line_callback = callback

    # -- buffer output ------------------------------------------------------

    def reset_buffer(self) -> None:
        with self._lock:
            self._buffer.clear()
            self._dirty = True

    def write(self, data: str | bytes) -> int:
        """Append *data* to the buffer.

        Returns ``len(data)``: bytes consumed for bytes input, characters for
        ``str`` input.
        """
        n = len(data)
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        with self._lock:
            self._buffer.append(data)
            self._dirty = True
        return n

    def flush(self) -> None:
        """Present so a tile can be used as ``file=`` for :func:`print`."""

    def print(self, *values: Any, sep: str = " ", end: str = "") -> None:
        """Append *values* like the builtin :func:`print`, without a newline."""
        self.write(sep.join(str(v) for v in values) + end)

    def println(self, *values: Any, sep: str = " ") -> None:
        self.print(*values, sep=sep, end="\n")

    def printf(self, fmt: str, *args: Any) -> None:
        """Append ``fmt % args``."""
        self.write(fmt % args if args else fmt)

    def text(self) -> str:
        """Return a copy of the buffer contents."""
        with self._lock:
            return "".join(self._buffer)

    # -- dirty state --------------------------------------------------------

    def set_dirty(self) -> None:
        with self._lock:
            self._dirty = True

    def is_dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def snapshot(self) -> tuple[str, str]:
        """Return ``(buffer, input_line)`` and clear the dirty flag."""
        with self._lock:
            self._dirty = False
            if len(self._buffer) > 1:
                self._buffer[:] = ["".join(self._buffer)]
            return (self._buffer[0] if self._buffer else ""), self._line

    # -- scrolling ----------------------------------------------------------

    def scroll(self, dx: int = 0, dy: int = 0) -> None:
        """Move the scroll offset, never below zero; marks dirty on change."""
        with self._lock:
            x = max(self.start.x + dx, 0)
            y = max(self.start.y + dy, 0)
            if (x, y) != (self.start.x, self.start.y):
                self.start = Point(x, y)
                self._dirty = True

    # -- rendering / input --------------------------------------------------

    def render(self) -> str:
        """Render the tile's text area and record the resulting cursor position."""
        output, self.cursor_pos = self._handler.render(self)
        return output

    def key_press(self, key: KeyToken) -> bool:
        """Handle *key*; True means the session should end."""
        return self._handler.key_press(self, key)

    def render_outline(self, focused: bool) -> str:
        """Border around the tile; the focused tile's title is drawn in reverse video."""
        if self.outline is None:
            return ""
        r = inc_rect(self.bounds)
        if focused:
            return box(r, self.outline, self.title, csi.SGR_NEGATIVE, csi.SGR_BOLD)
        return box(r, self.outline, self.title)

    def clear(self) -> str:
        """Escape string that blanks the tile's text area."""
        return clear_rect(self.bounds)
