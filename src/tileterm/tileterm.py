"""Tiled terminal session: tile tree, layout, incremental redraw, input loop.

A ``TileTerm`` owns an ordered list of tiles. The first tile is the root
and covers the whole terminal; every later tile carves a fraction of its
parent's remaining rectangle from one edge. Rendering is incremental: a
full relayout and border redraw only happens when the terminal size or the
tile structure changed, otherwise only tiles whose content is dirty are
repainted.

Session keys: Ctrl-T cycles focus, Ctrl-U toggles zoom on the focused tile,
Ctrl-Q quits. Everything else goes to the focused tile.
"""

from __future__ import annotations

import logging
import os
import threading

from tileterm.csi import cup
from tileterm.drawing import BoxChars
from tileterm.geometry import Rect, dec_rect, inc_rect
from tileterm.history import DEFAULT_HISTORY_SIZE
from tileterm.keys import CTRL_Q, CTRL_T, CTRL_U, KeyDecoder, KeyToken, describe_key
from tileterm.terminal import Terminal
from tileterm.tile import EDGE_BOTTOM, EDGE_LEFT, EDGE_RIGHT, EDGE_TOP, Edge, Tile, TileType
from tileterm.utils import DEFAULT_TAB_SIZE

logger = logging.getLogger(__name__)

__all__ = ["TileTerm", "ZOOM_FRACTION", "ZOOM_OTHER_FRACTION"]

# Fractions forced on tiles while one tile is zoomed.
ZOOM_FRACTION = 0.9
ZOOM_OTHER_FRACTION = 0.1


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning("ignoring %s=%r, using %d", name, raw, default)
        return default
    return value


def _portion(extent: int, fraction: float) -> int:
    """Whole cells of *extent* covered by *fraction*, rounded down."""
    return int(extent * fraction + 1e-9)


class TileTerm:
    """A session of tiles drawn on one terminal.

    Parameters
    ----------
    terminal:
        Output target, size source and rune source for the input loop.
    tab_size:
        Tab expansion width for tile text; defaults to ``TILETERM_TAB_SIZE``
        or 3.
    history_size:
        Input history capacity of SCROLL_UP tiles; defaults to
        ``TILETERM_HISTORY_SIZE`` or 100.
    """

    def __init__(
        self,
        terminal: Terminal,
        *,
        tab_size: int | None = None,
        history_size: int | None = None,
    ) -> None:
        self.terminal = terminal
        self.tab_size = (
            tab_size if tab_size is not None else _env_int("TILETERM_TAB_SIZE", DEFAULT_TAB_SIZE)
        )
        self.history_size = (
            history_size
            if history_size is not None
            else _env_int("TILETERM_HISTORY_SIZE", DEFAULT_HISTORY_SIZE)
        )

        self._decoder = KeyDecoder(terminal)
        self._tiles: list[Tile] = []
        self._next_id = 0
        self._width = 0
        self._height = 0
        self._big: Tile | None = None
        self._focus: Tile | None = None
        self._dirty = True
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def tiles(self) -> tuple[Tile, ...]:
        """All tiles in creation (and layout) order."""
        with self._lock:
            return tuple(self._tiles)

    @property
    def focus(self) -> Tile | None:
        return self._focus

    @property
    def big(self) -> Tile | None:
        """The zoomed tile, if any."""
        return self._big

    @property
    def size(self) -> tuple[int, int]:
        """Terminal size used by the last layout, as ``(width, height)``."""
        return self._width, self._height

    def is_dirty(self) -> bool:
        return self._dirty

    def set_dirty(self) -> None:
        """Force a full relayout and redraw on the next render."""
        with self._lock:
            self._dirty = True

    def tile_by_index(self, index: int) -> Tile | None:
        with self._lock:
            if 0 <= index < len(self._tiles):
                return self._tiles[index]
            return None

    def parent_of(self, tile: Tile) -> Tile | None:
        with self._lock:
            for t in self._tiles:
                if t.tile_id == tile.parent_id:
                    return t
            return None

    # ------------------------------------------------------------------
    # Tile tree
    # ------------------------------------------------------------------

    def add_tile(
        self,
        title: str,
        cursor: str,
        outline: BoxChars | None,
        fraction: float,
        edge: Edge,
        parent: Tile | None,
        tile_type: TileType,
    ) -> Tile:
        """Create a tile and append it to the session.

        *title* is drawn in the border, *cursor* is the prompt of SCROLL_UP
        tiles, *outline* the border glyphs (None for no border). The tile
        takes *fraction* of *parent*'s remaining space from *edge*. Only the
        first tile may omit *parent*; it becomes the root and the focus.
        """
        if not 0 < fraction <= 1:
            raise ValueError(f"tile fraction must be in (0, 1], got {fraction}")
        with self._lock:
            if self._tiles and parent is None:
                raise ValueError("no parent tile")
            if parent is not None and not any(t is parent for t in self._tiles):
                raise ValueError(f"no parent tile {parent!r} in this session")

            tile = Tile(
                self._next_id,
                title,
                cursor,
                outline,
                fraction,
                edge,
                parent.tile_id if parent is not None else None,
                tile_type,
                tab_size=self.tab_size,
                history_size=self.history_size,
            )
            self._next_id += 1
            self._tiles.append(tile)
            if len(self._tiles) == 1:
                self._focus = tile
            self._dirty = True
            logger.debug("added %r under parent %s", tile, tile.parent_id)
            return tile

    def delete_tile(self, tile: Tile) -> None:
        """Remove *tile* and every tile descended from it."""
        with self._lock:
            if not any(t is tile for t in self._tiles):
                return
            # Parents always precede their children, so one pass finds them all.
            doomed = {tile.tile_id}
            for t in self._tiles:
                if t.parent_id in doomed:
                    doomed.add(t.tile_id)

            self._tiles = [t for t in self._tiles if t.tile_id not in doomed]
            if self._focus is not None and self._focus.tile_id in doomed:
                self._focus = self._tiles[0] if self._tiles else None
            if self._big is not None and self._big.tile_id in doomed:
                self._big = None
            self._dirty = True
            logger.debug("deleted tiles %s", sorted(doomed))

    def next_tile(self, current: Tile) -> Tile:
        """The tile after *current* in creation order, wrapping to the first."""
        with self._lock:
            for i, t in enumerate(self._tiles):
                if t is current:
                    return self._tiles[(i + 1) % len(self._tiles)]
        raise ValueError(f"{current!r} is not a tile of this session")

    def set_focus(self, tile: Tile | None) -> None:
        with self._lock:
            if tile is not None and not any(t is tile for t in self._tiles):
                raise ValueError(f"{tile!r} is not a tile of this session")
            self._focus = tile
            self._dirty = True

    def toggle_zoom(self) -> None:
        """Zoom the focused tile, or drop the current zoom."""
        with self._lock:
            self._big = self._focus if self._big is None else None
            self._dirty = True
            logger.debug("zoom target now %r", self._big)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _zoom_fraction(self, tile: Tile) -> float:
        big = self._big
        if big is None:
            return tile.fraction
        if tile is big or tile.tile_id == big.parent_id:
            return ZOOM_FRACTION
        return ZOOM_OTHER_FRACTION

    def layout(self) -> None:
        """Compute every tile's bounds from the current terminal size."""
        with self._lock:
            by_id: dict[int, Tile] = {}
            for i, tile in enumerate(self._tiles):
                by_id[tile.tile_id] = tile
                if i == 0:
                    wr = Rect.of(1, 1, self._width, self._height)
                else:
                    parent = by_id[tile.parent_id]  # type: ignore[index]
                    fraction = self._zoom_fraction(tile)
                    pr = parent.bounds.copy()
                    if parent.outline is not None:
                        pr = inc_rect(pr)
                    wr = pr.copy()
                    if tile.edge == EDGE_TOP:
                        split = _portion(pr.height, fraction) + pr.min.y
                        wr.max.y = split - 1
                        pr.min.y = split
                    elif tile.edge == EDGE_BOTTOM:
                        split = _portion(pr.height, 1.0 - fraction) + pr.min.y
                        pr.max.y = split - 1
                        wr.min.y = split
                    elif tile.edge == EDGE_LEFT:
                        split = _portion(pr.width, fraction) + pr.min.x
                        wr.max.x = split - 1
                        pr.min.x = split
                    elif tile.edge == EDGE_RIGHT:
                        split = _portion(pr.width, 1.0 - fraction) + pr.min.x
                        pr.max.x = split - 1
                        wr.min.x = split
                    if parent.outline is not None:
                        pr = dec_rect(pr)
                    parent.bounds = pr
                if tile.outline is not None:
                    wr = dec_rect(wr)
                tile.bounds = wr
            logger.debug("layout %dx%d for %d tiles", self._width, self._height, len(self._tiles))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_outlines(self) -> str:
        return "".join(t.render_outline(t is self._focus) for t in self._tiles)

    def _render_text(self) -> str:
        parts = [t.render() for t in self._tiles if t.is_dirty()]
        if self._focus is not None:
            parts.append(cup(self._focus.cursor_pos.x, self._focus.cursor_pos.y))
        return "".join(parts)

    def to_string(self) -> str:
        """Escape string that brings the screen up to date.

        Includes a relayout and every border when the terminal was resized or
        the session is dirty, and the text of each dirty tile.
        """
        with self._lock:
            width, height = self.terminal.columns, self.terminal.rows
            parts: list[str] = []
            if (width, height) != (self._width, self._height) or self._dirty:
                self._width, self._height = width, height
                self._dirty = False
                for t in self._tiles:
                    t.set_dirty()
                self.layout()
                parts.append(self._render_outlines())
            parts.append(self._render_text())
            return "".join(parts)

    def render(self) -> None:
        """Write the pending screen update to the terminal in one write."""
        with self._lock:
            self.terminal.write(cup(1, 1) + self.to_string())

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_key(self, key: KeyToken) -> bool:
        """Process one key; True means the session is over."""
        if key == CTRL_T:
            with self._lock:
                if self._focus is not None:
                    self._focus = self.next_tile(self._focus)
                    self._dirty = True
                    logger.debug("focus moved to %r", self._focus)
        elif key == CTRL_U:
            self.toggle_zoom()
        elif key == CTRL_Q:
            return True
        else:
            focus = self._focus
            if focus is not None and focus.key_press(key):
                logger.debug("%r ended the session on %s", focus, describe_key(key))
                return True
        self.render()
        return False

    def run(self) -> None:
        """Read and dispatch keys until a handler ends the session.

        ``EOFError`` at end of input and read errors propagate to the caller.
        """
        with self._lock:
            self._width, self._height = self.terminal.columns, self.terminal.rows
        while True:
            key = self._decoder.read_key()
            if self.handle_key(key):
                return
