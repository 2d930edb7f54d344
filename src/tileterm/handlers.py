"""Render and keypress behaviour for the four tile types.

Every render function paints the tile's whole text rectangle, padding with
blanks, and returns ``(output, cursor_position)``. Every keypress function
returns True when the session should end.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping, NamedTuple

import grapheme

from tileterm.csi import cup
from tileterm.geometry import Point
from tileterm.keys import CTRL_H, KEY_BACKSPACE, KEY_ENTER, Key, KeyToken
from tileterm.tile import SCROLL_DOWN, SCROLL_DOWN_CLIP, SCROLL_DOWN_CLIP_RAW, SCROLL_UP, TileType
from tileterm.utils import (
    normalize_text,
    split_columns,
    wrap_fixed,
    wrap_text_break,
    wrap_text_clip,
)

if TYPE_CHECKING:
    from tileterm.tile import Tile


class TileHandler(NamedTuple):
    tile_type: TileType
    render: Callable[[Tile], tuple[str, Point]]
    key_press: Callable[[Tile, KeyToken], bool]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _origin(tile: Tile) -> Point:
    return Point(tile.bounds.min.x, tile.bounds.min.y)


def _has_area(tile: Tile) -> bool:
    return tile.width > 0 and tile.height > 0


def _render_lines_down(tile: Tile, lines: list[str]) -> str:
    """Paint *lines* top to bottom starting at the vertical scroll offset."""
    b = tile.bounds
    blank = " " * tile.width
    parts: list[str] = []
    for y in range(b.min.y, b.max.y + 1):
        index = y - b.min.y + tile.start.y
        parts.append(cup(b.min.x, y))
        parts.append(lines[index] if 0 <= index < len(lines) else blank)
    return "".join(parts)


# ---------------------------------------------------------------------------
# SCROLL_DOWN
# ---------------------------------------------------------------------------


def _scroll_down_render(tile: Tile) -> tuple[str, Point]:
    text, _line = tile.snapshot()
    if not _has_area(tile):
        return "", _origin(tile)
    lines = wrap_text_break(text, tile.width, tile.tab_size)
    return _render_lines_down(tile, lines), _origin(tile)


def _scroll_down_key_press(tile: Tile, key: KeyToken) -> bool:
    # Down has no upper bound.
    if key == Key.up:
        tile.scroll(dy=-1)
    elif key == Key.down:
        tile.scroll(dy=1)
    return False


# ---------------------------------------------------------------------------
# SCROLL_DOWN_CLIP / SCROLL_DOWN_CLIP_RAW
# ---------------------------------------------------------------------------


def _scroll_down_clip_render(tile: Tile) -> tuple[str, Point]:
    text, _line = tile.snapshot()
    if not _has_area(tile):
        return "", _origin(tile)
    lines = wrap_text_clip(text, tile.width, tile.tab_size, tile.start.x)
    return _render_lines_down(tile, lines), _origin(tile)


def _scroll_down_clip_key_press(tile: Tile, key: KeyToken) -> bool:
    if key == Key.up:
        tile.scroll(dy=-1)
    elif key == Key.down:
        tile.scroll(dy=1)
    elif key == Key.left:
        tile.scroll(dx=-1)
    elif key == Key.right:
        tile.scroll(dx=1)
    return False


def _scroll_down_clip_raw_key_press(tile: Tile, key: KeyToken) -> bool:
    callback = tile.key_callback
    if callback is None:
        return False
    return callback(key)


# ---------------------------------------------------------------------------
# SCROLL_UP
# ---------------------------------------------------------------------------


def _scroll_up_render(tile: Tile) -> tuple[str, Point]:
    text, line = tile.snapshot()
    if not _has_area(tile):
        return "", _origin(tile)

    width = tile.width
    b = tile.bounds
    # The prompt row takes the place of the buffer's unterminated last line.
    logical = normalize_text(text, tile.tab_size)
    logical[-1] = normalize_text(tile.cursor + line, tile.tab_size)[-1]

    rows: list[str] = []  # bottom-up
    for entry in reversed(logical):
        for chunk in reversed(wrap_fixed(entry, width)):
            rows.append(chunk)
            if len(rows) == tile.height:
                break
        if len(rows) == tile.height:
            break

    blank = " " * width
    parts: list[str] = []
    for i, y in enumerate(range(b.max.y, b.min.y - 1, -1)):
        parts.append(cup(b.min.x, y))
        parts.append(rows[i] if i < len(rows) else blank)

    _piece, last_used = split_columns(logical[-1], width)[-1]
    cursor = Point(min(b.min.x + last_used, b.max.x), b.max.y)
    return "".join(parts), cursor


def _scroll_up_key_press(tile: Tile, key: KeyToken) -> bool:
    if key == KEY_ENTER or key == "\n":
        callback = tile.line_callback
        if callback is None:
            return False
        line = tile.line
        if callback(line):
            return True
        tile.history_index = -1
        tile.history.add(line)
        tile.set_line("")

    elif key == Key.up:
        entry, ok = tile.history.nth_previous_entry(tile.history_index + 1)
        if not ok:
            return False
        if tile.history_index == -1:
            tile.history_pending = tile.line
        tile.history_index += 1
        tile.set_line(entry)

    elif key == Key.down:
        if tile.history_index == -1:
            return False
        if tile.history_index == 0:
            tile.history_index = -1
            tile.set_line(tile.history_pending)
        else:
            entry, ok = tile.history.nth_previous_entry(tile.history_index - 1)
            if ok:
                tile.history_index -= 1
                tile.set_line(entry)

    elif key == KEY_BACKSPACE or key == CTRL_H:
        line = tile.line
        if line:
            tile.set_line(grapheme.slice(line, 0, grapheme.length(line) - 1))

    elif isinstance(key, str) and key.isprintable():
        # Edits only ever happen at the end of the line.
        tile.set_line(tile.line + key)

    return False


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

TILE_HANDLERS: Mapping[TileType, TileHandler] = MappingProxyType({
    SCROLL_DOWN: TileHandler(SCROLL_DOWN, _scroll_down_render, _scroll_down_key_press),
    SCROLL_DOWN_CLIP: TileHandler(
        SCROLL_DOWN_CLIP, _scroll_down_clip_render, _scroll_down_clip_key_press
    ),
    SCROLL_DOWN_CLIP_RAW: TileHandler(
        SCROLL_DOWN_CLIP_RAW, _scroll_down_clip_render, _scroll_down_clip_raw_key_press
    ),
    SCROLL_UP: TileHandler(SCROLL_UP, _scroll_up_render, _scroll_up_key_press),
})
