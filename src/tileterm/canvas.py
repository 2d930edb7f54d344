"""Bitmap canvas rendered as Unicode block glyphs.

The canvas packs 2x2 pixels into each byte of its buffer::

         x even  x odd
    y even   1      2
    y odd    4      8

``string_dense`` renders each byte as one quadrant-block glyph (2x2 pixels
per cell). ``string_aspect`` renders each byte as two half-block glyphs
(1x2 pixels per cell), which looks closer to square pixels on terminals
whose cells are about twice as tall as they are wide.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from tileterm.csi import SBOX_HORIZ, SBOX_LL, SBOX_LR, SBOX_UL, SBOX_UR, SBOX_VERT

# ---------------------------------------------------------------------------
# Glyph tables, indexed by the 4-bit quadrant pattern
# ---------------------------------------------------------------------------

BLOCKS_DENSE: tuple[str, ...] = (
    " ",       # 0 empty
    "\u2598",  # 1 UL
    "\u259d",  # 2 UR
    "\u2580",  # 3 UL UR
    "\u2596",  # 4 LL
    "\u258c",  # 5 UL LL
    "\u259e",  # 6 UR LL
    "\u259b",  # 7 UL UR LL
    "\u2597",  # 8 LR
    "\u259a",  # 9 UL LR
    "\u2590",  # 10 UR LR
    "\u259c",  # 11 UL UR LR
    "\u2584",  # 12 LL LR
    "\u2599",  # 13 UL LL LR
    "\u259f",  # 14 UR LL LR
    "\u2588",  # 15 full
)

_UPPER = "\u2580"
_LOWER = "\u2584"
_FULL = "\u2588"

BLOCKS_ASPECT: tuple[str, ...] = (
    "  ",              # 0 empty
    _UPPER + " ",      # 1 UL
    " " + _UPPER,      # 2 UR
    _UPPER + _UPPER,   # 3 UL UR
    _LOWER + " ",      # 4 LL
    _FULL + " ",       # 5 UL LL
    _LOWER + _UPPER,   # 6 UR LL
    _FULL + _UPPER,    # 7 UL UR LL
    " " + _LOWER,      # 8 LR
    _UPPER + _LOWER,   # 9 UL LR
    " " + _FULL,       # 10 UR LR
    _UPPER + _FULL,    # 11 UL UR LR
    _LOWER + _LOWER,   # 12 LL LR
    _FULL + _LOWER,    # 13 UL LL LR
    _LOWER + _FULL,    # 14 UR LL LR
    _FULL + _FULL,     # 15 full
)

_LINE_END = "\r\n"


class Canvas:
    """A plotting surface of ``width`` x ``height`` pixels.

    Upper left is (0, 0). In *xor* mode a plot toggles the pixel, otherwise
    it sets it. In *wrap* mode coordinates outside the canvas wrap around,
    otherwise they are clamped to the nearest edge.
    """

    def __init__(self, width: int, height: int) -> None:
        self.init(width, height)

    def init(self, width: int, height: int) -> None:
        """(Re)initialize to an empty *width* x *height* pixel canvas."""
        self.xor = False
        self.wrap = False
        self._pwidth = width
        self._pheight = height
        self._bwidth = (max(width, 0) + 1) // 2 + 1
        self._bheight = (max(height, 0) + 1) // 2 + 1
        self._buf = bytearray(self._bwidth * self._bheight)

    # -- properties ---------------------------------------------------------

    @property
    def width(self) -> int:
        """Width in pixels."""
        return self._pwidth

    @property
    def height(self) -> int:
        """Height in pixels."""
        return self._pheight

    @property
    def buffer_size(self) -> tuple[int, int]:
        """Extent of the byte buffer as ``(columns, rows)``."""
        return self._bwidth, self._bheight

    # -- modes --------------------------------------------------------------

    def plot_xor(self) -> None:
        self.xor = True

    def plot_or(self) -> None:
        self.xor = False

    def plot_wrap(self) -> None:
        self.wrap = True

    def plot_unwrap(self) -> None:
        self.wrap = False

    # -- pixels -------------------------------------------------------------

    def _address(self, x: int, y: int) -> tuple[int, int] | None:
        """Map a pixel to ``(byte_index, bit)``, or None on an empty canvas."""
        if self._pwidth <= 0 or self._pheight <= 0:
            return None
        if self.wrap:
            x %= self._pwidth
            y %= self._pheight
        else:
            x = min(max(x, 0), self._pwidth - 1)
            y = min(max(y, 0), self._pheight - 1)
        index = (y // 2) * self._bwidth + x // 2
        bit = 1 << ((y % 2) * 2 + x % 2)
        return index, bit

    def plot(self, x: int, y: int) -> None:
        addr = self._address(x, y)
        if addr is None:
            return
        index, bit = addr
        if self.xor:
            self._buf[index] ^= bit
        else:
            self._buf[index] |= bit

    def read(self, x: int, y: int) -> bool:
        """Return True if the pixel at (x, y) is set."""
        addr = self._address(x, y)
        if addr is None:
            return False
        index, bit = addr
        return self._buf[index] & bit == bit

    def clear(self) -> None:
        self._buf[:] = bytes(len(self._buf))

    # -- drawing ------------------------------------------------------------

    def line(self, x0: int, y0: int, x1: int, y1: int) -> None:
        """Plot a line from (x0, y0) to (x1, y1), both ends included.

        Integer Bresenham: every step moves to one of the eight neighbours,
        so the plotted path has no gaps.
        """
        dx = abs(x1 - x0)
        dy = abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx - dy

        while True:
            self.plot(x0, y0)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x0 += sx
            if e2 < dx:
                err += dx
                y0 += sy

    def bmp(self, x: int, y: int, rows: Iterable[Sequence[int]]) -> None:
        """Blit a 1-bit bitmap with its upper left at (x, y).

        Each row is a sequence of bytes; every byte covers 8 pixel columns,
        most significant bit first.
        """
        for j, row in enumerate(rows):
            for i, value in enumerate(row):
                for b in range(8):
                    if value & (0x80 >> b):
                        self.plot(x + i * 8 + b, y + j)

    # -- rendering ----------------------------------------------------------

    def _rows(self, glyphs: tuple[str, ...]) -> list[str]:
        buf = self._buf
        w = self._bwidth
        return [
            "".join(glyphs[buf[row * w + col]] for col in range(w))
            for row in range(self._bheight)
        ]

    def string_dense(self) -> str:
        """Render as 2x2 pixels per character cell."""
        return "".join(row + _LINE_END for row in self._rows(BLOCKS_DENSE))

    def string_aspect(self) -> str:
        """Render as 1x2 pixels per character cell."""
        return "".join(row + _LINE_END for row in self._rows(BLOCKS_ASPECT))

    def string_dense_border(self) -> str:
        """Like :meth:`string_dense`, framed with single box glyphs."""
        return _frame(self._rows(BLOCKS_DENSE), self._bwidth)

    def string_aspect_border(self) -> str:
        """Like :meth:`string_aspect`, framed with single box glyphs."""
        return _frame(self._rows(BLOCKS_ASPECT), self._bwidth * 2)


def _frame(rows: list[str], inner_width: int) -> str:
    horiz = chr(SBOX_HORIZ) * inner_width
    vert = chr(SBOX_VERT)
    out = [chr(SBOX_UL) + horiz + chr(SBOX_UR) + _LINE_END]
    out.extend(vert + row + vert + _LINE_END for row in rows)
    out.append(chr(SBOX_LL) + horiz + chr(SBOX_LR) + _LINE_END)
    return "".join(out)
