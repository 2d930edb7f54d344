"""Positioned drawing primitives: lines, boxes and cleared rectangles.

Each helper returns an escape string; nothing is written to the terminal
here. Rectangles too small for the requested shape produce ``""``.
"""

from __future__ import annotations

from typing import NamedTuple

from tileterm import csi
from tileterm.geometry import Rect
from tileterm.utils import visible_width


class BoxChars(NamedTuple):
    """Glyph set for a border."""

    horiz: str
    vert: str
    ul: str
    ur: str
    ll: str
    lr: str

    @classmethod
    def from_codepoints(cls, *codepoints: int) -> BoxChars:
        return cls(*(chr(cp) for cp in codepoints))


SINGLE_BOX = BoxChars.from_codepoints(
    csi.SBOX_HORIZ, csi.SBOX_VERT, csi.SBOX_UL, csi.SBOX_UR, csi.SBOX_LL, csi.SBOX_LR
)
DOUBLE_BOX = BoxChars.from_codepoints(
    csi.DBOX_HORIZ, csi.DBOX_VERT, csi.DBOX_UL, csi.DBOX_UR, csi.DBOX_LL, csi.DBOX_LR
)
BROKEN_BOX = BoxChars.from_codepoints(
    csi.BBOX_HORIZ, csi.BBOX_VERT, csi.BBOX_UL, csi.BBOX_UR, csi.BBOX_LL, csi.BBOX_LR
)
HORIZ_BOX = BoxChars.from_codepoints(
    csi.HBOX_HORIZ, csi.HBOX_VERT, csi.HBOX_UL, csi.HBOX_UR, csi.HBOX_LL, csi.HBOX_LR
)


def char_at(x: int, y: int, ch: str) -> str:
    """Place *ch* at column *x*, row *y*."""
    return csi.cup(x, y) + ch


def h_line(x1: int, x2: int, y: int, ch: str) -> str:
    """Horizontal run of *ch* on row *y* covering columns ``[x1, x2)``."""
    if x2 <= x1:
        return ""
    return csi.cup(x1, y) + ch * (x2 - x1)


def h_line_text(x1: int, x2: int, y: int, ch: str, text: str, *style: int) -> str:
    """Horizontal line with *text* centred in it, *text* drawn with *style*."""
    span = x2 - x1
    text_width = visible_width(text)
    left = (span - text_width) // 2
    right = span - text_width - left
    return (
        csi.cup(x1, y)
        + ch * left
        + csi.sgr(*style)
        + text
        + (csi.sgr(csi.SGR_OFF) if style else "")
        + ch * right
    )


def v_line(x: int, y1: int, y2: int, ch: str) -> str:
    """Vertical run of *ch* in column *x* covering rows ``[y1, y2)``."""
    return "".join(csi.cup(x, y) + ch for y in range(y1, y2))


def box(r: Rect, chars: BoxChars, title: str = "", *style: int) -> str:
    """Draw a border on the outermost cells of *r*, with an optional title.

    The title is centred in the top edge and omitted when it does not fit.
    """
    if r.max.x - r.min.x < 2 or r.max.y - r.min.y < 2:
        return ""
    parts = [char_at(r.min.x, r.min.y, chars.ul)]
    if not title or visible_width(title) > r.max.x - r.min.x - 1:
        parts.append(h_line(r.min.x + 1, r.max.x, r.min.y, chars.horiz))
    else:
        parts.append(h_line_text(r.min.x + 1, r.max.x, r.min.y, chars.horiz, title, *style))
    parts.append(char_at(r.max.x, r.min.y, chars.ur))
    parts.append(v_line(r.max.x, r.min.y + 1, r.max.y, chars.vert))
    parts.append(char_at(r.max.x, r.max.y, chars.lr))
    parts.append(h_line(r.min.x + 1, r.max.x, r.max.y, chars.horiz))
    parts.append(char_at(r.min.x, r.max.y, chars.ll))
    parts.append(v_line(r.min.x, r.min.y + 1, r.max.y, chars.vert))
    return "".join(parts)


def clear_rect(r: Rect) -> str:
    """Overwrite every cell of *r* with a space."""
    if r.width < 1 or r.height < 1:
        return ""
    blank = " " * r.width
    return "".join(csi.cup(r.min.x, y) + blank for y in range(r.min.y, r.max.y + 1))
