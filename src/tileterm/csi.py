"""ANSI CSI (Control Sequence Introducer) builders.

Stateless formatters for cursor movement, erasing, scrolling and SGR text
attributes, plus the box-drawing code points used for tile borders.
The upper-left cell of the screen is (1, 1).
"""

from __future__ import annotations

CSI = "\x1b["

# ---------------------------------------------------------------------------
# Cursor movement
# ---------------------------------------------------------------------------


def cuu(n: int) -> str:
    """Cursor up."""
    return f"{CSI}{n}A"


def cud(n: int) -> str:
    """Cursor down."""
    return f"{CSI}{n}B"


def cuf(n: int) -> str:
    """Cursor forward."""
    return f"{CSI}{n}C"


def cub(n: int) -> str:
    """Cursor back."""
    return f"{CSI}{n}D"


def cnl(n: int) -> str:
    """Cursor to the start of the line *n* lines down."""
    return f"{CSI}{n}E"


def cpl(n: int) -> str:
    """Cursor to the start of the line *n* lines up."""
    return f"{CSI}{n}F"


def cha(n: int) -> str:
    """Cursor to absolute column *n*."""
    return f"{CSI}{n}G"


def cup(x: int, y: int) -> str:
    """Cursor to column *x*, row *y*."""
    return f"{CSI}{y};{x}H"


def hvp(x: int, y: int) -> str:
    """Horizontal and vertical position; same effect as :func:`cup`."""
    return f"{CSI}{y};{x}f"


# ---------------------------------------------------------------------------
# Erase / scroll
# ---------------------------------------------------------------------------

ERASE_TO_END = 0
ERASE_TO_BEGIN = 1
ERASE_ALL = 2


def ed(mode: int) -> str:
    """Erase in display: to end, to beginning, or the whole screen."""
    return f"{CSI}{mode}J"


def el(mode: int) -> str:
    """Erase in line; the cursor does not move."""
    return f"{CSI}{mode}K"


def su(n: int) -> str:
    """Scroll the whole page up *n* lines."""
    return f"{CSI}{n}S"


def sd(n: int) -> str:
    """Scroll the whole page down *n* lines."""
    return f"{CSI}{n}T"


# ---------------------------------------------------------------------------
# SGR (Select Graphic Rendition)
# ---------------------------------------------------------------------------

SGR_OFF = 0
SGR_BOLD = 1
SGR_UNDERLINE = 4
SGR_BLINKING = 5
SGR_NEGATIVE = 7
SGR_INVISIBLE = 8
SGR_BOLD_OFF = 22
SGR_UNDERLINE_OFF = 24
SGR_BLINKING_OFF = 25
SGR_NEGATIVE_OFF = 27
SGR_INVISIBLE_OFF = 28


def sgr(*attrs: int) -> str:
    """Combine *attrs* into one SGR sequence; no attributes gives ``""``."""
    if not attrs:
        return ""
    return f"{CSI}{';'.join(str(a) for a in attrs)}m"


# ---------------------------------------------------------------------------
# Box-drawing code points
# ---------------------------------------------------------------------------

# single (heavy) line
SBOX_HORIZ = 0x2501
SBOX_VERT = 0x2503
SBOX_UL = 0x250F
SBOX_UR = 0x2513
SBOX_LL = 0x2517
SBOX_LR = 0x251B

# double line
DBOX_HORIZ = 0x2550
DBOX_VERT = 0x2551
DBOX_UL = 0x2554
DBOX_UR = 0x2557
DBOX_LL = 0x255A
DBOX_LR = 0x255D

# broken line
BBOX_HORIZ = 0x2509
BBOX_VERT = 0x250B
BBOX_UL = 0x250F
BBOX_UR = 0x2513
BBOX_LL = 0x2517
BBOX_LR = 0x251B

# horizontal rules only
HBOX_HORIZ = 0x2501
HBOX_VERT = 0x20
HBOX_UL = 0x20
HBOX_UR = 0x20
HBOX_LL = 0x20
HBOX_LR = 0x20
