"""tileterm: tiled text windows and a block-glyph canvas for raw terminals."""

# Bitmap canvas
from tileterm.canvas import BLOCKS_ASPECT, BLOCKS_DENSE, Canvas

# Escape sequences
from tileterm.csi import (
    ERASE_ALL,
    ERASE_TO_BEGIN,
    ERASE_TO_END,
    SGR_BOLD,
    SGR_NEGATIVE,
    SGR_OFF,
    SGR_UNDERLINE,
    cup,
    ed,
    el,
    sgr,
)

# Drawing helpers
from tileterm.drawing import (
    BROKEN_BOX,
    DOUBLE_BOX,
    HORIZ_BOX,
    SINGLE_BOX,
    BoxChars,
    box,
    clear_rect,
)
from tileterm.geometry import Point, Rect

# Input history
from tileterm.history import HistoryRing

# Keyboard input
from tileterm.keys import (
    CTRL_C,
    CTRL_Q,
    CTRL_T,
    CTRL_U,
    KEY_BACKSPACE,
    KEY_ENTER,
    KEY_ESCAPE,
    Key,
    KeyDecoder,
    KeyToken,
    RuneReader,
    SpecialKey,
    describe_key,
    read_key,
)

# Terminal interface and implementation
from tileterm.terminal import ProcessTerminal, Terminal

# Tiles and the session
from tileterm.tile import (
    EDGE_BOTTOM,
    EDGE_LEFT,
    EDGE_RIGHT,
    EDGE_TOP,
    SCROLL_DOWN,
    SCROLL_DOWN_CLIP,
    SCROLL_DOWN_CLIP_RAW,
    SCROLL_UP,
    Edge,
    Tile,
    TileType,
)
from tileterm.tileterm import TileTerm

# Text formatting
from tileterm.utils import visible_width, wrap_fixed, wrap_text_break, wrap_text_clip

__all__ = [
    # canvas
    "BLOCKS_ASPECT",
    "BLOCKS_DENSE",
    "Canvas",
    # csi
    "ERASE_ALL",
    "ERASE_TO_BEGIN",
    "ERASE_TO_END",
    "SGR_BOLD",
    "SGR_NEGATIVE",
    "SGR_OFF",
    "SGR_UNDERLINE",
    "cup",
    "ed",
    "el",
    "sgr",
    # drawing
    "BROKEN_BOX",
    "DOUBLE_BOX",
    "HORIZ_BOX",
    "SINGLE_BOX",
    "BoxChars",
    "box",
    "clear_rect",
    "Point",
    "Rect",
    # history
    "HistoryRing",
    # keys
    "CTRL_C",
    "CTRL_Q",
    "CTRL_T",
    "CTRL_U",
    "KEY_BACKSPACE",
    "KEY_ENTER",
    "KEY_ESCAPE",
    "Key",
    "KeyDecoder",
    "KeyToken",
    "RuneReader",
    "SpecialKey",
    "describe_key",
    "read_key",
    # terminal
    "ProcessTerminal",
    "Terminal",
    # tiles
    "EDGE_BOTTOM",
    "EDGE_LEFT",
    "EDGE_RIGHT",
    "EDGE_TOP",
    "SCROLL_DOWN",
    "SCROLL_DOWN_CLIP",
    "SCROLL_DOWN_CLIP_RAW",
    "SCROLL_UP",
    "Edge",
    "Tile",
    "TileType",
    "TileTerm",
    # utils
    "visible_width",
    "wrap_fixed",
    "wrap_text_break",
    "wrap_text_clip",
]
