"""Keyboard input decoding for raw terminals.

Turns a stream of runes (single Unicode characters) into logical key tokens.
Ordinary characters come back as one-character strings; the multi-rune ANSI
sequences sent by arrow keys, back-tab and delete are folded into a single
``SpecialKey`` value, so callers never see a partial escape sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TextIO, Union

# ---------------------------------------------------------------------------
# Special (non-text) keys
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SpecialKey:
    """A named key that has no single-character representation."""

    name: str

    def __repr__(self) -> str:
        return f"SpecialKey({self.name})"


KeyToken = Union[str, SpecialKey]


class Key:
    """Named key constants."""

    up = SpecialKey("up")
    down = SpecialKey("down")
    left = SpecialKey("left")
    right = SpecialKey("right")
    back_tab = SpecialKey("backTab")
    delete = SpecialKey("delete")
    unknown = SpecialKey("unknown")


SPECIAL_KEYS: tuple[SpecialKey, ...] = (
    Key.up,
    Key.down,
    Key.left,
    Key.right,
    Key.back_tab,
    Key.delete,
    Key.unknown,
)

# ---------------------------------------------------------------------------
# Control characters
# ---------------------------------------------------------------------------

CTRL_A = "\x01"
CTRL_B = "\x02"
CTRL_C = "\x03"
CTRL_D = "\x04"
CTRL_E = "\x05"
CTRL_F = "\x06"
CTRL_G = "\x07"
CTRL_H = "\x08"
CTRL_I = "\x09"
CTRL_J = "\x0a"
CTRL_K = "\x0b"
CTRL_L = "\x0c"
CTRL_M = "\x0d"
CTRL_N = "\x0e"
CTRL_O = "\x0f"
CTRL_P = "\x10"
CTRL_Q = "\x11"
CTRL_R = "\x12"
CTRL_S = "\x13"
CTRL_T = "\x14"
CTRL_U = "\x15"
CTRL_V = "\x16"
CTRL_W = "\x17"
CTRL_X = "\x18"
CTRL_Y = "\x19"
CTRL_Z = "\x1a"

KEY_TAB = "\t"
KEY_ENTER = "\r"
KEY_ESCAPE = "\x1b"
KEY_SPACE = " "
KEY_LBRACKET = "["
KEY_BACKSPACE = "\x7f"

# Third rune of ``ESC [ x`` -> key
_CSI_FINALS: dict[str, SpecialKey] = {
    "A": Key.up,
    "B": Key.down,
    "C": Key.right,
    "D": Key.left,
    "Z": Key.back_tab,
}

_NAMED_CHARS: dict[str, str] = {
    KEY_TAB: "tab",
    KEY_ENTER: "enter",
    KEY_ESCAPE: "escape",
    KEY_SPACE: "space",
    KEY_BACKSPACE: "backspace",
}


def describe_key(token: KeyToken) -> str:
    """Return a short printable name for *token*, e.g. ``"ctrl+t"`` or ``"up"``."""
    if isinstance(token, SpecialKey):
        return token.name
    named = _NAMED_CHARS.get(token)
    if named is not None:
        return named
    cp = ord(token)
    if 1 <= cp <= 26:
        return f"ctrl+{chr(cp + 96)}"
    if cp < 0x20 or cp == 0x7F:
        return f"0x{cp:02x}"
    return token


# ---------------------------------------------------------------------------
# Rune sources
# ---------------------------------------------------------------------------


class RuneSource(Protocol):
    """Something that yields runes one at a time with one-step pushback."""

    def read_rune(self) -> str: ...

    def unread_rune(self) -> None: ...


class RuneReader:
    """Reads single characters from a text stream, with one-step pushback.

    ``read_rune`` raises ``EOFError`` at end of input; I/O errors from the
    underlying stream propagate unchanged.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._last: str | None = None
        self._pushed_back = False

    def read_rune(self) -> str:
        if self._pushed_back:
            self._pushed_back = False
            assert self._last is not None
            return self._last
        ch = self._stream.read(1)
        if not ch:
            self._last = None
            raise EOFError("end of input")
        self._last = ch
        return ch

    def unread_rune(self) -> None:
        """Push the most recently read rune back so the next read returns it."""
        if self._last is None or self._pushed_back:
            raise RuntimeError("unread_rune: previous operation was not a successful read")
        self._pushed_back = True


# ---------------------------------------------------------------------------
# Key decoding
# ---------------------------------------------------------------------------


def read_key(source: RuneSource) -> KeyToken:
    """Read one logical key from *source*.

    * A rune other than ESC is returned as-is.
    * ``ESC`` followed by anything but ``[`` pushes that rune back and
      returns ``ESC``; ``ESC`` at end of input also returns ``ESC``.
    * ``ESC [ A|B|C|D|Z`` decodes to up/down/right/left/back-tab.
    * ``ESC [ 3 ~`` decodes to delete; any other fourth rune is unknown.
    * Any other ``ESC [`` sequence decodes to ``Key.unknown``.
    """
    first = source.read_rune()
    if first != KEY_ESCAPE:
        return first

    try:
        second = source.read_rune()
    except EOFError:
        return KEY_ESCAPE
    if second != KEY_LBRACKET:
        source.unread_rune()
        return KEY_ESCAPE

    third = source.read_rune()
    special = _CSI_FINALS.get(third)
    if special is not None:
        return special
    if third != "3":
        return Key.unknown

    fourth = source.read_rune()
    if fourth == "~":
        return Key.delete
    return Key.unknown


class KeyDecoder:
    """Pulls runes from a ``RuneSource`` and emits logical key tokens."""

    def __init__(self, source: RuneSource) -> None:
        self.source = source

    def read_key(self) -> KeyToken:
        return read_key(self.source)

    def __iter__(self):
        """Yield keys until the source is exhausted."""
        while True:
            try:
                yield self.read_key()
            except EOFError:
                return
