"""Terminal text utilities: width measurement and fixed-width formatting.

Every formatter here returns lines that occupy exactly ``width`` terminal
columns, space-padded, so a tile renderer can paint its whole rectangle
without tracking what was on screen before. Widths are measured per
grapheme cluster, so combining marks take no column and East Asian wide
characters take two.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

DEFAULT_TAB_SIZE = 3

# Control characters that survive newline/tab normalization; they would move
# the terminal cursor, so they are dropped from rendered text.
_CONTROL_RE = re.compile(r"[\x00-\x09\x0b-\x1f\x7f-\x9f]")

_TOKEN_RE = re.compile(r"\S+|\s+")

# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    # Multi-codepoint clusters: emoji presentation, ZWJ sequences, flags
    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0
    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies."""
    if not text:
        return 0
    if text.isascii() and text.isprintable():
        return len(text)
    return sum(_grapheme_width(g) for g in grapheme.graphemes(text))


def _pad(text: str, used: int, width: int) -> str:
    return text + " " * (width - used)


def split_columns(text: str, width: int) -> list[tuple[str, int]]:
    """Split *text* into pieces of at most *width* columns.

    Returns ``(piece, piece_width)`` pairs; a wide cluster that does not fit
    in the space left on a piece starts the next one. A cluster wider than
    *width* itself is replaced by spaces.
    """
    pieces: list[tuple[str, int]] = []
    current: list[str] = []
    used = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if w > width:
            g, w = " " * width, width
        if used + w > width:
            pieces.append(("".join(current), used))
            current, used = [], 0
        current.append(g)
        used += w
    if current or not pieces:
        pieces.append(("".join(current), used))
    return pieces


def normalize_text(text: str, tab_size: int = DEFAULT_TAB_SIZE) -> list[str]:
    """Split *text* into logical lines.

    CRLF and lone CR become LF, tabs expand to *tab_size* spaces, and other
    control characters are removed.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\t", " " * tab_size)
    return [_CONTROL_RE.sub("", line) for line in text.split("\n")]


# ---------------------------------------------------------------------------
# Fixed-width chunking (no word breaks)
# ---------------------------------------------------------------------------


def wrap_fixed(line: str, width: int) -> list[str]:
    """Cut a single *line* into *width*-column chunks, the last one padded.

    An empty line still yields one blank chunk.
    """
    if width <= 0:
        return []
    return [_pad(piece, used, width) for piece, used in split_columns(line, width)]


# ---------------------------------------------------------------------------
# Word wrap
# ---------------------------------------------------------------------------


def wrap_text_break(text: str, width: int, tab_size: int = DEFAULT_TAB_SIZE) -> list[str]:
    """Word-wrap *text* to *width* columns.

    Explicit line breaks are kept. A word is only split when it alone is
    wider than *width*. Spaces at a break point are dropped, leading
    indentation of a logical line is kept. Every returned line is exactly
    *width* columns wide.
    """
    if width <= 0:
        return []

    result: list[str] = []
    for line in normalize_text(text, tab_size):
        result.extend(_break_line(line, width))
    return result


def _break_line(line: str, width: int) -> list[str]:
    rows: list[str] = []
    current: list[str] = []
    used = 0

    def flush() -> None:
        nonlocal current, used
        rows.append(_pad("".join(current), used, width))
        current, used = [], 0

    for token in _TOKEN_RE.findall(line):
        token_width = visible_width(token)
        if token.isspace():
            if used == 0 and rows:
                continue
            if used + token_width > width:
                flush()
                continue
            current.append(token)
            used += token_width
            continue

        if used + token_width <= width:
            current.append(token)
            used += token_width
            continue

        if used > 0:
            flush()
        if token_width <= width:
            current.append(token)
            used = token_width
            continue

        pieces = split_columns(token, width)
        for piece, piece_width in pieces[:-1]:
            rows.append(_pad(piece, piece_width, width))
        current, used = [pieces[-1][0]], pieces[-1][1]

    if used > 0 or not rows:
        flush()
    return rows


# ---------------------------------------------------------------------------
# Column clip
# ---------------------------------------------------------------------------


def clip_line(line: str, width: int, start_col: int = 0) -> str:
    """Return columns ``[start_col, start_col + width)`` of *line*, padded.

    A wide character cut by either window edge is replaced by spaces.
    """
    lo, hi = start_col, start_col + width
    parts: list[str] = []
    used = 0
    col = 0
    for g in grapheme.graphemes(line):
        if col >= hi:
            break
        w = _grapheme_width(g)
        end = col + w
        if w == 0:
            if parts and lo <= col < hi:
                parts.append(g)
        elif col >= lo and end <= hi:
            parts.append(g)
            used += w
        elif end > lo:
            n = min(end, hi) - max(col, lo)
            parts.append(" " * n)
            used += n
        col = end
    return _pad("".join(parts), used, width)


def wrap_text_clip(
    text: str,
    width: int,
    tab_size: int = DEFAULT_TAB_SIZE,
    start_col: int = 0,
) -> list[str]:
    """Clip each logical line of *text* to a *width*-column window.

    No reflow happens: one output line per input line, showing the columns
    from *start_col* onwards, clipped or space-padded to exactly *width*.
    """
    if width <= 0:
        return []
    start_col = max(start_col, 0)
    return [clip_line(line, width, start_col) for line in normalize_text(text, tab_size)]
