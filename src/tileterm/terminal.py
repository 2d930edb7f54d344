"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that switches the controlling terminal into raw
(unbuffered, unechoed, char-at-a-time) mode, reports its size in cells,
writes output and reads input one rune at a time.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
import termios
import tty
from typing import IO, Iterator, Protocol

from tileterm.keys import RuneReader

logger = logging.getLogger(__name__)

_DEFAULT_COLUMNS = 80
_DEFAULT_ROWS = 24


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface ``TileTerm`` needs from a terminal."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def write(self, data: str) -> None: ...

    def read_rune(self) -> str: ...

    def unread_rune(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin/stdout (or the given streams).

    ``start`` saves the current termios attributes and enters raw mode,
    ``stop`` restores them. When ``TILETERM_WRITE_LOG`` names a file, every
    write is also appended to it.
    """

    def __init__(self, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._original_termios: list | None = None
        self._reader: RuneReader | None = None
        self._write_log_path: str = os.environ.get("TILETERM_WRITE_LOG", "")

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    def _size(self) -> os.terminal_size:
        try:
            return os.get_terminal_size(self._stdout.fileno())
        except (ValueError, OSError) as exc:
            logger.warning("cannot query terminal size, assuming %dx%d: %s",
                           _DEFAULT_COLUMNS, _DEFAULT_ROWS, exc)
            return os.terminal_size((_DEFAULT_COLUMNS, _DEFAULT_ROWS))

    @property
    def is_raw(self) -> bool:
        return self._original_termios is not None

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Save the terminal state and enable raw mode."""
        if self._original_termios is not None:
            return
        fd = self._stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        logger.debug("raw mode enabled on fd %d", fd)

    def stop(self) -> None:
        """Restore the terminal attributes saved by :meth:`start`."""
        if self._original_termios is None:
            return
        fd = self._stdin.fileno()
        termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
        self._original_termios = None
        logger.debug("terminal mode restored on fd %d", fd)

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[ProcessTerminal]:
        """Context manager that keeps the terminal raw for its body."""
        self.start()
        try:
            yield self
        finally:
            self.stop()

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to the output stream and, optionally, the write log."""
        self._stdout.write(data)
        self._stdout.flush()

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError as exc:
                logger.warning("write log %s disabled: %s", self._write_log_path, exc)
                self._write_log_path = ""

    # -- input --------------------------------------------------------------

    def _input(self) -> RuneReader:
        if self._reader is None:
            stream: IO[str] = self._stdin
            with contextlib.suppress(AttributeError, OSError, ValueError):
                # Fresh UTF-8 reader over the same fd; it never closes stdin.
                stream = open(
                    self._stdin.fileno(),
                    "r",
                    encoding="utf-8",
                    errors="replace",
                    closefd=False,
                )
            self._reader = RuneReader(stream)
        return self._reader

    def read_rune(self) -> str:
        """Block until one character is available; ``EOFError`` at end of input."""
        return self._input().read_rune()

    def unread_rune(self) -> None:
        self._input().unread_rune()
