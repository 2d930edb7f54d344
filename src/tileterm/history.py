"""Fixed-capacity ring of previously entered lines."""

from __future__ import annotations

DEFAULT_HISTORY_SIZE = 100


class HistoryRing:
    """Circular log of strings with "nth previous" lookup.

    Once the ring is full, each ``add`` overwrites the oldest entry.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"history capacity must be positive, got {capacity}")
        self._entries: list[str] = [""] * capacity
        # Index of the most recently added entry.
        self._head: int = 0
        self._size: int = 0

    def add(self, entry: str) -> None:
        """Record *entry* as the most recent value."""
        self._head = (self._head + 1) % len(self._entries)
        self._entries[self._head] = entry
        if self._size < len(self._entries):
            self._size += 1

    def nth_previous_entry(self, n: int) -> tuple[str, bool]:
        """Return the value passed to the *n*-th previous ``add``.

        ``n == 0`` is the most recent entry. Returns ``("", False)`` when no
        such entry exists.
        """
        if n < 0 or n >= self._size:
            return "", False
        return self._entries[(self._head - n) % len(self._entries)], True

    @property
    def capacity(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return self._size
