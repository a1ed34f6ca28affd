"""Iterators that never run out of values."""

from __future__ import annotations

from typing import Iterator

U64_MAX = 2**64 - 1


def successor(value: int) -> int | None:
    """The next unsigned 64-bit integer, or ``None`` if ``value`` is the largest."""
    if value == U64_MAX:
        return None
    return value + 1


class RangeCycle:
    """Cycles endlessly through ``start <= n < stop``, beginning at ``item``."""

    __slots__ = ("start", "stop", "_item")

    def __init__(self, start: int, stop: int, item: int | None = None) -> None:
        self.start = start
        self.stop = stop
        self._item = start if item is None else item

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        current = self._item
        following = successor(current)
        if following is None:
            raise OverflowError(f"{current} has no successor")
        self._item = self.start if following == self.stop else following
        return current

    def __repr__(self) -> str:
        return f"RangeCycle(start={self.start}, stop={self.stop}, item={self._item})"