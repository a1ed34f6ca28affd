"""Deadlines that may be armed lazily, on first use."""

from __future__ import annotations

import math
import time


class Deadline:
    """A point in time after which waiting should stop.

    Durations are in seconds; ``math.inf`` means never, and ``0`` means the
    deadline has already passed.
    """

    __slots__ = ("_pending", "_point")

    def __init__(self, duration: float) -> None:
        if duration < 0:
            raise ValueError(f"duration must not be negative: {duration!r}")
        self._pending: float | None = duration
        self._point = 0.0

    @classmethod
    def lazy_after(cls, duration: float) -> Deadline:
        """Create a deadline whose clock starts on the first call to ``remaining``."""
        return cls(duration)

    @classmethod
    def after(cls, duration: float) -> Deadline:
        """Create a deadline whose clock starts now."""
        deadline = cls(duration)
        deadline._ensure_initialized()
        return deadline

    def _ensure_initialized(self) -> None:
        duration = self._pending
        if duration is None:
            return
        self._pending = None
        if duration == math.inf:
            self._point = math.inf
        elif duration == 0:
            self._point = -math.inf
        else:
            self._point = time.monotonic() + duration

    def remaining(self) -> float:
        """Seconds left until the deadline, never below zero."""
        self._ensure_initialized()
        if self._point == math.inf:
            return math.inf
        if self._point == -math.inf:
            return 0.0
        return max(0.0, self._point - time.monotonic())

    def __repr__(self) -> str:
        if self._pending is not None:
            return f"Deadline(uninitialized, duration={self._pending!r})"
        if self._point == math.inf:
            return "Deadline(forever)"
        if self._point == -math.inf:
            return "Deadline(elapsed)"
        return f"Deadline(point={self._point!r})"