"""A value that is completed at most once and can be awaited by other threads."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from anode.deadline import Deadline
from anode.monitor import Cell, Directive, SpeculativeMonitor

T = TypeVar("T")


class _Incomplete:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<incomplete>"


_INCOMPLETE: Any = _Incomplete()


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either an abort or a successful result; the default is an abort."""

    succeeded: bool = False
    value: Optional[T] = None

    @staticmethod
    def abort() -> Outcome[Any]:
        return _ABORT

    @staticmethod
    def success(value: T) -> Outcome[T]:
        return Outcome(True, value)

    def is_abort(self) -> bool:
        return not self.succeeded

    def is_success(self) -> bool:
        return self.succeeded

    def into_option(self) -> Optional[T]:
        """The result if successful, otherwise ``None``."""
        return self.value if self.succeeded else None

    def __repr__(self) -> str:
        return f"Outcome.success({self.value!r})" if self.succeeded else "Outcome.abort()"


_ABORT: Outcome[Any] = Outcome()


class Completable(Generic[T]):
    """Holds a value that may be assigned once; readers may wait for it.

    ``Completable()`` starts incomplete; ``Completable(value)`` starts complete.
    Methods that report an absent value use ``None``, so ``None`` is best not
    used as the completed value itself.
    """

    __slots__ = ("_monitor",)

    def __init__(self, value: Any = _INCOMPLETE) -> None:
        self._monitor: SpeculativeMonitor[Any] = SpeculativeMonitor(value)

    def complete_exclusive(self, f: Callable[[], T]) -> bool:
        """Complete with the result of ``f``, invoking it only if still incomplete.

        No other thread can complete the instance while ``f`` runs. Returns
        ``True`` if and only if ``f`` was invoked.
        """
        invoked = False

        def step(cell: Cell[Any]) -> Directive:
            nonlocal invoked
            if cell.value is _INCOMPLETE:
                cell.value = f()
                invoked = True
            return Directive.NOTIFY_ALL if invoked else Directive.RETURN

        self._monitor.enter(step)
        return invoked

    def complete(self, value: T) -> Optional[T]:
        """Assign ``value`` if incomplete.

        Returns ``None`` if the value was stored, or ``value`` itself if the
        instance was already complete and kept its existing value.
        """
        placed = False

        def step(cell: Cell[Any]) -> Directive:
            nonlocal placed
            if cell.value is _INCOMPLETE:
                cell.value = value
                placed = True
            return Directive.NOTIFY_ALL if placed else Directive.RETURN

        self._monitor.enter(step)
        return None if placed else value

    def is_complete(self) -> bool:
        with self._monitor.lock() as cell:
            return cell.value is not _INCOMPLETE

    def get(self) -> T:
        """Wait without a time limit for completion and return the value."""
        return self._try_get(math.inf)

    def peek(self) -> Optional[T]:
        """The value if complete, otherwise ``None``; never waits."""
        return self._try_get(0)

    def try_get(self, duration: float) -> Optional[T]:
        """Wait up to ``duration`` seconds for completion; ``None`` if still incomplete."""
        return self._try_get(duration)

    def _try_get(self, duration: float) -> Any:
        if duration < 0:
            raise ValueError(f"duration must not be negative: {duration!r}")
        if duration != 0:
            deadline = Deadline.lazy_after(duration)

            def step(cell: Cell[Any]) -> Directive:
                if cell.value is _INCOMPLETE:
                    return Directive.wait(deadline.remaining())
                return Directive.RETURN

            self._monitor.enter(step)
        with self._monitor.lock() as cell:
            value = cell.value
        return None if value is _INCOMPLETE else value

    def into_inner(self) -> Optional[T]:
        """The completed value, or ``None`` if incomplete."""
        value = self._monitor.into_inner()
        return None if value is _INCOMPLETE else value

    def __repr__(self) -> str:
        return f"Completable({self._monitor!r})"