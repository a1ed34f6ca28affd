"""A monitor: shared state guarded by a lock, with wait and notify directives."""

from __future__ import annotations

import enum
import math
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, TypeVar

S = TypeVar("S")
T = TypeVar("T")


class DirectiveKind(enum.Enum):
    RETURN = "return"
    WAIT = "wait"
    NOTIFY_ONE = "notify_one"
    NOTIFY_ALL = "notify_all"


@dataclass(frozen=True)
class Directive:
    """What a monitor should do after its closure has looked at the state.

    Use ``Directive.RETURN``, ``Directive.NOTIFY_ONE``, ``Directive.NOTIFY_ALL``
    or ``Directive.wait(seconds)``; ``math.inf`` waits without a time limit.
    """

    kind: DirectiveKind
    duration: float = 0.0

    @staticmethod
    def wait(duration: float) -> Directive:
        if duration < 0:
            raise ValueError(f"duration must not be negative: {duration!r}")
        return Directive(DirectiveKind.WAIT, duration)


Directive.RETURN = Directive(DirectiveKind.RETURN)
Directive.NOTIFY_ONE = Directive(DirectiveKind.NOTIFY_ONE)
Directive.NOTIFY_ALL = Directive(DirectiveKind.NOTIFY_ALL)


@dataclass
class Cell(Generic[S]):
    """A mutable box around the monitor's state."""

    value: S


def _timeout(duration: float) -> float | None:
    if math.isinf(duration):
        return None
    return min(duration, threading.TIMEOUT_MAX)


class SpeculativeMonitor(Generic[S]):
    """Monitor that evaluates its closure under a light lock first, taking the
    heavier wait lock only when a wait or notification is really needed."""

    def __init__(self, value: S = None) -> None:
        self._cell: Cell[S] = Cell(value)
        self._waiting = 0
        self._state_lock = threading.Lock()
        self._mutex = threading.Lock()
        self._cond = threading.Condition(self._mutex)

    def enter(self, f: Callable[[Cell[S]], Directive]) -> None:
        """Repeatedly apply ``f`` to the state, acting on each directive it returns.

        ``f`` may be called more than once, so it must tolerate re-evaluation.
        """
        holding_mutex = False
        woken = False
        try:
            while True:
                with self._state_lock:
                    if woken:
                        woken = False
                        self._waiting -= 1
                    directive = f(self._cell)
                    kind = directive.kind
                    if kind is DirectiveKind.RETURN:
                        return
                    if kind is DirectiveKind.WAIT:
                        if directive.duration <= 0:
                            return
                        if holding_mutex:
                            self._waiting += 1
                    elif self._waiting == 0:
                        return

                if not holding_mutex:
                    self._mutex.acquire()
                    holding_mutex = True
                    continue

                if kind is DirectiveKind.WAIT:
                    notified = self._cond.wait(_timeout(directive.duration))
                    if not notified:
                        with self._state_lock:
                            self._waiting -= 1
                        return
                    woken = True
                else:
                    if kind is DirectiveKind.NOTIFY_ONE:
                        self._cond.notify()
                    else:
                        self._cond.notify_all()
                    return
        finally:
            if holding_mutex:
                self._mutex.release()

    @contextmanager
    def lock(self) -> Iterator[Cell[S]]:
        """Hold the state lock for the duration of the block, yielding the state cell."""
        with self._state_lock:
            yield self._cell

    def alter(self, f: Callable[[Cell[S]], Any]) -> None:
        """Apply ``f`` once to the state cell, without waiting or notifying."""
        with self.lock() as cell:
            f(cell)

    def compute(self, f: Callable[[S], T]) -> T:
        """Return ``f`` applied once to the current state."""
        with self.lock() as cell:
            return f(cell.value)

    def num_waiting(self) -> int:
        """Number of threads currently waiting inside ``enter``."""
        with self._state_lock:
            return self._waiting

    def into_inner(self) -> S:
        """The state held by this monitor."""
        return self._cell.value

    def __repr__(self) -> str:
        if self._state_lock.acquire(blocking=False):
            try:
                data = repr(self._cell.value)
            finally:
                self._state_lock.release()
        else:
            data = "<locked>"
        return f"SpeculativeMonitor(data={data}, ...)"