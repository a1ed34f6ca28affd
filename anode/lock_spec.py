"""A uniform interface over locks, as exercised by the lock benchmarks."""

from __future__ import annotations

import abc
import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from anode.monitor import Cell

T = TypeVar("T")


class WriteGuard(Generic[T]):
    """Exclusive access to a lock's value until released.

    Usable as a context manager, which releases the guard on exit.
    """

    __slots__ = ("_cell", "_unlock", "_held")

    def __init__(self, cell: Cell[T], unlock: Callable[[], None]) -> None:
        self._cell = cell
        self._unlock = unlock
        self._held = True

    def _check(self) -> None:
        if not self._held:
            raise RuntimeError("guard has been released")

    @property
    def value(self) -> T:
        self._check()
        return self._cell.value

    @value.setter
    def value(self, new: T) -> None:
        self._check()
        self._cell.value = new

    def release(self) -> None:
        """Give up the lock; the guard may not be used afterwards."""
        self._check()
        self._held = False
        self._unlock()

    def __enter__(self) -> WriteGuard[T]:
        return self

    def __exit__(self, *args: Any) -> None:
        if self._held:
            self.release()


@dataclass(frozen=True)
class UpgradeOutcome:
    """Result of an upgrade attempt: a write guard if upgraded, else the read guard."""

    guard: Any
    is_upgraded: bool

    def into_upgraded(self) -> Any:
        """The write guard if the upgrade succeeded, otherwise ``None``."""
        return self.guard if self.is_upgraded else None


class LockSpec(abc.ABC, Generic[T]):
    """A lock around a value, constructed as ``Lock(value)``.

    A duration of ``math.inf`` waits as long as needed; other durations may be
    treated as a single attempt. Operations a lock does not support raise
    ``TypeError``, and the ``supports_*`` flags tell which those are.
    """

    supports_read: ClassVar[bool] = False
    supports_downgrade: ClassVar[bool] = False
    supports_upgrade: ClassVar[bool] = False

    @abc.abstractmethod
    def try_read(self, duration: float) -> Optional[Any]:
        """A shared guard, or ``None`` if it could not be had in time."""

    @abc.abstractmethod
    def try_write(self, duration: float) -> Optional[WriteGuard[T]]:
        """An exclusive guard, or ``None`` if it could not be had in time."""

    @abc.abstractmethod
    def downgrade(self, guard: WriteGuard[T]) -> Any:
        """Turn an exclusive guard into a shared one."""

    @abc.abstractmethod
    def try_upgrade(self, guard: Any, duration: float) -> UpgradeOutcome:
        """Try to turn a shared guard into an exclusive one."""


class MutexSpec(LockSpec[T]):
    """A plain mutual-exclusion lock: writes only, no read, downgrade or upgrade."""

    def __init__(self, value: T) -> None:
        self._cell: Cell[T] = Cell(value)
        self._lock = threading.Lock()

    def try_read(self, duration: float) -> Optional[Any]:
        raise TypeError("MutexSpec does not support shared reads")

    def try_write(self, duration: float) -> Optional[WriteGuard[T]]:
        acquired = self._lock.acquire(blocking=math.isinf(duration))
        if not acquired:
            return None
        return WriteGuard(self._cell, self._lock.release)

    def downgrade(self, guard: WriteGuard[T]) -> Any:
        raise TypeError("MutexSpec does not support downgrading")

    def try_upgrade(self, guard: Any, duration: float) -> UpgradeOutcome:
        raise TypeError("MutexSpec does not support upgrading")