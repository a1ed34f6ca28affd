"""A value that becomes poisoned when a mutation is interrupted by an exception."""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")
I = TypeVar("I")


class PoisonedError(Exception, Generic[I]):
    """Raised on access to a poisoned value; carries what would have been returned."""

    def __init__(self, inner: I) -> None:
        super().__init__("value is poisoned")
        self._inner = inner

    def into_inner(self) -> I:
        return self._inner


class MutGuard(Generic[T]):
    """Mutable access to a chalice's value.

    Used as a context manager, an exception escaping the block poisons the chalice.
    """

    __slots__ = ("_chalice",)

    def __init__(self, chalice: Chalice[T]) -> None:
        self._chalice = chalice

    @property
    def value(self) -> T:
        return self._chalice._inner

    @value.setter
    def value(self, new: T) -> None:
        self._chalice._inner = new

    def is_poisoned(self) -> bool:
        return self._chalice.is_poisoned()

    def clear_poison(self) -> None:
        self._chalice.clear_poison()

    def __enter__(self) -> MutGuard[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self._chalice._poisoned = True
        return False


class Chalice(Generic[T]):
    """Holds a value together with a poison flag."""

    __slots__ = ("_inner", "_poisoned")

    def __init__(self, value: T) -> None:
        self._inner = value
        self._poisoned = False

    def is_poisoned(self) -> bool:
        return self._poisoned

    def clear_poison(self) -> None:
        self._poisoned = False

    def borrow(self, ignore_poison: bool = False) -> T:
        """Return the value; raise ``PoisonedError`` if poisoned, unless ignored."""
        if self._poisoned and not ignore_poison:
            raise PoisonedError(self._inner)
        return self._inner

    def borrow_mut(self, ignore_poison: bool = False) -> MutGuard[T]:
        """Return a guard for mutation; raise ``PoisonedError`` if poisoned, unless ignored."""
        guard = MutGuard(self)
        if self._poisoned and not ignore_poison:
            raise PoisonedError(guard)
        return guard

    def __repr__(self) -> str:
        return f"Chalice(poisoned={self._poisoned}, inner={self._inner!r})"