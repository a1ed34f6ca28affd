"""Exponential backoff: spin, then yield, then sleep for growing periods."""

from __future__ import annotations

import enum
import random
import time
from dataclasses import dataclass
from typing import Iterator, Protocol

from anode.inf_iterator import U64_MAX

_MIN_NONZERO = 1e-9


def nonzero_duration(duration: float) -> float:
    """Return ``duration`` after checking that it is strictly positive."""
    if not duration > 0:
        raise ValueError(f"duration must be greater than zero: {duration!r}")
    return duration


class _Random(Protocol):
    def random(self) -> float: ...


class ActionKind(enum.Enum):
    NOP = "nop"
    YIELD = "yield"
    SLEEP = "sleep"


@dataclass(frozen=True)
class ExpBackoffAction:
    """One step of a backoff sequence."""

    kind: ActionKind
    duration: float | None = None

    @staticmethod
    def nop() -> ExpBackoffAction:
        return _NOP

    @staticmethod
    def yield_() -> ExpBackoffAction:
        return _YIELD

    @staticmethod
    def sleep(duration: float) -> ExpBackoffAction:
        return ExpBackoffAction(ActionKind.SLEEP, duration)

    def act(self, rng: _Random | None = None) -> None:
        """Carry out the action; a sleep lasts a random time below its duration."""
        if self.kind is ActionKind.NOP:
            return
        if self.kind is ActionKind.YIELD:
            time.sleep(0)
            return
        source = random if rng is None else rng
        time.sleep(source.random() * self.duration)


_NOP = ExpBackoffAction(ActionKind.NOP)
_YIELD = ExpBackoffAction(ActionKind.YIELD)


@dataclass
class ExpBackoff:
    """Backoff settings; iterating yields an endless sequence of actions."""

    spin_iters: int
    yield_iters: int
    min_sleep: float
    max_sleep: float

    def __post_init__(self) -> None:
        nonzero_duration(self.min_sleep)
        nonzero_duration(self.max_sleep)

    @classmethod
    def spinny(cls) -> ExpBackoff:
        return cls(U64_MAX, 0, _MIN_NONZERO, _MIN_NONZERO)

    @classmethod
    def yieldy(cls) -> ExpBackoff:
        return cls(0, U64_MAX, _MIN_NONZERO, _MIN_NONZERO)

    @classmethod
    def sleepy(cls) -> ExpBackoff:
        return cls(0, 0, 100e-6, 10e-3)

    def __iter__(self) -> Iterator[ExpBackoffAction]:
        spin_limit = self.spin_iters
        yield_limit = min(self.spin_iters + self.yield_iters, U64_MAX)
        max_sleep = self.max_sleep
        current_sleep = self.min_sleep
        iterations = 0
        while True:
            iterations += 1
            if iterations <= spin_limit:
                yield _NOP
            elif iterations <= yield_limit:
                yield _YIELD
            else:
                action = ExpBackoffAction.sleep(current_sleep)
                current_sleep = min(current_sleep * 2, max_sleep)
                yield action