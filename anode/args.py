"""Command-line arguments given as single values or inclusive ranges."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

_NUMBER = re.compile(r"\+?[0-9]+")
_USIZE_MAX = 2**64 - 1


class UsageError(Exception):
    """Raised when the arguments do not fit; ``message`` may be ``None``."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "usage error")
        self.message = message


@dataclass(frozen=True)
class ArgRange:
    """The values ``start, start + step, ...`` up to and including ``limit``."""

    start: int
    limit: int
    step: int = 1

    def is_single(self) -> bool:
        return self.start + self.step > self.limit

    def __iter__(self) -> Iterator[int]:
        current = self.start
        while current <= self.limit:
            yield current
            current += self.step


def usage(names: Sequence[str], prog: Optional[str] = None) -> str:
    """The usage text for a command taking the named arguments."""
    if prog is None:
        prog = sys.argv[0] if sys.argv else ""
    return (
        f"Usage: {prog} {' '.join(names)}\n"
        "Each argument can be a single value or a range in the form start:end or "
        "start:end:step"
    )


def _parse_num(name: str, value: str) -> int:
    if _NUMBER.fullmatch(value) is None or int(value) > _USIZE_MAX:
        raise UsageError(f"Invalid value for {name}: {value}")
    return int(value)


def parse_one(names: Sequence[str], name: str, value: str) -> ArgRange:
    """Parse ``value`` as ``n``, ``start:end`` or ``start:end:step``."""
    components = value.split(":")
    if len(components) == 1:
        single = _parse_num(name, components[0])
        return ArgRange(single, single, 1)
    if len(components) in (2, 3):
        start = _parse_num(name, components[0])
        end = _parse_num(name, components[1])
        step = _parse_num(name, components[2]) if len(components) == 3 else 1
        if start > end:
            raise UsageError(f"Invalid range for {name}: {value}")
        return ArgRange(start, end, step)
    raise UsageError(f"Invalid value for {name}: {value}")


def parse(names: Sequence[str], argv: Optional[Sequence[str]] = None) -> list[ArgRange]:
    """Parse one range per name from ``argv`` (program name excluded)."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise UsageError()
    if len(args) != len(names):
        raise UsageError(
            f"Invalid number of arguments (expected {len(names)}, got {len(args)})"
        )
    return [parse_one(names, name, value) for name, value in zip(names, args)]