"""Operation rates and their human-readable formatting."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

_SPEC = re.compile(r"(#)?(\d+)?")


@dataclass(frozen=True)
class Rate:
    """A rate in operations per second (hertz).

    Formatting picks the unit by magnitude; the ``#`` flag always uses kHz,
    and a width right-aligns the text, e.g. ``format(rate, "#20")``.
    """

    value: float

    def hz(self) -> float:
        return self.value

    def khz(self) -> float:
        return self.value / 1_000.0

    def mhz(self) -> float:
        return self.value / 1_000_000.0

    @staticmethod
    def rate(duration: float, ops: int) -> Rate:
        """The rate of ``ops`` operations carried out over ``duration`` seconds."""
        if duration == 0:
            return Rate(math.inf if ops else math.nan)
        return Rate(ops / duration)

    @staticmethod
    def maybe_rate(duration: float, ops: Optional[int]) -> Optional[Rate]:
        """Like ``rate``, but ``None`` when there is no operation count."""
        if ops is None:
            return None
        return Rate.rate(duration, ops)

    def __format__(self, spec: str) -> str:
        match = _SPEC.fullmatch(spec)
        if match is None:
            raise ValueError(f"invalid format specification for Rate: {spec!r}")
        alternate, width = match.groups()
        if alternate:
            text = f"{self.khz():.3f} kHz"
        elif self.value > 1_000_000.0:
            text = f"{self.mhz():.3f} MHz"
        elif self.value > 1_000.0:
            text = f"{self.khz():.3f} kHz"
        else:
            text = f"{self.hz():.3f} Hz"
        if width:
            text = text.rjust(int(width))
        return text

    def __str__(self) -> str:
        return format(self, "")