"""Throughput benchmark for executors: one thread submits tasks as fast as it can."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional

from anode.executor import Executor
from anode.rate import Rate


@dataclass(frozen=True)
class Options:
    """How long the load thread keeps submitting, in seconds."""

    duration: float

    def __str__(self) -> str:
        return f"|{'duration':>70}|{format_duration(self.duration):>20}|"


@dataclass(frozen=True)
class ExtendedOptions:
    time_check_interval: int = 1_000
    debug_exits: bool = False


@dataclass(frozen=True)
class BenchmarkResult:
    iterations: int
    elapsed: float

    def __str__(self) -> str:
        work_rate = Rate.rate(self.elapsed, self.iterations)
        return f"{work_rate.khz():.3f}".rjust(20) + "|"


def format_duration(duration: float) -> str:
    """Render seconds as ``10ms``, ``1.5s``, ``100µs`` or ``0ns``."""
    if duration < 0:
        raise ValueError(f"duration must not be negative: {duration!r}")
    nanos_total = round(duration * 1_000_000_000)
    secs, nanos = divmod(nanos_total, 1_000_000_000)
    if secs > 0:
        whole, frac, width, suffix = secs, nanos, 9, "s"
    elif nanos >= 1_000_000:
        whole, frac = divmod(nanos, 1_000_000)
        width, suffix = 6, "ms"
    elif nanos >= 1_000:
        whole, frac = divmod(nanos, 1_000)
        width, suffix = 3, "µs"
    else:
        whole, frac, width, suffix = nanos, 0, 0, "ns"
    digits = f"{frac:0{width}d}".rstrip("0") if width else ""
    return f"{whole}.{digits}{suffix}" if digits else f"{whole}{suffix}"


def separator() -> str:
    return f"|{'':->70}|{'':->20}|"


def header() -> str:
    return f"|{'':70}|{'rate (kHz)':>20}|"


class _Counter:
    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def increment(self) -> None:
        with self._cond:
            self._count += 1
            self._cond.notify_all()

    def wait_for(self, target: int) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._count == target)


def run(
    executor: Executor, opts: Options, ext_opts: Optional[ExtendedOptions] = None
) -> BenchmarkResult:
    """Submit tasks for ``opts.duration`` seconds and wait until all have run."""
    ext = ext_opts if ext_opts is not None else ExtendedOptions()
    interval = ext.time_check_interval
    running = threading.Event()
    running.set()
    completed = _Counter()
    submitter = executor.submitter()
    submitted: list[int] = []

    def load() -> None:
        iterations = 0
        while iterations % interval != 0 or running.is_set():
            submitter.submit(completed.increment)
            iterations += 1
        if ext.debug_exits:
            print(f"load thread exited, expect {iterations} iterations")
        submitted.append(iterations)

    start = time.perf_counter()
    load_thread = threading.Thread(target=load, daemon=True)
    load_thread.start()

    time.sleep(opts.duration)
    if ext.debug_exits:
        print("terminating threads")
    running.clear()
    load_thread.join()
    if not submitted:
        raise RuntimeError("load thread failed before finishing")

    iterations = submitted[0]
    completed.wait_for(iterations)
    return BenchmarkResult(iterations, time.perf_counter() - start)