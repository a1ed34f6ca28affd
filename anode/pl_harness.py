"""Readers-writer lock benchmark: writers and readers doing floating-point work."""

from __future__ import annotations

import abc
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, ClassVar, Generic, TypeVar

from anode.monitor import Cell

T = TypeVar("T")
R = TypeVar("R")


class RwLock(abc.ABC, Generic[T]):
    """A lock around a value, constructed as ``Lock(value)``.

    ``read`` hands the value to its function; ``write`` hands a ``Cell`` whose
    ``value`` may be replaced. Both return what the function returns.
    """

    name: ClassVar[str] = "RwLock"

    @abc.abstractmethod
    def read(self, f: Callable[[T], R]) -> R:
        """Apply ``f`` to the value under shared access."""

    @abc.abstractmethod
    def write(self, f: Callable[[Cell[T]], R]) -> R:
        """Apply ``f`` to the value's cell under exclusive access."""


class MutexLock(RwLock[T]):
    """A lock that gives every reader and writer exclusive access."""

    name: ClassVar[str] = "anode.pl_harness.MutexLock"

    def __init__(self, value: T) -> None:
        self._cell: Cell[T] = Cell(value)
        self._lock = threading.Lock()

    def read(self, f: Callable[[T], R]) -> R:
        with self._lock:
            return f(self._cell.value)

    def write(self, f: Callable[[Cell[T]], R]) -> R:
        with self._lock:
            return f(self._cell)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def run_benchmark(
    lock_type: type,
    num_writer_threads: int,
    num_reader_threads: int,
    work_per_critical_section: int,
    work_between_critical_sections: int,
    seconds_per_test: float,
) -> tuple[list[int], list[int]]:
    """Run one test; return the iteration counts of each writer and each reader."""
    total = num_writer_threads + num_reader_threads
    lock = lock_type(0.0)
    keep_going = threading.Event()
    keep_going.set()
    barrier = threading.Barrier(total) if total > 0 else None

    def writer() -> int:
        local_value = 0.0
        value = 0.0
        iterations = 0

        def critical(cell: Cell[float]) -> None:
            nonlocal value
            for _ in range(work_per_critical_section):
                cell.value += value
                cell.value *= 1.01
                value = cell.value

        barrier.wait()
        while keep_going.is_set():
            lock.write(critical)
            for _ in range(work_between_critical_sections):
                local_value += value
                local_value *= 1.01
                value = local_value
            iterations += 1
        return iterations

    def reader() -> int:
        local_value = 0.0
        value = 0.0
        iterations = 0

        def critical(shared_value: float) -> None:
            nonlocal local_value, value
            for _ in range(work_per_critical_section):
                local_value += value
                local_value *= shared_value
                value = local_value

        barrier.wait()
        while keep_going.is_set():
            lock.read(critical)
            for _ in range(work_between_critical_sections):
                local_value += value
                local_value *= 1.01
                value = local_value
            iterations += 1
        return iterations

    if total == 0:
        time.sleep(seconds_per_test)
        return [], []

    with ThreadPoolExecutor(max_workers=total) as pool:
        writers = [pool.submit(writer) for _ in range(num_writer_threads)]
        readers = [pool.submit(reader) for _ in range(num_reader_threads)]
        time.sleep(seconds_per_test)
        keep_going.clear()
        run_writers = [future.result() for future in writers]
        run_readers = [future.result() for future in readers]
    return run_writers, run_readers


def run_benchmark_iterations(
    lock_type: type,
    num_writer_threads: int,
    num_reader_threads: int,
    work_per_critical_section: int,
    work_between_critical_sections: int,
    seconds_per_test: float,
    test_iterations: int,
) -> tuple[float, float]:
    """Repeat the test, print the mean write and read rates, and return them in kHz."""
    writers: list[int] = []
    readers: list[int] = []
    for _ in range(test_iterations):
        run_writers, run_readers = run_benchmark(
            lock_type,
            num_writer_threads,
            num_reader_threads,
            work_per_critical_section,
            work_between_critical_sections,
            seconds_per_test,
        )
        writers.extend(run_writers)
        readers.extend(run_readers)

    total_writers = _ratio(float(sum(writers)), float(test_iterations))
    total_readers = _ratio(float(sum(readers)), float(test_iterations))
    write_khz = _ratio(total_writers, seconds_per_test) / 1000.0
    read_khz = _ratio(total_readers, seconds_per_test) / 1000.0
    print(
        f"{lock_type.name:<46} - [write] {write_khz:10.3f} kHz"
        f"          [read] {read_khz:10.3f} kHz"
    )
    return write_khz, read_khz