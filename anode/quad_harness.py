"""Lock benchmark with four kinds of worker: readers, writers, downgraders and upgraders."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, TypeVar

from anode.exec_harness import format_duration
from anode.lock_spec import LockSpec
from anode.rate import Rate

A = TypeVar("A", bound="_Addable")


class _Addable(Protocol):
    def get(self) -> int: ...

    def add(self: A, amount: int) -> A: ...


@dataclass(frozen=True)
class IntValue:
    """A plain integer value."""

    value: int = 0

    @staticmethod
    def initial() -> IntValue:
        return IntValue(0)

    def get(self) -> int:
        return self.value

    def add(self, amount: int) -> IntValue:
        return IntValue(self.value + amount)


class BoxedInt:
    """An integer held in a separately allocated box."""

    __slots__ = ("_box",)

    def __init__(self, value: int) -> None:
        self._box = [value]

    @staticmethod
    def initial() -> BoxedInt:
        return BoxedInt(0)

    def get(self) -> int:
        return self._box[0]

    def add(self, amount: int) -> BoxedInt:
        return BoxedInt(self.get() + amount)

    def __repr__(self) -> str:
        return f"BoxedInt({self.get()})"


@dataclass(frozen=True)
class StrValue:
    """An integer kept as its decimal text."""

    text: str = "0"

    @staticmethod
    def initial() -> StrValue:
        return StrValue("0")

    def get(self) -> int:
        return int(self.text)

    def add(self, amount: int) -> StrValue:
        return StrValue(str(self.get() + amount))


@dataclass(frozen=True)
class Options:
    """Worker counts and the run time in seconds."""

    readers: int
    writers: int
    downgraders: int
    upgraders: int
    duration: float

    def __str__(self) -> str:
        rows = [
            ("readers", self.readers, "writers", self.writers),
            ("downgraders", self.downgraders, "upgraders", self.upgraders),
            ("duration", format_duration(self.duration), "", ""),
        ]
        return "\n".join(
            f"|{a:>45}|{str(b):>20}|{'':20}|{c:>20}|{str(d):>20}|" for a, b, c, d in rows
        )


@dataclass(frozen=True)
class ExtendedOptions:
    time_check_interval: int = 100
    read_timeout: float = math.inf
    write_timeout: float = math.inf
    upgrade_timeout: float = 0.0
    debug_locks: bool = False
    debug_exits: bool = False
    spin_inside_critical: int = 0
    spin_outside_critical: int = 0
    yields_inside_critical: int = 0
    yields_outside_critical: int = 0
    asserts_enabled: bool = True


def _khz(rate: Optional[Rate]) -> str:
    return "-" if rate is None else f"{rate.khz():.3f}"


@dataclass(frozen=True)
class BenchmarkResult:
    reads: Optional[int]
    writes: Optional[int]
    downgrades: Optional[int]
    upgrades: Optional[int]
    elapsed: float = field(default=0.0)

    def __str__(self) -> str:
        counts = (self.reads, self.writes, self.downgrades, self.upgrades)
        return "".join(
            f"{_khz(Rate.maybe_rate(self.elapsed, ops)):>20}|" for ops in counts
        )


def separator() -> str:
    return f"|{'':->45}|{'':->20}|{'':->20}|{'':->20}|{'':->20}|"


def header() -> str:
    return (
        f"|{'':45}|{'reads (kHz)':>20}|{'writes (kHz)':>20}"
        f"|{'downgrades (kHz)':>20}|{'upgrades (kHz)':>20}|"
    )


def _spin_a_while(iterations: int) -> None:
    val = 1
    for i in range(iterations):
        val += i
    assert val != 0


def _yield_a_while(yields: int) -> None:
    for _ in range(yields):
        time.sleep(0)


def _read_eventually(lock: LockSpec[Any], duration: float) -> Any:
    while (guard := lock.try_read(duration)) is None:
        pass
    return guard


def _write_eventually(lock: LockSpec[Any], duration: float) -> Any:
    while (guard := lock.try_write(duration)) is None:
        pass
    return guard


class _Worker:
    """A thread that records its return value or the exception it raised."""

    def __init__(self, target: Callable[[], Any]) -> None:
        self._target = target
        self.result: Any = None
        self.error: Optional[BaseException] = None
        self.thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        try:
            self.result = self._target()
        except BaseException as exc:  # reported to the caller after join
            self.error = exc

    def join(self) -> Any:
        self.thread.join()
        if self.error is not None:
            raise self.error
        return self.result


def run(
    value_type: Any,
    lock_type: type,
    opts: Options,
    ext_opts: Optional[ExtendedOptions] = None,
) -> BenchmarkResult:
    """Run all workers against one lock for ``opts.duration`` seconds."""
    ext = ext_opts if ext_opts is not None else ExtendedOptions()
    readers = opts.readers if lock_type.supports_read else 0
    writers = opts.writers
    downgraders = opts.downgraders if lock_type.supports_downgrade else 0
    upgraders = opts.upgraders if lock_type.supports_upgrade else 0
    total = readers + writers + downgraders + upgraders

    running = threading.Event()
    running.set()
    barrier = threading.Barrier(total) if total > 0 else None
    lock = lock_type(value_type.initial())
    interval = ext.time_check_interval

    def keep_going(iterations: int) -> bool:
        return iterations % interval != 0 or running.is_set()

    def outside_critical() -> None:
        _spin_a_while(ext.spin_outside_critical)
        _yield_a_while(ext.yields_outside_critical)

    def inside_critical() -> None:
        _spin_a_while(ext.spin_inside_critical)
        _yield_a_while(ext.yields_inside_critical)

    def debug(message: str) -> None:
        if ext.debug_locks:
            print(message)

    def check(role: str, i: int, last: int, current: int) -> None:
        if ext.asserts_enabled and current < last:
            raise AssertionError(f"error in {role} {i}: value went from {last} to {current}")

    def reader(i: int) -> int:
        barrier.wait()
        iterations = 0
        last_val = 0
        while keep_going(iterations):
            guard = _read_eventually(lock, ext.read_timeout)
            debug(f"reader {i} read-locked")
            inside_critical()
            current = guard.value.get()
            check("reader", i, last_val, current)
            last_val = current
            guard.release()
            debug(f"reader {i} read-unlocked")
            iterations += 1
            outside_critical()
        if ext.debug_exits:
            print(f"reader {i} exited")
        return iterations

    def writer(i: int) -> int:
        barrier.wait()
        iterations = 0
        while keep_going(iterations):
            guard = _write_eventually(lock, ext.write_timeout)
            debug(f"writer {i} write-locked")
            inside_critical()
            guard.value = guard.value.add(1)
            guard.release()
            debug(f"writer {i} write-unlocked")
            iterations += 1
            outside_critical()
        if ext.debug_exits:
            print(f"writer {i} exited")
        return iterations

    def downgrader(i: int) -> int:
        barrier.wait()
        iterations = 0
        last_val = 0
        while keep_going(iterations):
            guard = _write_eventually(lock, ext.write_timeout)
            debug(f"downgrader {i} write-locked")
            inside_critical()
            guard.value = guard.value.add(1)
            read_guard = lock.downgrade(guard)
            debug(f"downgrader {i} downgraded")
            current = read_guard.value.get()
            check("downgrader", i, last_val, current)
            last_val = current
            read_guard.release()
            debug(f"downgrader {i} read-unlocked")
            iterations += 1
            outside_critical()
        if ext.debug_exits:
            print(f"downgrader {i} exited")
        return iterations

    def upgrader(i: int) -> tuple[int, int]:
        barrier.wait()
        iterations = 0
        last_val = 0
        missed_upgrades = 0
        while keep_going(iterations):
            guard = _read_eventually(lock, ext.read_timeout)
            debug(f"upgrader {i} read-locked")
            inside_critical()
            current = guard.value.get()
            check("upgrader", i, last_val, current)
            last_val = current

            outcome = lock.try_upgrade(guard, ext.upgrade_timeout)
            if outcome.is_upgraded:
                write_guard = outcome.guard
                debug(f"upgrader {i} upgraded")
                inside_critical()
                write_guard.value = write_guard.value.add(1)
                write_guard.release()
                debug(f"upgrader {i} write-unlocked")
            else:
                debug(f"upgrader {i} upgrade timed out")
                outcome.guard.release()
                missed_upgrades += 1
                debug(f"upgrader {i} read-unlocked")
            iterations += 1
            outside_critical()
        if ext.debug_exits:
            print(f"upgrader {i} exited")
        return iterations, iterations - missed_upgrades

    def spawn(count: int, body: Callable[[int], Any]) -> list[_Worker]:
        workers = [_Worker(lambda i=i: body(i)) for i in range(count)]
        for worker in workers:
            worker.thread.start()
        return workers

    reader_threads = spawn(readers, reader)
    writer_threads = spawn(writers, writer)
    downgrader_threads = spawn(downgraders, downgrader)
    upgrader_threads = spawn(upgraders, upgrader)

    start = time.perf_counter()
    if total > 0:
        time.sleep(opts.duration)
        if ext.debug_exits:
            print("terminating threads")
    running.clear()

    reader_iterations = sum(w.join() for w in reader_threads)
    writer_iterations = sum(w.join() for w in writer_threads)
    downgrader_iterations = sum(w.join() for w in downgrader_threads)
    upgrader_results = [w.join() for w in upgrader_threads]
    upgrader_reads = sum(reads for reads, _ in upgrader_results)
    upgrader_upgrades = sum(upgrades for _, upgrades in upgrader_results)

    return BenchmarkResult(
        reads=reader_iterations + upgrader_reads if readers > 0 else None,
        writes=writer_iterations + downgrader_iterations if writers > 0 else None,
        downgrades=downgrader_iterations if downgraders > 0 else None,
        upgrades=upgrader_upgrades if upgraders > 0 else None,
        elapsed=time.perf_counter() - start,
    )