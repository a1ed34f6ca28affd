"""Command that benchmarks readers-writer locks under mixed read and write load."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from anode.args import ArgRange, UsageError, parse, usage
from anode.pl_harness import MutexLock, run_benchmark_iterations

NAMES = [
    "numWriterThreads",
    "numReaderThreads",
    "workPerCriticalSection",
    "workBetweenCriticalSections",
    "secondsPerTest",
    "testIterations",
]

LOCKS = [MutexLock]


@dataclass
class _Announcer:
    ranges: list[ArgRange]
    first: bool = True

    def run_all(
        self,
        num_writer_threads: int,
        num_reader_threads: int,
        work_per_critical_section: int,
        work_between_critical_sections: int,
        seconds_per_test: int,
        test_iterations: int,
    ) -> None:
        if num_writer_threads == 0 and num_reader_threads == 0:
            return
        ranges = self.ranges
        if self.first or not ranges[0].is_single() or not ranges[1].is_single():
            print(
                f"- Running with {num_writer_threads} writer threads "
                f"and {num_reader_threads} reader threads"
            )
        if self.first or not ranges[2].is_single() or not ranges[3].is_single():
            print(
                f"- {work_per_critical_section} iterations inside lock, "
                f"{work_between_critical_sections} iterations outside lock"
            )
        if self.first or not ranges[4].is_single():
            print(f"- {seconds_per_test} seconds per test")
        self.first = False

        for lock_type in LOCKS:
            run_benchmark_iterations(
                lock_type,
                num_writer_threads,
                num_reader_threads,
                work_per_critical_section,
                work_between_critical_sections,
                float(seconds_per_test),
                test_iterations,
            )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run every lock for each combination of the given parameters."""
    try:
        ranges = parse(NAMES, argv)
    except UsageError as err:
        if err.message:
            print(err.message)
        print(usage(NAMES))
        return 1

    announcer = _Announcer(ranges)
    for writers in ranges[0]:
        for readers in ranges[1]:
            for inside in ranges[2]:
                for between in ranges[3]:
                    for seconds in ranges[4]:
                        for iterations in ranges[5]:
                            announcer.run_all(
                                writers, readers, inside, between, seconds, iterations
                            )
    return 0


if __name__ == "__main__":
    sys.exit(main())