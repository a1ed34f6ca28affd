"""Command that benchmarks the thread pool's task throughput."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from anode.args import UsageError, parse, usage
from anode.exec_harness import ExtendedOptions, Options, header, run, separator
from anode.executor import Queue, ThreadPool

NAMES = ["workers", "duration"]


def _run(name: str, pool: ThreadPool, opts: Options) -> None:
    result = run(pool, opts, ExtendedOptions())
    print(f"|{name:<70}|{result}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the benchmark for every worker count and duration given."""
    try:
        ranges = parse(NAMES, argv)
    except UsageError as err:
        if err.message:
            print(err.message)
        print(usage(NAMES))
        return 1

    for workers in ranges[0]:
        for duration in ranges[1]:
            opts = Options(duration=float(duration))
            print(separator())
            print(opts)
            print(header())
            for queue in (Queue.bounded(100_000), Queue.unbounded()):
                with ThreadPool(workers, queue) as pool:
                    name = f"anode.executor.ThreadPool(workers: {workers}, queue: {queue!r})"
                    _run(name, pool, opts)
    print(separator())
    return 0


if __name__ == "__main__":
    sys.exit(main())