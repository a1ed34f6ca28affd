import math

import pytest

from anode.monitor import Cell
from anode.pl_harness import MutexLock, RwLock, run_benchmark, run_benchmark_iterations


def test_rwlock_is_abstract():
    with pytest.raises(TypeError):
        RwLock(0.0)


def test_mutex_lock_read_returns_function_result():
    lock = MutexLock(2.5)
    assert lock.read(lambda v: v * 2) == 5.0


def test_mutex_lock_write_replaces_value():
    lock = MutexLock(1.0)

    def bump(cell: Cell[float]) -> str:
        cell.value += 1.0
        return "done"

    assert lock.write(bump) == "done"
    assert lock.read(lambda v: v) == 2.0


def test_run_benchmark_counts_per_thread():
    writers, readers = run_benchmark(MutexLock, 2, 2, 1, 1, 0.1)
    assert len(writers) == 2
    assert len(readers) == 2
    assert all(count > 0 for count in writers + readers)


def test_run_benchmark_without_threads():
    assert run_benchmark(MutexLock, 0, 0, 1, 1, 0.0) == ([], [])


def test_run_benchmark_only_readers():
    writers, readers = run_benchmark(MutexLock, 0, 3, 1, 1, 0.05)
    assert writers == []
    assert len(readers) == 3


def test_run_benchmark_iterations_prints_rates(capsys):
    write_khz, read_khz = run_benchmark_iterations(MutexLock, 2, 2, 1, 1, 0.1, 1)
    out = capsys.readouterr().out
    assert MutexLock.name in out
    assert "[write]" in out and "[read]" in out
    assert write_khz > 0
    assert read_khz > 0


def test_run_benchmark_iterations_zero_iterations_gives_nan(capsys):
    write_khz, read_khz = run_benchmark_iterations(MutexLock, 1, 1, 1, 1, 0.1, 0)
    assert math.isnan(write_khz)
    assert math.isnan(read_khz)
    assert "nan" in capsys.readouterr().out