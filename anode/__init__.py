"""Concurrency building blocks (deadlines, backoff, poison-aware cells, monitors,
completables and a thread pool) together with lock and executor benchmarks."""

__version__ = "0.1.0"