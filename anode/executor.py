"""Executors that run submitted callables on a pool of worker threads."""

from __future__ import annotations

import abc
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from anode.completable import Completable, Outcome

G = TypeVar("G")

SubmissionOutcome = Completable  # holds an Outcome once the task has run or aborted


@dataclass(frozen=True)
class Queue:
    """Task queue sizing: ``bound`` is ``None`` for an unbounded queue."""

    bound: Optional[int] = None

    @staticmethod
    def unbounded() -> Queue:
        return Queue(None)

    @staticmethod
    def bounded(size: int) -> Queue:
        if size < 1:
            raise ValueError(f"queue bound must be at least 1: {size!r}")
        return Queue(size)

    def __repr__(self) -> str:
        return "Unbounded" if self.bound is None else f"Bounded({self.bound})"


class Submitter(abc.ABC):
    """Hands tasks to an executor."""

    @abc.abstractmethod
    def submit(self, f: Callable[[], G]) -> Completable[Outcome[G]]:
        """Enqueue ``f``, waiting for queue capacity if needed."""

    @abc.abstractmethod
    def try_submit(self, f: Callable[[], G]) -> Optional[Completable[Outcome[G]]]:
        """Enqueue ``f`` if there is capacity now; ``None`` otherwise."""


class Executor(abc.ABC):
    """Something that runs tasks handed over by its submitters."""

    @abc.abstractmethod
    def submitter(self) -> Submitter:
        """A new submitter feeding this executor."""


class _Closed(Exception):
    pass


class _Channel:
    """A FIFO of tasks with an optional bound, closable by its owner."""

    def __init__(self, bound: Optional[int]) -> None:
        self._items: deque[Callable[[], None]] = deque()
        self._bound = bound
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def _full(self) -> bool:
        return self._bound is not None and len(self._items) >= self._bound

    def send(self, task: Callable[[], None]) -> None:
        with self._lock:
            while self._open and self._full():
                self._not_full.wait()
            if not self._open:
                raise _Closed
            self._items.append(task)
            self._not_empty.notify()

    def try_send(self, task: Callable[[], None]) -> bool:
        with self._lock:
            if not self._open:
                raise _Closed
            if self._full():
                return False
            self._items.append(task)
            self._not_empty.notify()
            return True

    def recv(self) -> Optional[Callable[[], None]]:
        """Next task, or ``None`` once the channel is closed and drained."""
        with self._lock:
            while not self._items and self._open:
                self._not_empty.wait()
            if not self._items:
                return None
            task = self._items.popleft()
            self._not_full.notify()
            return task

    def close(self) -> None:
        with self._lock:
            self._open = False
            self._not_empty.notify_all()
            self._not_full.notify_all()


def _prepare_task(
    channel: _Channel, f: Callable[[], G]
) -> tuple[Completable[Outcome[G]], Callable[[], None]]:
    comp: Completable[Outcome[G]] = Completable()

    def task() -> None:
        outcome = Outcome.success(f()) if channel.is_open else Outcome.abort()
        comp.complete(outcome)

    return comp, task


def _aborted() -> Completable[Outcome[Any]]:
    return Completable(Outcome.abort())


class ThreadPoolSubmitter(Submitter):
    """Submits tasks to a ``ThreadPool``; tasks submitted after shutdown abort."""

    __slots__ = ("_channel",)

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    def submit(self, f: Callable[[], G]) -> Completable[Outcome[G]]:
        comp, task = _prepare_task(self._channel, f)
        try:
            self._channel.send(task)
        except _Closed:
            return _aborted()
        return comp

    def try_submit(self, f: Callable[[], G]) -> Optional[Completable[Outcome[G]]]:
        comp, task = _prepare_task(self._channel, f)
        try:
            enqueued = self._channel.try_send(task)
        except _Closed:
            return _aborted()
        return comp if enqueued else None


def _work(channel: _Channel) -> None:
    while (task := channel.recv()) is not None:
        task()


class ThreadPool(Executor):
    """A fixed number of worker threads draining a shared task queue.

    After ``shutdown`` the workers abort every task still queued and then exit;
    ``shutdown`` itself does not wait for them.
    """

    def __init__(self, threads: int, queue: Queue) -> None:
        if threads <= 0:
            raise ValueError(f"threads must be positive: {threads!r}")
        self._channel = _Channel(queue.bound)
        self._threads = [
            threading.Thread(target=_work, args=(self._channel,), daemon=True)
            for _ in range(threads)
        ]
        for thread in self._threads:
            thread.start()

    def submitter(self) -> ThreadPoolSubmitter:
        if not self._channel.is_open:
            raise RuntimeError("thread pool has been shut down")
        return ThreadPoolSubmitter(self._channel)

    def shutdown(self) -> None:
        """Stop the pool: pending and future tasks complete as aborted."""
        self._channel.close()

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()