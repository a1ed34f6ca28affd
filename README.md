# anode

Small concurrency building blocks for threaded Python code, with no
dependencies outside the standard library, and three command-line benchmarks
for locks and executors.

Durations are given in seconds throughout; `math.inf` means "no time limit".

## Modules

| Module | What it gives you |
|---|---|
| `anode.deadline` | `Deadline`: `Deadline.after(d)` starts the clock now, `Deadline.lazy_after(d)` on the first `remaining()` call. `remaining()` never drops below zero. |
| `anode.inf_iterator` | `RangeCycle(start, stop, item=None)`: an endless iterator over `start <= n < stop`, beginning at `item`; `successor(n)` for unsigned 64-bit integers. |
| `anode.backoff` | `ExpBackoff(spin_iters, yield_iters, min_sleep, max_sleep)`: iterating it yields `ExpBackoffAction`s: no-ops, then yields, then sleeps that double up to `max_sleep`. Presets `spinny()`, `yieldy()`, `sleepy()`. `ExpBackoffAction.act(rng=None)` carries an action out; a sleep lasts a random time below its duration. `nonzero_duration(d)` rejects durations that are not positive. |
| `anode.chalice` | `Chalice`: a value that becomes poisoned if an exception escapes a `borrow_mut()` block. |
| `anode.monitor` | `SpeculativeMonitor`: guarded state with wait and notify, driven by a callback that returns a `Directive`. |
| `anode.completable` | `Completable`: a write-once value other threads can wait for; `Outcome` for success or abort. |
| `anode.executor` | `ThreadPool` with a bounded or unbounded `Queue`, and `ThreadPoolSubmitter` to hand it work. |
| `anode.lock_spec` | `LockSpec`, the interface the lock benchmark drives, with `MutexSpec`, `WriteGuard` and `UpgradeOutcome`. |
| `anode.rate`, `anode.args` | `Rate` formatting for benchmark output, and `parse`/`ArgRange` for the benchmarks' range arguments. |
| `anode.exec_harness`, `anode.quad_harness`, `anode.pl_harness` | The benchmark runners behind the commands below. |

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Quick tour

### Completable

```python
from anode.completable import Completable

answer = Completable()
assert not answer.is_complete()

assert answer.complete(42) is None   # stored
assert answer.complete(69) == 69     # already complete: the value comes back
assert answer.get() == 42            # waits until complete
```

`Completable(value)` starts out complete. `complete_exclusive(f)` calls `f`
only if the completable is still empty, and returns whether it did.
`peek()` looks without waiting and `try_get(duration)` waits at most
`duration`; both return `None` while incomplete, so `None` is best not used
as a completed value.

### Monitor

```python
import math
from anode.monitor import Directive, SpeculativeMonitor

ready = SpeculativeMonitor(False)

# in a waiting thread
ready.enter(lambda cell: Directive.RETURN if cell.value else Directive.wait(math.inf))

# in the signalling thread
def raise_flag(cell):
    cell.value = True
    return Directive.NOTIFY_ALL

ready.enter(raise_flag)
```

The callback receives a `Cell` whose `value` it may read or replace, and may
be called more than once. `lock()` is a context manager yielding the cell,
`alter(f)` and `compute(f)` apply a function once, and `num_waiting()` counts
threads parked in `enter`.

### Thread pool

```python
from anode.executor import Queue, ThreadPool

with ThreadPool(4, Queue.unbounded()) as pool:
    submitter = pool.submitter()
    pending = submitter.submit(lambda: 6 * 7)
    outcome = pending.get()
    assert outcome.is_success()
    assert outcome.into_option() == 42
```

Every submission returns a `Completable` that will hold an `Outcome`. Leaving
the `with` block calls `shutdown()`, which does not wait for the workers:
tasks still queued, and tasks submitted afterwards, complete with
`Outcome.abort()`, and `pool.submitter()` raises `RuntimeError`. A caller may
abort a task it no longer needs by completing its `Completable` with
`Outcome.abort()` first. With `Queue.bounded(size)`, `submit` waits for room
while `try_submit(f)` returns `None` when the queue is full.

### Chalice

```python
from anode.chalice import Chalice, PoisonedError

cell = Chalice(42)
try:
    with cell.borrow_mut() as guard:
        guard.value += 1
        raise RuntimeError("boom")
except RuntimeError:
    pass

assert cell.is_poisoned()
try:
    cell.borrow()
except PoisonedError as err:
    value = err.into_inner()   # 43
```

Pass `ignore_poison=True` to `borrow` or `borrow_mut` to get at the value
regardless, and call `clear_poison()` once the state is known to be sound.

## Benchmarks

Three commands are installed. Each argument is a single whole number or an
inclusive range written `start:end` or `start:end:step`; every combination is
run. Run a command without arguments to see its usage.

Executor throughput, for a bounded (100 000) and an unbounded queue
(`workers duration`):

```
anode-exec-bench 1:4 2
```

Readers, writers, downgraders and upgraders contending for one lock
(`readers writers downgraders upgraders duration`):

```
anode-quad-bench 4 4 2 2 1
```

Writer and reader throughput with configurable work inside and outside the
critical section (`numWriterThreads numReaderThreads workPerCriticalSection
workBetweenCriticalSections secondsPerTest testIterations`):

```
anode-pl-bench 0:4 0:4 1 1 1 1
```

## What it does not do

The package has no readers-writer lock and no spin mutex of its own. The
only lock the benchmarks measure is a plain mutex (`MutexSpec` in
`anode-quad-bench`, `MutexLock` in `anode-pl-bench`). `MutexSpec` supports
neither shared reads, downgrades nor upgrades, so `anode-quad-bench` runs only
its writers and reports `-` for the other columns. Any lock implementing
`LockSpec` or `RwLock` can be passed to the harness `run` functions directly.