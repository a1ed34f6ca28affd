import threading

import pytest

from anode.completable import Completable, Outcome

SHORT_WAIT = 0.01


def test_complete_later():
    comp = Completable()
    assert not comp.is_complete()

    assert comp.complete(42) is None
    assert comp.is_complete()
    assert comp.get() == 42
    assert comp.peek() == 42
    assert comp.try_get(SHORT_WAIT) == 42

    assert comp.complete(69) == 69
    assert comp.is_complete()
    assert comp.peek() == 42

    assert comp.into_inner() == 42


def test_complete_at_init():
    comp = Completable(42)
    assert comp.is_complete()
    assert comp.get() == 42
    assert comp.peek() == 42
    assert comp.try_get(SHORT_WAIT) == 42

    assert comp.complete(69) == 69
    assert comp.is_complete()
    assert comp.peek() == 42

    assert comp.into_inner() == 42


def test_await_complete():
    comp = Completable()
    go = threading.Barrier(2, timeout=10)
    results = []

    def other():
        go.wait()
        results.append(comp.complete(42))
        results.append(comp.complete(69))
        results.append(comp.get())

    t_2 = threading.Thread(target=other)
    t_2.start()

    assert comp.try_get(SHORT_WAIT) is None
    go.wait()

    assert comp.get() == 42
    assert comp.is_complete()
    assert comp.peek() == 42
    t_2.join(10)
    assert results == [None, 69, 42]


def test_complete_exclusive():
    comp = Completable()
    calls = []

    def make(value):
        def f():
            calls.append(value)
            return value

        return f

    assert comp.complete_exclusive(make(42)) is True
    assert comp.get() == 42
    assert calls == [42]

    assert comp.complete_exclusive(make(69)) is False
    assert comp.get() == 42
    assert calls == [42]


def test_incomplete_complete():
    comp = Completable()
    assert comp.complete("done") is None
    assert comp.peek() == "done"


def test_incomplete_is_complete():
    assert Completable().is_complete() is False


def test_incomplete_try_get_zero():
    assert Completable().try_get(0) is None


def test_incomplete_into_inner():
    assert Completable().into_inner() is None


def test_complete_complete_returns_rejected_value():
    comp = Completable("first")
    assert comp.complete("second") == "second"
    assert comp.get() == "first"


def test_negative_duration_rejected():
    with pytest.raises(ValueError):
        Completable().try_get(-1)


def test_waiter_woken_by_exclusive_completion():
    comp = Completable()
    seen = []
    waiter = threading.Thread(target=lambda: seen.append(comp.get()))
    waiter.start()
    assert comp.complete_exclusive(lambda: 7) is True
    waiter.join(10)
    assert seen == [7]


def test_outcome_default_is_abort():
    assert Outcome() == Outcome.abort()
    assert Outcome().is_abort()
    assert not Outcome().is_success()


def test_outcome_success():
    outcome = Outcome.success(5)
    assert outcome.is_success()
    assert not outcome.is_abort()
    assert outcome.into_option() == 5
    assert outcome == Outcome.success(5)
    assert outcome != Outcome.success(6)


def test_outcome_abort_into_option():
    assert Outcome.abort().into_option() is None