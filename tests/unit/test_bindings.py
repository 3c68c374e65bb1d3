"""Tests for workspace binding cells."""

import threading
import time

import pytest

from revive.bindings import LiveBinding, MemoizedBinding, ValueBinding


def test_value_binding():
    binding = ValueBinding([1, 2])
    assert binding.resolve() == [1, 2]
    assert binding.kind == "value"


def test_memoized_reads_once():
    calls = []

    def loader():
        calls.append(1)
        return "value"

    binding = MemoizedBinding(loader)
    assert not binding.resolved
    assert calls == []

    for _ in range(5):
        assert binding.resolve() == "value"
    assert len(calls) == 1
    assert binding.resolved


def test_memoized_concurrent_first_access():
    calls = []
    n_threads = 8
    barrier = threading.Barrier(n_threads)

    def loader():
        calls.append(1)
        time.sleep(0.05)
        return "value"

    binding = MemoizedBinding(loader)
    results = []

    def access():
        barrier.wait()
        results.append(binding.resolve())

    threads = [threading.Thread(target=access) for _ in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert results == ["value"] * n_threads


def test_memoized_failure_is_not_memoized():
    attempts = []

    def loader():
        attempts.append(1)
        if len(attempts) == 1:
            raise OSError("transient")
        return "value"

    binding = MemoizedBinding(loader)
    with pytest.raises(OSError, match="transient"):
        binding.resolve()
    assert not binding.resolved
    assert binding.resolve() == "value"
    assert binding.resolve() == "value"
    assert len(attempts) == 2


def test_live_reads_every_access():
    counter = iter(range(100))
    binding = LiveBinding(lambda: next(counter))
    assert [binding.resolve() for _ in range(3)] == [0, 1, 2]
    assert binding.kind == "live"
