"""Tests for light parallelism."""

import threading

import pytest

from revive import parallel
from revive.parallel import lightly_parallelize, parallel_filter, run_batch, safe_jobs


def test_safe_jobs():
    assert safe_jobs(None) == 1
    assert safe_jobs(0) == 1
    assert safe_jobs(1) == 1


def test_safe_jobs_with_fork(monkeypatch):
    monkeypatch.setattr(parallel, "supports_fork", lambda: True)
    assert safe_jobs(4) == 4


def test_safe_jobs_without_fork(monkeypatch):
    monkeypatch.setattr(parallel, "supports_fork", lambda: False)
    assert safe_jobs(4) == 1


def test_lightly_parallelize_keeps_order(jobs):
    assert lightly_parallelize(range(10), lambda x: x * x, jobs=jobs) == [x * x for x in range(10)]


def test_single_job_runs_inline(monkeypatch):
    monkeypatch.setattr(parallel, "supports_fork", lambda: True)
    seen = set()

    def record(x):
        seen.add(threading.get_ident())
        return x

    lightly_parallelize(range(20), record, jobs=1)
    assert seen == {threading.get_ident()}


def test_parallel_filter(jobs):
    assert parallel_filter(range(10), lambda x: x % 2 == 0, jobs=jobs) == [0, 2, 4, 6, 8]


def test_run_batch_isolates_failures(jobs):
    attempted = []
    lock = threading.Lock()

    def work(item):
        with lock:
            attempted.append(item)
        if item in ("b", "d"):
            raise ValueError(f"bad {item}")

    result = run_batch(["a", "b", "c", "d", "e"], work, jobs=jobs)

    assert sorted(attempted) == ["a", "b", "c", "d", "e"]
    assert sorted(result.succeeded) == ["a", "c", "e"]
    assert set(result.errors) == {"b", "d"}
    assert str(result.errors["b"]) == "bad b"
    assert not result.ok
    assert len(result) == 5


def test_run_batch_empty():
    result = run_batch([], lambda item: pytest.fail("should not run"))
    assert result.ok
    assert len(result) == 0
