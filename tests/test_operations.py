"""Tests for the per-context single-flight guard."""

from __future__ import annotations

import threading

import pytest

from capstone_panels.errors import OperationInProgress, OperationTimeout
from capstone_panels.models.records import Context
from capstone_panels.operations import BulkOperationGuard


@pytest.fixture
def guard():
    guard = BulkOperationGuard(max_workers=4)
    yield guard
    guard.shutdown()


def _blocking(started: threading.Event, release: threading.Event):
    def work():
        started.set()
        release.wait(timeout=5)
        return "done"

    return work


class TestBulkOperationGuard:
    def test_returns_result_and_clears_flag(self, guard, context) -> None:
        assert guard.run(context, "auto-assign", lambda: 42) == 42
        assert not guard.is_running(context)

    def test_second_call_fails_fast(self, guard, context) -> None:
        started, release = threading.Event(), threading.Event()
        outcome = {}
        worker = threading.Thread(
            target=lambda: outcome.setdefault("value", guard.run(context, "auto-create", _blocking(started, release)))
        )
        worker.start()
        assert started.wait(timeout=5)

        with pytest.raises(OperationInProgress) as excinfo:
            guard.run(context, "auto-assign", lambda: None)
        assert excinfo.value.operation == "auto-create"

        release.set()
        worker.join(timeout=5)
        assert outcome["value"] == "done"
        assert not guard.is_running(context)

    def test_other_contexts_are_independent(self, guard, context) -> None:
        started, release = threading.Event(), threading.Event()
        worker = threading.Thread(target=lambda: guard.run(context, "auto-create", _blocking(started, release)))
        worker.start()
        assert started.wait(timeout=5)

        other = Context(school="SELECT", department="MTech")
        assert guard.run(other, "auto-assign", lambda: "ok") == "ok"

        release.set()
        worker.join(timeout=5)

    def test_failure_clears_flag(self, guard, context) -> None:
        def boom():
            raise ValueError("broken store")

        with pytest.raises(ValueError):
            guard.run(context, "auto-assign", boom)
        assert not guard.is_running(context)

    def test_timeout_keeps_flag_until_worker_finishes(self, guard, context) -> None:
        started, release = threading.Event(), threading.Event()

        with pytest.raises(OperationTimeout):
            guard.run(context, "auto-assign", _blocking(started, release), timeout=0.05)
        assert guard.is_running(context)

        release.set()
        guard.shutdown()
        assert not guard.is_running(context)
