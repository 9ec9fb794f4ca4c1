from __future__ import annotations

import threading

import pytest

from src.college_attendance.college_attendance.common.batch import run_all


def test_run_all_returns_results_in_submission_order():
    results = run_all([lambda i=i: i * 10 for i in range(5)], max_workers=3)
    assert results == [0, 10, 20, 30, 40]


def test_run_all_with_no_tasks_returns_empty_list():
    assert run_all([], max_workers=4) == []


def test_run_all_waits_for_every_task_then_raises_first_error():
    done = []
    lock = threading.Lock()

    def ok(i):
        with lock:
            done.append(i)

    def boom(msg):
        raise RuntimeError(msg)

    tasks = [
        lambda: ok(1),
        lambda: boom("first"),
        lambda: ok(2),
        lambda: boom("second"),
        lambda: ok(3),
    ]

    with pytest.raises(RuntimeError, match="first"):
        run_all(tasks, max_workers=2)

    # Completed writes are kept (no rollback).
    assert sorted(done) == [1, 2, 3]
