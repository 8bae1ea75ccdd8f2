"""Tests for the aggregation and count engine."""

import logging
from datetime import date, timedelta

import pytest

from dayplan.core.counts import (
    BADGE_LIMIT,
    completed_count,
    display_count,
    overdue_count,
    remaining,
    subtask_progress,
)
from dayplan.core.tasks import ListWithCounts, Subtask, TaskList


@pytest.fixture
def make_counts():
    def _make(task_count: int, completed: int) -> ListWithCounts:
        return ListWithCounts(
            task_list=TaskList(id="l1", name="Work"),
            task_count=task_count,
            completed_count=completed,
        )

    return _make


class TestDisplayCount:
    @pytest.mark.parametrize(
        "n,expected",
        [(0, "0"), (1, "1"), (42, "42"), (99, "99"), (100, "99+"), (5000, "99+")],
    )
    def test_boundary(self, n, expected):
        assert display_count(n) == expected

    def test_threshold_constant(self):
        assert BADGE_LIMIT == 99
        assert display_count(BADGE_LIMIT + 1) == f"{BADGE_LIMIT}+"


class TestRemaining:
    def test_difference(self, make_counts):
        assert remaining(make_counts(10, 3)) == 7

    def test_all_done(self, make_counts):
        assert remaining(make_counts(4, 4)) == 0

    def test_empty_list(self, make_counts):
        assert remaining(make_counts(0, 0)) == 0

    def test_inconsistent_counts_clamp_to_zero(self, make_counts, caplog):
        with caplog.at_level(logging.WARNING, logger="dayplan.core.counts"):
            assert remaining(make_counts(2, 5)) == 0
        assert "completed_count 5 > task_count 2" in caplog.text

    def test_consistent_counts_dont_warn(self, make_counts, caplog):
        with caplog.at_level(logging.WARNING, logger="dayplan.core.counts"):
            remaining(make_counts(3, 1))
        assert caplog.text == ""


class TestOverdueCount:
    def test_counts_only_incomplete_past(self, make_task, today):
        tasks = [
            make_task(day=today - timedelta(days=1)),
            make_task(day=today - timedelta(days=30)),
            make_task(day=today - timedelta(days=2), completed=True),
            make_task(day=today),
            make_task(),
        ]
        assert overdue_count(tasks, today) == 2

    def test_empty(self, today):
        assert overdue_count([], today) == 0

    def test_accepts_generator(self, make_task, today):
        tasks = (make_task(day=date(2020, 1, 1)) for _ in range(3))
        assert overdue_count(tasks, today) == 3


class TestCompletedCount:
    def test_counts(self, make_task):
        tasks = [make_task(completed=True), make_task(), make_task(completed=True)]
        assert completed_count(tasks) == 2

    def test_empty(self):
        assert completed_count([]) == 0


class TestSubtaskProgress:
    def test_counts_done_of_total(self):
        subs = [
            Subtask(id="s1", task_id="t1", name="Pack", is_completed=True),
            Subtask(id="s2", task_id="t1", name="Book"),
            Subtask(id="s3", task_id="t1", name="Go"),
        ]
        assert subtask_progress(subs) == (1, 3)

    def test_no_subtasks(self):
        assert subtask_progress([]) == (0, 0)
