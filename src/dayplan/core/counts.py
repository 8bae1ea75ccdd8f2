"""Aggregates shared by every view and the sidebar - no I/O dependencies."""

import logging
from datetime import date, datetime
from typing import Iterable

from .classify import Bucket, CalendarWindow, classify
from .tasks import ListWithCounts, Subtask, Task

logger = logging.getLogger(__name__)

BADGE_LIMIT = 99


def overdue_count(tasks: Iterable[Task], reference: "datetime | date | CalendarWindow") -> int:
    """Number of tasks the classifier puts in the Overdue bucket."""
    window = CalendarWindow.from_reference(reference)
    return sum(1 for t in tasks if classify(t, window) == Bucket.OVERDUE)


def completed_count(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if t.is_completed)


def remaining(item: ListWithCounts) -> int:
    """
    Incomplete tasks in a list: task_count - completed_count.

    Never negative. Inconsistent counts are logged and clamped to 0.
    """
    value = item.task_count - item.completed_count
    if value < 0:
        logger.warning(
            f"List {item.id} has completed_count {item.completed_count} > task_count {item.task_count}"
        )
        return 0
    return value


def display_count(n: int) -> str:
    """Badge text: the number itself up to 99, then "99+"."""
    if n > BADGE_LIMIT:
        return f"{BADGE_LIMIT}+"
    return str(n)


def subtask_progress(subtasks: Iterable[Subtask]) -> tuple[int, int]:
    """(done, total) for a task's subtasks, as shown on its card."""
    items = list(subtasks)
    return sum(1 for s in items if s.is_completed), len(items)
