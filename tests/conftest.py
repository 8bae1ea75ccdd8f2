"""Shared fixtures."""

from datetime import date

import pytest

from dayplan.core.tasks import Task


@pytest.fixture
def today():
    # A Wednesday: week runs Mon Jan 13 - Sun Jan 19, next week Jan 20 - 26
    return date(2025, 1, 15)


@pytest.fixture
def make_task():
    """Factory for creating tasks."""
    counter = {"n": 0}

    def _make(
        name: str | None = None,
        day: date | None = None,
        completed: bool = False,
        list_id: str = "inbox",
        description: str | None = None,
    ) -> Task:
        counter["n"] += 1
        n = counter["n"]
        return Task(
            id=f"t{n}",
            list_id=list_id,
            name=name or f"Task {n}",
            date=day,
            description=description,
            is_completed=completed,
        )

    return _make
