"""Repeating tasks - pure date stepping, no I/O dependencies."""

import calendar
import json
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum


class RecurrenceType(Enum):
    EVERY_DAY = "every_day"
    EVERY_WEEK = "every_week"
    EVERY_WEEKDAY = "every_weekday"
    EVERY_MONTH = "every_month"
    EVERY_YEAR = "every_year"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Recurrence:
    """How a task repeats. interval is the step in days for CUSTOM."""

    type: RecurrenceType
    interval: int | None = None

    def to_json(self) -> str:
        data = {"type": self.type.value}
        if self.interval is not None:
            data["interval"] = self.interval
        return json.dumps(data)

    @classmethod
    def from_json(cls, text: str | None) -> "Recurrence | None":
        """
        Parse a stored pattern like {"type": "every_week"}.

        Empty text and type "none" mean the task doesn't repeat. Raises
        ValueError for anything else it can't read.
        """
        if not text:
            return None
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Recurrence must be an object: {text}")
        kind = data.get("type", "none")
        if kind == "none":
            return None
        interval = data.get("interval")
        if interval is not None and (isinstance(interval, bool) or not isinstance(interval, int) or interval < 1):
            raise ValueError(f"Invalid recurrence interval: {interval!r}")
        return cls(RecurrenceType(kind), interval)


def _add_months(day: date, months: int) -> date:
    # Clamp to the last day of the target month (Jan 31 -> Feb 28)
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last))


def next_occurrence(current: date, rule: Recurrence) -> date:
    """
    The next date a repeating task falls on.

    Pure function - no I/O. Works for dates and datetimes alike; a datetime
    keeps its time of day.
    """
    match rule.type:
        case RecurrenceType.EVERY_DAY:
            return current + timedelta(days=1)
        case RecurrenceType.EVERY_WEEK:
            return current + timedelta(weeks=1)
        case RecurrenceType.EVERY_WEEKDAY:
            following = current + timedelta(days=1)
            while following.weekday() >= 5:
                following += timedelta(days=1)
            return following
        case RecurrenceType.EVERY_MONTH:
            return _add_months(current, 1)
        case RecurrenceType.EVERY_YEAR:
            return _add_months(current, 12)
        case RecurrenceType.CUSTOM:
            return current + timedelta(days=rule.interval or 1)
