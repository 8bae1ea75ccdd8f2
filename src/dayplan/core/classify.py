"""Date classification - pure bucketing of tasks against a calendar day."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from .tasks import Task


class Bucket(Enum):
    """Mutually exclusive temporal classification of a task."""

    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "thisweek"
    NEXT_WEEK = "nextweek"
    THIS_MONTH = "thismonth"
    LATER = "later"
    NO_DATE = "nodate"

    @property
    def title(self) -> str:
        return BUCKET_TITLES[self]


BUCKET_TITLES = {
    Bucket.OVERDUE: "Overdue",
    Bucket.TODAY: "Today",
    Bucket.TOMORROW: "Tomorrow",
    Bucket.THIS_WEEK: "This Week",
    Bucket.NEXT_WEEK: "Next Week",
    Bucket.THIS_MONTH: "This Month",
    Bucket.LATER: "Later",
    Bucket.NO_DATE: "No Date",
}


@dataclass(frozen=True)
class CalendarWindow:
    """
    Day boundaries around a reference day.

    Weeks run Monday through Sunday (ISO). Computed once per request so that
    every task in a response is classified against the same "today".
    """

    today: date
    tomorrow: date
    week_start: date
    week_end: date
    next_week_start: date
    next_week_end: date
    month_end: date

    @classmethod
    def for_day(cls, today: date) -> "CalendarWindow":
        week_start = today - timedelta(days=today.weekday())
        week_end = week_start + timedelta(days=6)
        last_day = calendar.monthrange(today.year, today.month)[1]
        return cls(
            today=today,
            tomorrow=today + timedelta(days=1),
            week_start=week_start,
            week_end=week_end,
            next_week_start=week_start + timedelta(days=7),
            next_week_end=week_end + timedelta(days=7),
            month_end=today.replace(day=last_day),
        )

    @classmethod
    def from_reference(cls, reference: "datetime | date | CalendarWindow") -> "CalendarWindow":
        """
        Build a window from a datetime, a date, or pass an existing window through.

        A datetime is reduced to its own calendar date, so aware datetimes must
        already be in the user's timezone.
        """
        if isinstance(reference, CalendarWindow):
            return reference
        # datetime is a subclass of date, check it first
        if isinstance(reference, datetime):
            return cls.for_day(reference.date())
        return cls.for_day(reference)

    def in_this_week(self, day: date) -> bool:
        return self.week_start <= day <= self.week_end

    def in_next_week(self, day: date) -> bool:
        return self.next_week_start <= day <= self.next_week_end


def classify(task: Task, reference: "datetime | date | CalendarWindow") -> Bucket:
    """
    Classify a task into exactly one bucket. First matching rule wins.

    Pure function - no I/O, never raises for a valid task.
    """
    window = CalendarWindow.from_reference(reference)
    day = task.date

    if day is None:
        return Bucket.NO_DATE
    if day < window.today and not task.is_completed:
        return Bucket.OVERDUE
    if day == window.today:
        return Bucket.TODAY
    if day == window.tomorrow:
        return Bucket.TOMORROW
    if window.in_this_week(day):
        return Bucket.THIS_WEEK
    if window.in_next_week(day):
        return Bucket.NEXT_WEEK
    if window.week_end < day <= window.month_end:
        return Bucket.THIS_MONTH
    return Bucket.LATER


def classify_all(tasks: list[Task], reference: "datetime | date | CalendarWindow") -> list[tuple[Task, Bucket]]:
    """Classify every task against a single window."""
    window = CalendarWindow.from_reference(reference)
    return [(t, classify(t, window)) for t in tasks]
