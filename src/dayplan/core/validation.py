"""Input validation for the mutation boundary.

The classifier and assemblers assume records that already passed these
checks; nothing in here is called on the read path.
"""

import re
from datetime import date, datetime

from .recurrence import Recurrence, RecurrenceType
from .tasks import Priority

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DEADLINE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2})?$")
COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

TASK_NAME_MAX = 200
DESCRIPTION_MAX = 5000
LIST_NAME_MAX = 100
LABEL_NAME_MAX = 50
MINUTES_MAX = 1440


class ValidationError(ValueError):
    """Raised when user input can't be stored."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


def parse_task_date(value: str | date | None) -> date | None:
    """Parse a YYYY-MM-DD calendar day. Empty means no date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        raise ValidationError("Date must be a calendar day, not a timestamp", "date")
    if isinstance(value, date):
        return value
    if not DATE_RE.match(value):
        raise ValidationError("Date must be in YYYY-MM-DD format", "date")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}", "date")


def parse_deadline(value: str | datetime | None) -> datetime | None:
    """Parse a YYYY-MM-DDTHH:MM deadline. Empty means no deadline."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not DEADLINE_RE.match(value):
        raise ValidationError("Deadline must be in ISO datetime format (YYYY-MM-DDTHH:MM)", "deadline")
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid deadline: {value}", "deadline")


def parse_priority(value: str | Priority | None) -> Priority:
    if value is None:
        return Priority.NONE
    if isinstance(value, Priority):
        return value
    try:
        return Priority(value.lower())
    except ValueError:
        choices = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Priority must be one of: {choices}", "priority")


def validate_name(value: str | None, max_length: int = TASK_NAME_MAX, what: str = "Task") -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{what} name is required", "name")
    if len(name) > max_length:
        raise ValidationError(f"{what} name must be {max_length} characters or less", "name")
    return name


def validate_description(value: str | None) -> str | None:
    if value is None:
        return None
    if len(value) > DESCRIPTION_MAX:
        raise ValidationError(f"Description must be {DESCRIPTION_MAX} characters or less", "description")
    return value


def validate_minutes(value: int | None, field: str) -> int | None:
    if value is None:
        return None
    if not 0 <= value <= MINUTES_MAX:
        raise ValidationError(f"{field} must be between 0 and {MINUTES_MAX}", field)
    return value


def validate_color(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not COLOR_RE.match(value):
        raise ValidationError("Color must be a valid hex color", "color")
    return value


def validate_schedule(day: date | None, deadline: datetime | None) -> None:
    """A deadline, when both are set, can't fall before the scheduled day."""
    if day is None or deadline is None:
        return
    if deadline.date() < day:
        raise ValidationError("Deadline must be on or after the scheduled date", "deadline")


def parse_recurrence(value: str | Recurrence | None, interval: int | None = None) -> Recurrence | None:
    """
    Parse a repeat rule: a type name ("every_week"), a stored JSON pattern,
    or "none"/empty for a one-off task. interval applies to "custom".
    """
    if value is None or isinstance(value, Recurrence):
        return value
    text = value.strip()
    if not text or text.lower() == "none":
        return None
    if text.startswith("{"):
        try:
            return Recurrence.from_json(text)
        except ValueError as e:
            raise ValidationError(f"Invalid recurring pattern: {e}", "recurring_pattern")
    try:
        kind = RecurrenceType(text.lower())
    except ValueError:
        choices = ", ".join(t.value for t in RecurrenceType)
        raise ValidationError(f"Repeat must be one of: none, {choices}", "recurring_pattern")
    if interval is not None and interval < 1:
        raise ValidationError("Repeat interval must be at least 1", "recurring_pattern")
    return Recurrence(kind, interval if kind == RecurrenceType.CUSTOM else None)
