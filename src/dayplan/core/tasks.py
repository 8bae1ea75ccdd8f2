"""Pure task domain records - no I/O dependencies."""

import datetime as dt
from dataclasses import dataclass
from enum import Enum

from .recurrence import Recurrence


class Priority(Enum):
    """Task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class TaskAction(Enum):
    """Kinds of entries written to a task's activity log."""

    CREATED = "created"
    UPDATED = "updated"
    COMPLETED = "completed"
    UNCOMPLETED = "uncompleted"


@dataclass(frozen=True)
class Task:
    """A unit of work scheduled on a calendar day."""

    id: str
    list_id: str
    name: str
    date: dt.date | None = None
    deadline: dt.datetime | None = None
    description: str | None = None
    priority: Priority = Priority.NONE
    is_completed: bool = False
    completed_at: dt.datetime | None = None
    estimate_minutes: int | None = None
    actual_minutes: int | None = None
    recurring_pattern: Recurrence | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "list_id": self.list_id,
            "name": self.name,
            "description": self.description,
            "date": self.date.isoformat() if self.date else None,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "priority": self.priority.value,
            "is_completed": self.is_completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "estimate_minutes": self.estimate_minutes,
            "actual_minutes": self.actual_minutes,
            "recurring_pattern": self.recurring_pattern.to_json() if self.recurring_pattern else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class TaskList:
    """A named grouping of tasks. Exactly one list is the default Inbox."""

    id: str
    name: str
    color: str | None = None
    emoji: str | None = None
    is_default: bool = False
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @property
    def description(self) -> None:
        # Lists have no description; search matches them on name only.
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "emoji": self.emoji,
            "is_default": self.is_default,
        }


@dataclass(frozen=True)
class ListWithCounts:
    """A list together with its stored task and completion counts."""

    task_list: TaskList
    task_count: int = 0
    completed_count: int = 0

    @property
    def id(self) -> str:
        return self.task_list.id

    @property
    def name(self) -> str:
        return self.task_list.name


@dataclass(frozen=True)
class Label:
    """A coloured tag attached to any number of tasks."""

    id: str
    name: str
    color: str | None = None
    icon: str | None = None
    created_at: dt.datetime | None = None

    @property
    def description(self) -> None:
        return None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "color": self.color, "icon": self.icon}


@dataclass(frozen=True)
class Subtask:
    id: str
    task_id: str
    name: str
    is_completed: bool = False
    created_at: dt.datetime | None = None


@dataclass(frozen=True)
class Reminder:
    id: str
    task_id: str
    reminder_time: dt.datetime
    is_triggered: bool = False
    created_at: dt.datetime | None = None


@dataclass(frozen=True)
class TaskLog:
    """One immutable activity log entry."""

    id: str
    task_id: str
    action: TaskAction
    field_changed: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    created_at: dt.datetime | None = None
    created_by: str = "user"

    def describe(self) -> str:
        """Human-readable one-liner for the activity log."""
        if self.action == TaskAction.UPDATED and self.field_changed:
            return f"updated {self.field_changed}: {self.old_value or '-'} -> {self.new_value or '-'}"
        return self.action.value
