"""Functional core - pure business logic with no I/O."""

from .tasks import Task, TaskList, ListWithCounts, Label, Subtask, Reminder, TaskLog, Priority, TaskAction
from .classify import Bucket, CalendarWindow, classify, classify_all
from .views import ViewName, ViewOptions, ViewGroup, ViewResult, assemble
from .counts import overdue_count, completed_count, remaining, display_count, subtask_progress
from .recurrence import Recurrence, RecurrenceType, next_occurrence
from .search import SearchHit, MatchTier, SearchKind, CompletionFilter, rank, filter_by_completion
from .validation import ValidationError

__all__ = [
    # Records
    "Task",
    "TaskList",
    "ListWithCounts",
    "Label",
    "Subtask",
    "Reminder",
    "TaskLog",
    "Priority",
    "TaskAction",
    # Classifier
    "Bucket",
    "CalendarWindow",
    "classify",
    "classify_all",
    # Views
    "ViewName",
    "ViewOptions",
    "ViewGroup",
    "ViewResult",
    "assemble",
    # Counts
    "overdue_count",
    "completed_count",
    "remaining",
    "display_count",
    "subtask_progress",
    # Recurrence
    "Recurrence",
    "RecurrenceType",
    "next_occurrence",
    # Search
    "SearchHit",
    "MatchTier",
    "SearchKind",
    "CompletionFilter",
    "rank",
    "filter_by_completion",
    # Validation
    "ValidationError",
]
