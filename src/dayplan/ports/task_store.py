"""Task record store interface."""

from datetime import date
from typing import Protocol

from dayplan.core.tasks import Label, ListWithCounts, Task, TaskList


class TaskStore(Protocol):
    """Read-only interface the query layer needs from any storage backend.

    Task queries return records ordered by date (undated last), then created_at.
    """

    def get_all(self) -> list[Task]:
        """Fetch every task."""
        ...

    def get_by_list(self, list_id: str) -> list[Task]:
        """Fetch the tasks of one list."""
        ...

    def get_by_date_range(self, start: date, end: date) -> list[Task]:
        """Fetch tasks scheduled between start and end, inclusive."""
        ...

    def get_lists(self) -> list[TaskList]:
        """Fetch all lists, default list first."""
        ...

    def get_lists_with_counts(self) -> list[ListWithCounts]:
        """Fetch all lists with their task and completed counts."""
        ...

    def get_labels(self) -> list[Label]:
        """Fetch all labels."""
        ...
