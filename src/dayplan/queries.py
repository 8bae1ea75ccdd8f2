"""Query layer shared by the CLI and any other front end.

Each function reads the clock once, fetches one snapshot from the store and
hands both to the pure core.
"""

from dataclasses import dataclass, field
from datetime import date

from .adapters.clock import FixedClock, SystemClock
from .adapters.sqlite_store import SQLiteTaskStore
from .config import Config
from .core.classify import CalendarWindow
from .core.counts import display_count, overdue_count, remaining, subtask_progress
from .core.search import (
    DEFAULT_LIMIT,
    CompletionFilter,
    SearchHit,
    SearchKind,
    filter_by_completion,
    rank,
)
from .core.tasks import Label, Reminder, Subtask, Task, TaskList
from .core.views import ViewName, ViewOptions, ViewResult, assemble
from .ports.clock import Clock
from .ports.task_store import TaskStore


def get_store(config: Config, clock: Clock | None = None) -> SQLiteTaskStore:
    """Open the configured database."""
    return SQLiteTaskStore(config.db_path, clock=clock)


def get_clock(config: Config, as_of: date | None = None) -> Clock:
    """System clock in the configured timezone, or a fixed day for --as-of."""
    if as_of:
        return FixedClock(as_of, config.timezone)
    return SystemClock(config.timezone)


def current_window(clock: Clock) -> CalendarWindow:
    return CalendarWindow.from_reference(clock.now())


# ============== Views ==============


def run_view(view: ViewName, store: TaskStore, clock: Clock, options: ViewOptions | None = None) -> ViewResult:
    """Assemble one of the global views over every task."""
    if view == ViewName.LIST:
        raise ValueError("The list view needs a list id, use list_view()")
    options = options or ViewOptions(current_view=view)
    window = current_window(clock)
    return assemble(view, store.get_all(), window, options.include_completed)


def today(store: TaskStore, clock: Clock, options: ViewOptions | None = None) -> ViewResult:
    return run_view(ViewName.TODAY, store, clock, options)


def week(store: TaskStore, clock: Clock, options: ViewOptions | None = None) -> ViewResult:
    return run_view(ViewName.WEEK, store, clock, options)


def upcoming(store: TaskStore, clock: Clock, options: ViewOptions | None = None) -> ViewResult:
    return run_view(ViewName.UPCOMING, store, clock, options)


def all_tasks(store: TaskStore, clock: Clock, options: ViewOptions | None = None) -> ViewResult:
    return run_view(ViewName.ALL, store, clock, options)


def default_view(store: TaskStore, clock: Clock, options: ViewOptions) -> ViewResult:
    """Assemble the view options.current_view names, as `dayplan` with no command does."""
    return run_view(options.current_view, store, clock, options)


def list_view(store: TaskStore, clock: Clock, list_id: str, options: ViewOptions | None = None) -> ViewResult:
    """All-view grouping over a single list."""
    options = options or ViewOptions(current_view=ViewName.LIST)
    window = current_window(clock)
    return assemble(ViewName.LIST, store.get_by_list(list_id), window, options.include_completed)


def overdue(store: TaskStore, clock: Clock) -> int:
    """Sidebar overdue badge count."""
    return overdue_count(store.get_all(), current_window(clock))


@dataclass
class ListBadge:
    """A list with its remaining-count badge, for the sidebar."""

    task_list: TaskList
    remaining: int

    @property
    def badge(self) -> str:
        return display_count(self.remaining)

    def to_dict(self) -> dict:
        return {**self.task_list.to_dict(), "remaining": self.remaining, "badge": self.badge}


def list_badges(store: TaskStore) -> list[ListBadge]:
    return [ListBadge(item.task_list, remaining(item)) for item in store.get_lists_with_counts()]


# ============== Search ==============


@dataclass
class SearchResults:
    tasks: list[SearchHit[Task]] = field(default_factory=list)
    lists: list[SearchHit[TaskList]] = field(default_factory=list)
    labels: list[SearchHit[Label]] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.tasks or self.lists or self.labels)

    def to_dict(self) -> dict:
        return {
            "tasks": [{**h.item.to_dict(), "score": h.score} for h in self.tasks],
            "lists": [{**h.item.to_dict(), "score": h.score} for h in self.lists],
            "labels": [{**h.item.to_dict(), "score": h.score} for h in self.labels],
        }


def search(
    store: TaskStore,
    query: str,
    kind: SearchKind = SearchKind.ALL,
    completed: CompletionFilter = CompletionFilter.ALL,
    limit: int = DEFAULT_LIMIT,
) -> SearchResults:
    """
    Search tasks, lists and labels.

    The completion filter narrows tasks before ranking, and the limit caps
    each kind separately after ranking. Blank queries return nothing and
    never touch the store.
    """
    results = SearchResults()
    if not query.strip():
        return results

    if kind.includes(SearchKind.TASKS):
        candidates = filter_by_completion(store.get_all(), completed)
        results.tasks = rank(query, candidates, limit)
    if kind.includes(SearchKind.LISTS):
        results.lists = rank(query, store.get_lists(), limit)
    if kind.includes(SearchKind.LABELS):
        results.labels = rank(query, store.get_labels(), limit)
    return results


# ============== Task details ==============


@dataclass
class TaskDetails:
    """Everything shown for one task: its list, labels, subtasks and reminders."""

    task: Task
    task_list: TaskList
    labels: list[Label]
    subtasks: list[Subtask]
    reminders: list[Reminder]

    @property
    def progress(self) -> tuple[int, int]:
        return subtask_progress(self.subtasks)

    def to_dict(self) -> dict:
        done, total = self.progress
        return {
            **self.task.to_dict(),
            "list": self.task_list.name,
            "labels": [l.name for l in self.labels],
            "subtasks": [{"id": s.id, "name": s.name, "is_completed": s.is_completed} for s in self.subtasks],
            "subtask_progress": {"done": done, "total": total},
            "reminders": [
                {"id": r.id, "reminder_time": r.reminder_time.isoformat(), "is_triggered": r.is_triggered}
                for r in self.reminders
            ],
        }


def task_details(store: SQLiteTaskStore, task_id: str) -> TaskDetails:
    task = store.get_task(task_id)
    return TaskDetails(
        task=task,
        task_list=store.get_list(task.list_id),
        labels=store.get_labels_for_task(task_id),
        subtasks=store.get_subtasks(task_id),
        reminders=store.get_reminders(task_id),
    )


def pending_reminders(store: SQLiteTaskStore, clock: Clock) -> list[tuple[Reminder, Task]]:
    """Due, untriggered reminders paired with their tasks, soonest first."""
    return [(r, store.get_task(r.task_id)) for r in store.get_pending_reminders(clock.now())]
