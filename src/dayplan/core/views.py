"""View assembly - pure grouping of tasks into ordered buckets."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .classify import Bucket, CalendarWindow, classify
from .counts import overdue_count
from .tasks import Task

COMPLETED_GROUP = "completed"

GROUP_TITLES = {b.value: b.title for b in Bucket}
GROUP_TITLES[COMPLETED_GROUP] = "Completed"


class ViewName(Enum):
    TODAY = "today"
    WEEK = "week"
    UPCOMING = "upcoming"
    ALL = "all"
    LIST = "list"


@dataclass(frozen=True)
class ViewSpec:
    """
    How a view turns buckets into groups.

    layout: group ids in display order; buckets not listed are hidden.
    window_only: hide tasks dated before today unless they are Overdue.
    completed_group: route every completed task to a trailing Completed group.
    fold_next_week: merge Next Week into This Month / Later.
    """

    layout: tuple[str, ...]
    window_only: bool = True
    completed_group: bool = False
    fold_next_week: bool = False


_ALL_LAYOUT = (
    Bucket.OVERDUE.value,
    Bucket.TODAY.value,
    Bucket.TOMORROW.value,
    Bucket.THIS_WEEK.value,
    Bucket.THIS_MONTH.value,
    Bucket.LATER.value,
    Bucket.NO_DATE.value,
    COMPLETED_GROUP,
)

VIEW_SPECS = {
    ViewName.TODAY: ViewSpec(layout=(Bucket.OVERDUE.value, Bucket.TODAY.value)),
    ViewName.WEEK: ViewSpec(
        layout=(
            Bucket.OVERDUE.value,
            Bucket.TODAY.value,
            Bucket.TOMORROW.value,
            Bucket.THIS_WEEK.value,
        )
    ),
    ViewName.UPCOMING: ViewSpec(
        layout=(
            Bucket.OVERDUE.value,
            Bucket.TODAY.value,
            Bucket.TOMORROW.value,
            Bucket.THIS_WEEK.value,
            Bucket.NEXT_WEEK.value,
            Bucket.THIS_MONTH.value,
            Bucket.LATER.value,
        )
    ),
    ViewName.ALL: ViewSpec(
        layout=_ALL_LAYOUT, window_only=False, completed_group=True, fold_next_week=True
    ),
    ViewName.LIST: ViewSpec(
        layout=_ALL_LAYOUT, window_only=False, completed_group=True, fold_next_week=True
    ),
}


@dataclass(frozen=True)
class ViewOptions:
    """Per-request display switches, passed explicitly into every view."""

    include_completed: bool = False
    current_view: ViewName = ViewName.TODAY


@dataclass
class ViewGroup:
    """One non-empty group of a view."""

    bucket_id: str
    title: str
    tasks: list[Task] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "bucket_id": self.bucket_id,
            "title": self.title,
            "tasks": [t.to_dict() for t in self.tasks],
        }


@dataclass
class ViewResult:
    """Assembled view: ordered groups plus counts."""

    view: ViewName
    date: date
    groups: list[ViewGroup]
    overdue_count: int
    bucket_counts: dict[str, int]

    @property
    def task_count(self) -> int:
        return sum(len(g.tasks) for g in self.groups)

    def group(self, bucket_id: str) -> ViewGroup | None:
        for g in self.groups:
            if g.bucket_id == bucket_id:
                return g
        return None

    def to_dict(self) -> dict:
        return {
            "view": self.view.value,
            "date": self.date.isoformat(),
            "groups": [g.to_dict() for g in self.groups],
            "overdue_count": self.overdue_count,
            "bucket_counts": dict(self.bucket_counts),
        }


def _group_for(
    task: Task,
    window: CalendarWindow,
    spec: ViewSpec,
    include_completed: bool,
) -> str | None:
    """Group id a task belongs to in this view, or None if hidden."""
    if task.is_completed:
        if spec.completed_group:
            return COMPLETED_GROUP
        if not include_completed:
            return None

    bucket = classify(task, window)

    if spec.fold_next_week and bucket == Bucket.NEXT_WEEK:
        bucket = Bucket.THIS_MONTH if task.date <= window.month_end else Bucket.LATER

    if (
        spec.window_only
        and bucket != Bucket.OVERDUE
        and task.date is not None
        and task.date < window.today
    ):
        return None

    if bucket.value not in spec.layout:
        return None
    return bucket.value


def assemble(
    view: ViewName,
    tasks: list[Task],
    reference: "datetime | date | CalendarWindow",
    include_completed: bool = False,
) -> ViewResult:
    """
    Group tasks for a view.

    Pure function - no I/O. The reference is resolved into a single window
    up front. Input order is kept inside each group and empty groups are
    dropped. overdue_count always reflects the full input.
    """
    window = CalendarWindow.from_reference(reference)
    spec = VIEW_SPECS[view]

    grouped: dict[str, list[Task]] = {gid: [] for gid in spec.layout}
    for task in tasks:
        gid = _group_for(task, window, spec, include_completed)
        if gid is not None:
            grouped[gid].append(task)

    groups = [
        ViewGroup(bucket_id=gid, title=GROUP_TITLES[gid], tasks=grouped[gid])
        for gid in spec.layout
        if grouped[gid]
    ]

    return ViewResult(
        view=view,
        date=window.today,
        groups=groups,
        overdue_count=overdue_count(tasks, window),
        bucket_counts={gid: len(grouped[gid]) for gid in spec.layout},
    )


def assemble_today(tasks, reference, include_completed: bool = False) -> ViewResult:
    return assemble(ViewName.TODAY, tasks, reference, include_completed)


def assemble_week(tasks, reference, include_completed: bool = False) -> ViewResult:
    return assemble(ViewName.WEEK, tasks, reference, include_completed)


def assemble_upcoming(tasks, reference, include_completed: bool = False) -> ViewResult:
    return assemble(ViewName.UPCOMING, tasks, reference, include_completed)


def assemble_all(tasks, reference, include_completed: bool = False) -> ViewResult:
    return assemble(ViewName.ALL, tasks, reference, include_completed)


def assemble_list(tasks, reference, include_completed: bool = False) -> ViewResult:
    """All-view rules applied to one list's tasks."""
    return assemble(ViewName.LIST, tasks, reference, include_completed)
