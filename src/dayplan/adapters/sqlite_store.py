"""SQLite task store adapter - SQLAlchemy persistence for lists, tasks and their children."""

import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    case,
    create_engine,
    event,
    func,
    literal_column,
    select,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from dayplan.core.recurrence import Recurrence, next_occurrence
from dayplan.core.tasks import (
    Label,
    ListWithCounts,
    Priority,
    Reminder,
    Subtask,
    Task,
    TaskAction,
    TaskList,
    TaskLog,
)
from dayplan.core.validation import (
    LABEL_NAME_MAX,
    LIST_NAME_MAX,
    ValidationError,
    parse_deadline,
    parse_priority,
    parse_recurrence,
    parse_task_date,
    validate_color,
    validate_description,
    validate_minutes,
    validate_name,
    validate_schedule,
)
from dayplan.ports.clock import Clock

logger = logging.getLogger(__name__)

Base = declarative_base()

INBOX_NAME = "Inbox"
INBOX_COLOR = "#3b82f6"
INBOX_EMOJI = "📥"


class NotFoundError(LookupError):
    """Raised when a list, task or label id doesn't exist."""

    pass


task_labels = Table(
    "task_labels",
    Base.metadata,
    Column("task_id", String, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", String, ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)


class ListRow(Base):
    __tablename__ = "lists"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=True)
    emoji = Column(String, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    tasks = relationship("TaskRow", back_populates="task_list", cascade="all, delete-orphan")


class TaskRow(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    list_id = Column(String, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    # YYYY-MM-DD calendar day; deadline and timestamps are full ISO-8601
    date = Column(String, nullable=True, index=True)
    deadline = Column(String, nullable=True, index=True)
    priority = Column(String, nullable=False, default=Priority.NONE.value)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    completed_at = Column(String, nullable=True)
    estimate_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)
    # JSON rule like {"type": "every_week"}
    recurring_pattern = Column(Text, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    task_list = relationship("ListRow", back_populates="tasks")
    labels = relationship("LabelRow", secondary=task_labels, back_populates="tasks")
    subtasks = relationship("SubtaskRow", back_populates="task", cascade="all, delete-orphan")
    reminders = relationship("ReminderRow", back_populates="task", cascade="all, delete-orphan")
    logs = relationship("TaskLogRow", back_populates="task", cascade="all, delete-orphan")


class LabelRow(Base):
    __tablename__ = "labels"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    created_at = Column(String, nullable=False)

    tasks = relationship("TaskRow", secondary=task_labels, back_populates="labels")


class SubtaskRow(Base):
    __tablename__ = "subtasks"

    id = Column(String, primary_key=True)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)

    task = relationship("TaskRow", back_populates="subtasks")


class ReminderRow(Base):
    __tablename__ = "task_reminders"

    id = Column(String, primary_key=True)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    reminder_time = Column(String, nullable=False, index=True)
    is_triggered = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)

    task = relationship("TaskRow", back_populates="reminders")


class TaskLogRow(Base):
    __tablename__ = "task_logs"

    id = Column(String, primary_key=True)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(String, nullable=False)
    field_changed = Column(String, nullable=True)
    old_value = Column(String, nullable=True)
    new_value = Column(String, nullable=True)
    created_at = Column(String, nullable=False, index=True)
    created_by = Column(String, nullable=False, default="user")

    task = relationship("TaskRow", back_populates="logs")


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _log_value(value) -> str | None:
    """Stringify a field value for the activity log."""
    if value is None:
        return None
    if isinstance(value, Priority):
        return value.value
    if isinstance(value, Recurrence):
        return value.to_json()
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _to_recurrence(row: TaskRow) -> Recurrence | None:
    try:
        return Recurrence.from_json(row.recurring_pattern)
    except ValueError:
        logger.warning(f"Task {row.id} has an unreadable recurring pattern: {row.recurring_pattern!r}")
        return None


def _to_task(row: TaskRow) -> Task:
    return Task(
        id=row.id,
        list_id=row.list_id,
        name=row.name,
        description=row.description,
        date=date.fromisoformat(row.date) if row.date else None,
        deadline=_parse_ts(row.deadline),
        priority=Priority(row.priority),
        is_completed=bool(row.is_completed),
        completed_at=_parse_ts(row.completed_at),
        estimate_minutes=row.estimate_minutes,
        actual_minutes=row.actual_minutes,
        recurring_pattern=_to_recurrence(row),
        created_at=_parse_ts(row.created_at),
        updated_at=_parse_ts(row.updated_at),
    )


def _to_list(row: ListRow) -> TaskList:
    return TaskList(
        id=row.id,
        name=row.name,
        color=row.color,
        emoji=row.emoji,
        is_default=bool(row.is_default),
        created_at=_parse_ts(row.created_at),
        updated_at=_parse_ts(row.updated_at),
    )


def _to_label(row: LabelRow) -> Label:
    return Label(
        id=row.id,
        name=row.name,
        color=row.color,
        icon=row.icon,
        created_at=_parse_ts(row.created_at),
    )


def _to_subtask(row: SubtaskRow) -> Subtask:
    return Subtask(
        id=row.id,
        task_id=row.task_id,
        name=row.name,
        is_completed=bool(row.is_completed),
        created_at=_parse_ts(row.created_at),
    )


def _to_reminder(row: ReminderRow) -> Reminder:
    return Reminder(
        id=row.id,
        task_id=row.task_id,
        reminder_time=datetime.fromisoformat(row.reminder_time),
        is_triggered=bool(row.is_triggered),
        created_at=_parse_ts(row.created_at),
    )


def _to_log(row: TaskLogRow) -> TaskLog:
    return TaskLog(
        id=row.id,
        task_id=row.task_id,
        action=TaskAction(row.action),
        field_changed=row.field_changed,
        old_value=row.old_value,
        new_value=row.new_value,
        created_at=_parse_ts(row.created_at),
        created_by=row.created_by,
    )


# Task ordering shared by every task query: dated first by day, then by creation.
_TASK_ORDER = (
    TaskRow.date.is_(None),
    TaskRow.date,
    TaskRow.created_at,
    literal_column("tasks.rowid"),
)

# Fields update_task accepts.
_UPDATABLE = (
    "name",
    "description",
    "date",
    "deadline",
    "priority",
    "recurring_pattern",
    "list_id",
    "estimate_minutes",
    "actual_minutes",
)
# Of those, the ones whose column holds a serialized form.
_STORED_AS_TEXT = ("date", "deadline", "priority", "recurring_pattern")


def _validate_icon(icon: str | None) -> str | None:
    if icon is not None and len(icon) > 10:
        raise ValidationError("Icon must be 10 characters or less", "icon")
    return icon


class SQLiteTaskStore:
    """
    SQLite-backed task store.

    Implements TaskStore protocol for reads and acts as the mutation
    collaborator: every task mutation writes its activity log entry in the
    same transaction. No view logic lives here.
    """

    def __init__(self, db_path: Path | str, clock: Clock | None = None):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.clock = clock
        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine, "connect", _enable_foreign_keys)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._init_db()

    def _init_db(self) -> None:
        """Create tables and seed the default Inbox list if missing."""
        Base.metadata.create_all(self.engine)
        with self.Session.begin() as session:
            has_default = session.scalar(
                select(func.count()).select_from(ListRow).where(ListRow.is_default.is_(True))
            )
            if not has_default:
                now = self._now()
                session.add(
                    ListRow(
                        id=str(uuid.uuid4()),
                        name=INBOX_NAME,
                        color=INBOX_COLOR,
                        emoji=INBOX_EMOJI,
                        is_default=True,
                        created_at=now,
                        updated_at=now,
                    )
                )
                logger.info(f"Created default list '{INBOX_NAME}' in {self.db_path}")
        logger.debug(f"Task store ready: {self.db_path}")

    def _clock_now(self) -> datetime:
        return self.clock.now() if self.clock else datetime.now(timezone.utc)

    def _now(self) -> str:
        return self._clock_now().isoformat()

    def close(self) -> None:
        self.engine.dispose()

    # ============== Reads (TaskStore) ==============

    def get_all(self) -> list[Task]:
        with self.Session() as session:
            rows = session.scalars(select(TaskRow).order_by(*_TASK_ORDER)).all()
            return [_to_task(r) for r in rows]

    def get_by_list(self, list_id: str) -> list[Task]:
        with self.Session() as session:
            rows = session.scalars(
                select(TaskRow).where(TaskRow.list_id == list_id).order_by(*_TASK_ORDER)
            ).all()
            return [_to_task(r) for r in rows]

    def get_by_date_range(self, start: date, end: date) -> list[Task]:
        with self.Session() as session:
            rows = session.scalars(
                select(TaskRow)
                .where(TaskRow.date >= start.isoformat(), TaskRow.date <= end.isoformat())
                .order_by(*_TASK_ORDER)
            ).all()
            return [_to_task(r) for r in rows]

    def get_task(self, task_id: str) -> Task:
        with self.Session() as session:
            return _to_task(self._task_row(session, task_id))

    def get_lists(self) -> list[TaskList]:
        with self.Session() as session:
            rows = session.scalars(
                select(ListRow).order_by(ListRow.is_default.desc(), ListRow.created_at, ListRow.name)
            ).all()
            return [_to_list(r) for r in rows]

    def get_list(self, list_id: str) -> TaskList:
        with self.Session() as session:
            return _to_list(self._list_row(session, list_id))

    def get_default_list(self) -> TaskList:
        with self.Session() as session:
            row = session.scalars(select(ListRow).where(ListRow.is_default.is_(True))).first()
            if row is None:
                raise NotFoundError("No default list")
            return _to_list(row)

    def find_list(self, name: str) -> TaskList | None:
        """Find a list by name, case-insensitively."""
        with self.Session() as session:
            row = session.scalars(
                select(ListRow).where(func.lower(ListRow.name) == name.strip().lower())
            ).first()
            return _to_list(row) if row else None

    def get_lists_with_counts(self) -> list[ListWithCounts]:
        completed = func.coalesce(
            func.sum(case((TaskRow.is_completed.is_(True), 1), else_=0)), 0
        )
        stmt = (
            select(ListRow, func.count(TaskRow.id), completed)
            .outerjoin(TaskRow, TaskRow.list_id == ListRow.id)
            .group_by(ListRow.id)
            .order_by(ListRow.is_default.desc(), ListRow.created_at, ListRow.name)
        )
        with self.Session() as session:
            return [
                ListWithCounts(task_list=_to_list(row), task_count=count or 0, completed_count=done or 0)
                for row, count, done in session.execute(stmt).all()
            ]

    def get_labels(self) -> list[Label]:
        with self.Session() as session:
            rows = session.scalars(select(LabelRow).order_by(LabelRow.created_at, LabelRow.name)).all()
            return [_to_label(r) for r in rows]

    def find_label(self, name: str) -> Label | None:
        with self.Session() as session:
            row = session.scalars(
                select(LabelRow).where(func.lower(LabelRow.name) == name.strip().lower())
            ).first()
            return _to_label(row) if row else None

    def get_labels_for_task(self, task_id: str) -> list[Label]:
        with self.Session() as session:
            row = self._task_row(session, task_id)
            return [_to_label(r) for r in sorted(row.labels, key=lambda l: l.name.lower())]

    def get_subtasks(self, task_id: str) -> list[Subtask]:
        with self.Session() as session:
            rows = session.scalars(
                select(SubtaskRow)
                .where(SubtaskRow.task_id == task_id)
                .order_by(SubtaskRow.created_at, literal_column("subtasks.rowid"))
            ).all()
            return [_to_subtask(r) for r in rows]

    def get_reminders(self, task_id: str) -> list[Reminder]:
        with self.Session() as session:
            rows = session.scalars(
                select(ReminderRow).where(ReminderRow.task_id == task_id).order_by(ReminderRow.reminder_time)
            ).all()
            return [_to_reminder(r) for r in rows]

    def get_pending_reminders(self, as_of: datetime | None = None) -> list[Reminder]:
        """
        Untriggered reminders due at or before as_of (default: now), soonest first.

        Reminder times are local wall-clock times, so as_of is compared
        without its timezone.
        """
        cutoff = (as_of or self._clock_now()).replace(tzinfo=None).isoformat()
        with self.Session() as session:
            rows = session.scalars(
                select(ReminderRow)
                .where(ReminderRow.reminder_time <= cutoff, ReminderRow.is_triggered.is_(False))
                .order_by(ReminderRow.reminder_time)
            ).all()
            return [_to_reminder(r) for r in rows]

    def get_tasks_for_label(self, label_id: str) -> list[Task]:
        """Tasks carrying a label, newest first."""
        with self.Session() as session:
            self._label_row(session, label_id)
            rows = session.scalars(
                select(TaskRow)
                .join(task_labels, task_labels.c.task_id == TaskRow.id)
                .where(task_labels.c.label_id == label_id)
                .order_by(TaskRow.created_at.desc(), literal_column("tasks.rowid").desc())
            ).all()
            return [_to_task(r) for r in rows]

    def get_logs_for_task(self, task_id: str) -> list[TaskLog]:
        """Activity log of a task, oldest first."""
        with self.Session() as session:
            rows = session.scalars(
                select(TaskLogRow)
                .where(TaskLogRow.task_id == task_id)
                .order_by(TaskLogRow.created_at, literal_column("task_logs.rowid"))
            ).all()
            return [_to_log(r) for r in rows]

    def get_recent_logs(self, limit: int = 50) -> list[TaskLog]:
        """Most recent activity across all tasks, newest first."""
        with self.Session() as session:
            rows = session.scalars(
                select(TaskLogRow)
                .order_by(TaskLogRow.created_at.desc(), literal_column("task_logs.rowid").desc())
                .limit(limit)
            ).all()
            return [_to_log(r) for r in rows]

    # ============== Lists ==============

    def create_list(self, name: str, color: str | None = None, emoji: str | None = None) -> TaskList:
        name = validate_name(name, LIST_NAME_MAX, "List")
        color = validate_color(color)
        now = self._now()
        row = ListRow(
            id=str(uuid.uuid4()),
            name=name,
            color=color,
            emoji=emoji,
            is_default=False,
            created_at=now,
            updated_at=now,
        )
        with self.Session.begin() as session:
            session.add(row)
        logger.info(f"Created list '{name}' ({row.id})")
        return _to_list(row)

    def update_list(
        self,
        list_id: str,
        name: str | None = None,
        color: str | None = None,
        emoji: str | None = None,
    ) -> TaskList:
        """Rename or restyle a list. None leaves a field alone, "" clears color or emoji."""
        with self.Session.begin() as session:
            row = self._list_row(session, list_id)
            if name is not None:
                row.name = validate_name(name, LIST_NAME_MAX, "List")
            if color is not None:
                row.color = validate_color(color)
            if emoji is not None:
                row.emoji = emoji or None
            row.updated_at = self._now()
            task_list = _to_list(row)
        logger.info(f"Updated list {list_id}")
        return task_list

    def delete_list(self, list_id: str) -> int:
        """Delete a list and its tasks. Returns the number of tasks removed."""
        with self.Session.begin() as session:
            row = self._list_row(session, list_id)
            if row.is_default:
                raise ValidationError("The default list can't be deleted", "list_id")
            removed = len(row.tasks)
            session.delete(row)
        logger.info(f"Deleted list {list_id} with {removed} tasks")
        return removed

    # ============== Tasks ==============

    def create_task(
        self,
        list_id: str,
        name: str,
        description: str | None = None,
        date: str | date | None = None,
        deadline: str | datetime | None = None,
        priority: str | Priority | None = None,
        estimate_minutes: int | None = None,
        label_ids: list[str] | None = None,
        recurring_pattern: str | Recurrence | None = None,
    ) -> Task:
        name = validate_name(name)
        description = validate_description(description)
        day = parse_task_date(date)
        due = parse_deadline(deadline)
        validate_schedule(day, due)
        prio = parse_priority(priority)
        estimate_minutes = validate_minutes(estimate_minutes, "estimate_minutes")
        rule = parse_recurrence(recurring_pattern)

        now = self._now()
        with self.Session.begin() as session:
            self._list_row(session, list_id)
            row = TaskRow(
                id=str(uuid.uuid4()),
                list_id=list_id,
                name=name,
                description=description,
                date=day.isoformat() if day else None,
                deadline=due.isoformat() if due else None,
                priority=prio.value,
                is_completed=False,
                estimate_minutes=estimate_minutes,
                recurring_pattern=rule.to_json() if rule else None,
                created_at=now,
                updated_at=now,
            )
            for label_id in label_ids or []:
                row.labels.append(self._label_row(session, label_id))
            session.add(row)
            session.add(self._log(row.id, TaskAction.CREATED, now))
            task = _to_task(row)
        logger.info(f"Created task '{name}' ({task.id}) in list {list_id}")
        return task

    def update_task(self, task_id: str, **changes) -> Task:
        """
        Apply field changes to a task.

        Writes one 'updated' log entry per field whose value actually changed
        and bumps updated_at only when something changed.
        """
        unknown = set(changes) - set(_UPDATABLE)
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        parsed = {}
        for key, value in changes.items():
            match key:
                case "name":
                    parsed[key] = validate_name(value)
                case "description":
                    parsed[key] = validate_description(value or None)
                case "date":
                    parsed[key] = parse_task_date(value)
                case "deadline":
                    parsed[key] = parse_deadline(value)
                case "priority":
                    parsed[key] = parse_priority(value)
                case "recurring_pattern":
                    parsed[key] = parse_recurrence(value)
                case "estimate_minutes" | "actual_minutes":
                    parsed[key] = validate_minutes(value, key)
                case "list_id":
                    parsed[key] = value

        with self.Session.begin() as session:
            row = self._task_row(session, task_id)
            current = _to_task(row)
            validate_schedule(
                parsed.get("date", current.date),
                parsed.get("deadline", current.deadline),
            )
            if "list_id" in parsed:
                self._list_row(session, parsed["list_id"])

            now = self._now()
            changed = []
            for key, value in parsed.items():
                old = getattr(current, key)
                if old == value:
                    continue
                setattr(row, key, _log_value(value) if key in _STORED_AS_TEXT else value)
                session.add(
                    self._log(
                        task_id,
                        TaskAction.UPDATED,
                        now,
                        field_changed=key,
                        old_value=_log_value(old),
                        new_value=_log_value(value),
                    )
                )
                changed.append(key)
            if changed:
                row.updated_at = now
            task = _to_task(row)

        if changed:
            logger.info(f"Updated task {task_id}: {', '.join(changed)}")
        return task

    def toggle_completion(self, task_id: str) -> Task:
        """Flip is_completed, setting or clearing completed_at."""
        with self.Session.begin() as session:
            row = self._task_row(session, task_id)
            now = self._now()
            row.is_completed = not row.is_completed
            row.completed_at = now if row.is_completed else None
            row.updated_at = now
            action = TaskAction.COMPLETED if row.is_completed else TaskAction.UNCOMPLETED
            session.add(self._log(task_id, action, now))
            task = _to_task(row)
        logger.info(f"Task {task_id} {action.value}")
        return task

    def complete_recurring(self, task_id: str) -> tuple[Task, Task | None]:
        """
        Complete a task and, if it repeats, create its next occurrence.

        The next task copies list, name, description, priority, estimate and
        rule. Its date steps from the completed task's date (today when
        undated). The deadline steps by the same rule until it is on or after
        the new date. Returns (completed task, next task or None).
        """
        with self.Session.begin() as session:
            row = self._task_row(session, task_id)
            if row.is_completed:
                raise ValidationError("Task is already completed", "is_completed")
            now = self._now()
            row.is_completed = True
            row.completed_at = now
            row.updated_at = now
            session.add(self._log(task_id, TaskAction.COMPLETED, now))
            done = _to_task(row)

            following = None
            rule = done.recurring_pattern
            if rule is not None:
                day = next_occurrence(done.date or self._clock_now().date(), rule)
                due = done.deadline
                if due is not None:
                    due = next_occurrence(due, rule)
                    while due.date() < day:
                        due = next_occurrence(due, rule)
                nxt = TaskRow(
                    id=str(uuid.uuid4()),
                    list_id=row.list_id,
                    name=row.name,
                    description=row.description,
                    date=day.isoformat(),
                    deadline=due.isoformat() if due else None,
                    priority=row.priority,
                    is_completed=False,
                    estimate_minutes=row.estimate_minutes,
                    recurring_pattern=row.recurring_pattern,
                    created_at=now,
                    updated_at=now,
                )
                session.add(nxt)
                session.add(self._log(nxt.id, TaskAction.CREATED, now))
                following = _to_task(nxt)

        logger.info(f"Task {task_id} completed")
        if following:
            logger.info(f"Next occurrence of {task_id} is {following.id} on {following.date}")
        return done, following

    def complete_all_in_list(self, list_id: str) -> int:
        """Mark every open task of a list completed. Returns how many changed."""
        with self.Session.begin() as session:
            self._list_row(session, list_id)
            now = self._now()
            rows = session.scalars(
                select(TaskRow).where(TaskRow.list_id == list_id, TaskRow.is_completed.is_(False))
            ).all()
            for row in rows:
                row.is_completed = True
                row.completed_at = now
                row.updated_at = now
                session.add(self._log(row.id, TaskAction.COMPLETED, now))
        logger.info(f"Completed {len(rows)} tasks in list {list_id}")
        return len(rows)

    def delete_task(self, task_id: str) -> None:
        """Delete a task with its subtasks, reminders, label links and logs."""
        with self.Session.begin() as session:
            row = self._task_row(session, task_id)
            name = row.name
            session.delete(row)
        # The task's log goes with it, so the deletion is recorded here only
        logger.info(f"Deleted task '{name}' ({task_id})")

    # ============== Labels ==============

    def create_label(self, name: str, color: str | None = None, icon: str | None = None) -> Label:
        name = validate_name(name, LABEL_NAME_MAX, "Label")
        color = validate_color(color)
        icon = _validate_icon(icon)
        row = LabelRow(id=str(uuid.uuid4()), name=name, color=color, icon=icon, created_at=self._now())
        with self.Session.begin() as session:
            session.add(row)
        logger.info(f"Created label '{name}' ({row.id})")
        return _to_label(row)

    def update_label(
        self,
        label_id: str,
        name: str | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> Label:
        """Rename or restyle a label. None leaves a field alone, "" clears color or icon."""
        with self.Session.begin() as session:
            row = self._label_row(session, label_id)
            if name is not None:
                row.name = validate_name(name, LABEL_NAME_MAX, "Label")
            if color is not None:
                row.color = validate_color(color)
            if icon is not None:
                row.icon = _validate_icon(icon or None)
            label = _to_label(row)
        logger.info(f"Updated label {label_id}")
        return label

    def delete_label(self, label_id: str) -> None:
        """Delete a label. Tasks keep existing; only their links go."""
        with self.Session.begin() as session:
            session.delete(self._label_row(session, label_id))
        logger.info(f"Deleted label {label_id}")

    def add_label_to_task(self, task_id: str, label_id: str) -> bool:
        """Attach a label. Returns False if it was already attached."""
        with self.Session.begin() as session:
            row = self._task_row(session, task_id)
            label = self._label_row(session, label_id)
            if label in row.labels:
                return False
            row.labels.append(label)
        return True

    def remove_label_from_task(self, task_id: str, label_id: str) -> bool:
        with self.Session.begin() as session:
            row = self._task_row(session, task_id)
            label = self._label_row(session, label_id)
            if label not in row.labels:
                return False
            row.labels.remove(label)
        return True

    # ============== Subtasks and reminders ==============

    def add_subtask(self, task_id: str, name: str) -> Subtask:
        name = validate_name(name, what="Subtask")
        now = self._now()
        with self.Session.begin() as session:
            self._task_row(session, task_id)
            row = SubtaskRow(id=str(uuid.uuid4()), task_id=task_id, name=name, is_completed=False, created_at=now)
            session.add(row)
            subtask = _to_subtask(row)
        logger.info(f"Added subtask '{name}' to task {task_id}")
        return subtask

    def toggle_subtask(self, subtask_id: str) -> Subtask:
        """Flip a subtask's completion."""
        with self.Session.begin() as session:
            row = session.get(SubtaskRow, subtask_id)
            if row is None:
                raise NotFoundError(f"Subtask not found: {subtask_id}")
            row.is_completed = not row.is_completed
            subtask = _to_subtask(row)
        logger.info(f"Subtask {subtask_id} {'completed' if subtask.is_completed else 'reopened'}")
        return subtask

    def add_reminder(self, task_id: str, reminder_time: str | datetime) -> Reminder:
        when = parse_deadline(reminder_time)
        if when is None:
            raise ValidationError("Reminder time is required", "reminder_time")
        now = self._now()
        with self.Session.begin() as session:
            self._task_row(session, task_id)
            row = ReminderRow(
                id=str(uuid.uuid4()),
                task_id=task_id,
                reminder_time=when.isoformat(),
                is_triggered=False,
                created_at=now,
            )
            session.add(row)
            reminder = _to_reminder(row)
        logger.info(f"Added reminder for task {task_id} at {reminder.reminder_time}")
        return reminder

    def mark_reminder_triggered(self, reminder_id: str) -> bool:
        """Mark a reminder as fired. Returns False if it already was."""
        with self.Session.begin() as session:
            row = session.get(ReminderRow, reminder_id)
            if row is None:
                raise NotFoundError(f"Reminder not found: {reminder_id}")
            if row.is_triggered:
                return False
            row.is_triggered = True
        return True

    # ============== Helpers ==============

    def _task_row(self, session, task_id: str) -> TaskRow:
        row = session.get(TaskRow, task_id)
        if row is None:
            raise NotFoundError(f"Task not found: {task_id}")
        return row

    def _list_row(self, session, list_id: str) -> ListRow:
        row = session.get(ListRow, list_id)
        if row is None:
            raise NotFoundError(f"List not found: {list_id}")
        return row

    def _label_row(self, session, label_id: str) -> LabelRow:
        row = session.get(LabelRow, label_id)
        if row is None:
            raise NotFoundError(f"Label not found: {label_id}")
        return row

    @staticmethod
    def _log(
        task_id: str,
        action: TaskAction,
        now: str,
        field_changed: str | None = None,
        old_value: str | None = None,
        new_value: str | None = None,
    ) -> TaskLogRow:
        return TaskLogRow(
            id=str(uuid.uuid4()),
            task_id=task_id,
            action=action.value,
            field_changed=field_changed,
            old_value=old_value,
            new_value=new_value,
            created_at=now,
            created_by="user",
        )


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
