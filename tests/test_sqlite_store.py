"""Tests for the SQLite task store."""

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from dayplan.adapters.clock import FixedClock
from dayplan.adapters.sqlite_store import (
    INBOX_COLOR,
    INBOX_EMOJI,
    INBOX_NAME,
    NotFoundError,
    ReminderRow,
    SQLiteTaskStore,
    SubtaskRow,
    TaskLogRow,
    TaskRow,
    task_labels,
)
from dayplan.core.recurrence import Recurrence, RecurrenceType
from dayplan.core.tasks import Priority, TaskAction
from dayplan.core.validation import ValidationError


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(tmp_path, clock):
    s = SQLiteTaskStore(tmp_path / "tasks.db", clock=clock)
    yield s
    s.close()


@pytest.fixture
def inbox(store):
    return store.get_default_list()


def count_rows(store, table) -> int:
    with store.Session() as session:
        return session.scalar(select(func.count()).select_from(table))


class TestInit:
    def test_seeds_inbox(self, store):
        lists = store.get_lists()
        assert len(lists) == 1
        inbox = lists[0]
        assert inbox.name == INBOX_NAME
        assert inbox.color == INBOX_COLOR
        assert inbox.emoji == INBOX_EMOJI
        assert inbox.is_default is True

    def test_reopen_does_not_seed_twice(self, tmp_path, clock):
        path = tmp_path / "tasks.db"
        first = SQLiteTaskStore(path, clock=clock)
        inbox_id = first.get_default_list().id
        first.close()

        second = SQLiteTaskStore(path, clock=clock)
        assert [l.id for l in second.get_lists()] == [inbox_id]
        second.close()

    def test_creates_parent_directory(self, tmp_path, clock):
        path = tmp_path / "nested" / "dir" / "tasks.db"
        SQLiteTaskStore(path, clock=clock).close()
        assert path.exists()


class TestCreateTask:
    def test_fields(self, store, inbox):
        task = store.create_task(
            inbox.id,
            "  Write report ",
            description="Q1 numbers",
            date="2025-01-20",
            deadline="2025-01-20T17:00",
            priority="high",
            estimate_minutes=90,
        )
        loaded = store.get_task(task.id)
        assert loaded == task
        assert loaded.name == "Write report"
        assert loaded.date == date(2025, 1, 20)
        assert loaded.deadline == datetime(2025, 1, 20, 17, 0)
        assert loaded.priority == Priority.HIGH
        assert loaded.estimate_minutes == 90
        assert loaded.is_completed is False
        assert loaded.created_at == datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)

    def test_logs_created(self, store, inbox):
        task = store.create_task(inbox.id, "Buy milk")
        logs = store.get_logs_for_task(task.id)
        assert [l.action for l in logs] == [TaskAction.CREATED]
        assert logs[0].created_by == "user"

    def test_unknown_list(self, store):
        with pytest.raises(NotFoundError):
            store.create_task("missing", "Buy milk")
        assert store.get_all() == []

    def test_deadline_before_date(self, store, inbox):
        with pytest.raises(ValidationError) as exc:
            store.create_task(inbox.id, "Late", date="2025-01-20", deadline="2025-01-19T23:00")
        assert exc.value.field == "deadline"
        assert store.get_all() == []

    def test_blank_name(self, store, inbox):
        with pytest.raises(ValidationError):
            store.create_task(inbox.id, "   ")

    def test_with_labels(self, store, inbox):
        work = store.create_label("work")
        task = store.create_task(inbox.id, "Standup", label_ids=[work.id])
        assert [l.name for l in store.get_labels_for_task(task.id)] == ["work"]


class TestUpdateTask:
    def test_logs_each_changed_field(self, store, inbox):
        task = store.create_task(inbox.id, "Draft", priority="low")
        store.update_task(task.id, name="Final", priority="high", date="2025-01-16")

        updates = [l for l in store.get_logs_for_task(task.id) if l.action == TaskAction.UPDATED]
        by_field = {l.field_changed: (l.old_value, l.new_value) for l in updates}
        assert by_field == {
            "name": ("Draft", "Final"),
            "priority": ("low", "high"),
            "date": (None, "2025-01-16"),
        }

    def test_noop_update_writes_nothing(self, store, inbox, clock):
        task = store.create_task(inbox.id, "Same", date="2025-01-16")
        clock.instant += timedelta(hours=1)

        updated = store.update_task(task.id, name="Same", date="2025-01-16")
        assert updated.updated_at == task.updated_at
        assert len(store.get_logs_for_task(task.id)) == 1

    def test_bumps_updated_at(self, store, inbox, clock):
        task = store.create_task(inbox.id, "Old")
        clock.instant += timedelta(hours=1)
        updated = store.update_task(task.id, name="New")
        assert updated.updated_at == task.updated_at + timedelta(hours=1)

    def test_clear_date(self, store, inbox):
        task = store.create_task(inbox.id, "Someday", date="2025-01-16")
        assert store.update_task(task.id, date="").date is None

    def test_move_to_list(self, store, inbox):
        errands = store.create_list("Errands")
        task = store.create_task(inbox.id, "Post office")
        store.update_task(task.id, list_id=errands.id)
        assert [t.name for t in store.get_by_list(errands.id)] == ["Post office"]
        assert store.get_by_list(inbox.id) == []

    def test_deadline_checked_against_stored_date(self, store, inbox):
        task = store.create_task(inbox.id, "Report", date="2025-01-20")
        with pytest.raises(ValidationError):
            store.update_task(task.id, deadline="2025-01-19T09:00")

    def test_unknown_field(self, store, inbox):
        task = store.create_task(inbox.id, "Report")
        with pytest.raises(ValidationError, match="Unknown task fields: color"):
            store.update_task(task.id, color="#ffffff")

    def test_unknown_task(self, store):
        with pytest.raises(NotFoundError):
            store.update_task("missing", name="x")


class TestToggleCompletion:
    def test_complete_and_reopen(self, store, inbox):
        task = store.create_task(inbox.id, "Laundry")

        done = store.toggle_completion(task.id)
        assert done.is_completed is True
        assert done.completed_at == datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)

        reopened = store.toggle_completion(task.id)
        assert reopened.is_completed is False
        assert reopened.completed_at is None

        actions = [l.action for l in store.get_logs_for_task(task.id)]
        assert actions == [TaskAction.CREATED, TaskAction.COMPLETED, TaskAction.UNCOMPLETED]

    def test_complete_all_in_list(self, store, inbox):
        a = store.create_task(inbox.id, "a")
        store.create_task(inbox.id, "b")
        store.toggle_completion(a.id)

        assert store.complete_all_in_list(inbox.id) == 1
        assert all(t.is_completed for t in store.get_by_list(inbox.id))
        assert store.complete_all_in_list(inbox.id) == 0


class TestDelete:
    def test_delete_task_cascades(self, store, inbox):
        label = store.create_label("home")
        task = store.create_task(inbox.id, "Clean", label_ids=[label.id])
        store.add_subtask(task.id, "Kitchen")
        store.add_reminder(task.id, "2025-01-16T08:00")

        store.delete_task(task.id)

        assert store.get_all() == []
        assert count_rows(store, SubtaskRow) == 0
        assert count_rows(store, ReminderRow) == 0
        assert count_rows(store, TaskLogRow) == 0
        assert count_rows(store, task_labels) == 0
        assert [l.name for l in store.get_labels()] == ["home"]

    def test_delete_unknown_task(self, store):
        with pytest.raises(NotFoundError):
            store.delete_task("missing")

    def test_delete_list_cascades(self, store, inbox):
        work = store.create_list("Work")
        store.create_task(work.id, "a")
        store.create_task(work.id, "b")
        store.create_task(inbox.id, "c")

        assert store.delete_list(work.id) == 2
        assert [t.name for t in store.get_all()] == ["c"]
        assert count_rows(store, TaskLogRow) == 1

    def test_default_list_protected(self, store, inbox):
        with pytest.raises(ValidationError, match="default list"):
            store.delete_list(inbox.id)
        assert store.get_default_list().id == inbox.id

    def test_delete_label_keeps_task(self, store, inbox):
        label = store.create_label("home")
        task = store.create_task(inbox.id, "Clean", label_ids=[label.id])
        store.delete_label(label.id)
        assert store.get_labels_for_task(task.id) == []
        assert store.get_task(task.id).name == "Clean"


class TestReads:
    def test_ordering_undated_last(self, store, inbox):
        store.create_task(inbox.id, "undated")
        store.create_task(inbox.id, "later", date="2025-02-01")
        store.create_task(inbox.id, "sooner", date="2025-01-16")
        store.create_task(inbox.id, "sooner too", date="2025-01-16")
        assert [t.name for t in store.get_all()] == ["sooner", "sooner too", "later", "undated"]

    def test_date_range_inclusive(self, store, inbox):
        for day in ("2025-01-12", "2025-01-13", "2025-01-19", "2025-01-20"):
            store.create_task(inbox.id, day, date=day)
        store.create_task(inbox.id, "undated")

        found = store.get_by_date_range(date(2025, 1, 13), date(2025, 1, 19))
        assert [t.name for t in found] == ["2025-01-13", "2025-01-19"]

    def test_lists_with_counts(self, store, inbox):
        work = store.create_list("Work", color="#22c55e")
        store.create_list("Empty")
        a = store.create_task(work.id, "a")
        store.create_task(work.id, "b")
        store.toggle_completion(a.id)

        counts = {c.name: (c.task_count, c.completed_count) for c in store.get_lists_with_counts()}
        assert counts == {"Inbox": (0, 0), "Work": (2, 1), "Empty": (0, 0)}

    def test_default_list_first(self, store):
        store.create_list("Alpha")
        assert store.get_lists()[0].is_default is True

    def test_find_list_case_insensitive(self, store):
        work = store.create_list("Work")
        assert store.find_list("  work ").id == work.id
        assert store.find_list("home") is None

    def test_label_attach_detach(self, store, inbox):
        task = store.create_task(inbox.id, "Gym")
        label = store.create_label("health", color="#ef4444")
        assert store.add_label_to_task(task.id, label.id) is True
        assert store.add_label_to_task(task.id, label.id) is False
        assert store.remove_label_from_task(task.id, label.id) is True
        assert store.remove_label_from_task(task.id, label.id) is False

    def test_label_validation(self, store):
        with pytest.raises(ValidationError):
            store.create_label("x" * 51)
        with pytest.raises(ValidationError):
            store.create_label("ok", color="red")

    def test_recent_logs_newest_first(self, store, inbox, clock):
        first = store.create_task(inbox.id, "first")
        clock.instant += timedelta(minutes=5)
        second = store.create_task(inbox.id, "second")
        assert [l.task_id for l in store.get_recent_logs()] == [second.id, first.id]

    def test_subtasks_and_reminders(self, store, inbox):
        task = store.create_task(inbox.id, "Trip")
        store.add_subtask(task.id, "Pack")
        store.add_reminder(task.id, "2025-01-17T07:30")
        assert [s.name for s in store.get_subtasks(task.id)] == ["Pack"]
        assert store.get_reminders(task.id)[0].reminder_time == datetime(2025, 1, 17, 7, 30)


class TestRecurring:
    def test_next_occurrence_copies_fields(self, store, inbox):
        task = store.create_task(
            inbox.id,
            "Team sync",
            description="Agenda in doc",
            date="2025-01-15",
            deadline="2025-01-15T17:00",
            priority="high",
            estimate_minutes=30,
            recurring_pattern="every_week",
        )

        done, following = store.complete_recurring(task.id)

        assert done.is_completed
        assert following.id != task.id
        assert not following.is_completed
        assert following.list_id == inbox.id
        assert following.name == "Team sync"
        assert following.description == "Agenda in doc"
        assert following.date == date(2025, 1, 22)
        assert following.deadline == datetime(2025, 1, 22, 17, 0)
        assert following.priority == Priority.HIGH
        assert following.estimate_minutes == 30
        assert following.recurring_pattern == Recurrence(RecurrenceType.EVERY_WEEK)

    def test_logs(self, store, inbox):
        task = store.create_task(inbox.id, "Stretch", date="2025-01-15", recurring_pattern="every_day")
        _, following = store.complete_recurring(task.id)
        assert [l.action for l in store.get_logs_for_task(task.id)] == [TaskAction.CREATED, TaskAction.COMPLETED]
        assert [l.action for l in store.get_logs_for_task(following.id)] == [TaskAction.CREATED]

    def test_undated_steps_from_today(self, store, inbox):
        task = store.create_task(inbox.id, "Stretch", recurring_pattern="every_day")
        _, following = store.complete_recurring(task.id)
        assert following.date == date(2025, 1, 16)

    def test_deadline_catches_up_to_new_date(self, store, inbox):
        task = store.create_task(inbox.id, "Report", deadline="2025-01-10T09:00", recurring_pattern="every_week")
        _, following = store.complete_recurring(task.id)
        assert following.date == date(2025, 1, 22)
        assert following.deadline == datetime(2025, 1, 24, 9, 0)

    def test_custom_interval(self, store, inbox):
        task = store.create_task(
            inbox.id, "Water plants", date="2025-01-15", recurring_pattern='{"type": "custom", "interval": 3}'
        )
        _, following = store.complete_recurring(task.id)
        assert following.date == date(2025, 1, 18)

    def test_not_recurring(self, store, inbox):
        task = store.create_task(inbox.id, "Once", date="2025-01-15")
        done, following = store.complete_recurring(task.id)
        assert done.is_completed
        assert following is None
        assert len(store.get_all()) == 1

    def test_already_completed(self, store, inbox):
        task = store.create_task(inbox.id, "Stretch", recurring_pattern="every_day")
        store.toggle_completion(task.id)
        with pytest.raises(ValidationError, match="already completed"):
            store.complete_recurring(task.id)
        assert len(store.get_all()) == 1

    def test_update_pattern_logs_json(self, store, inbox):
        task = store.create_task(inbox.id, "Rent")
        updated = store.update_task(task.id, recurring_pattern="every_month")
        assert updated.recurring_pattern == Recurrence(RecurrenceType.EVERY_MONTH)

        entry = store.get_logs_for_task(task.id)[-1]
        assert entry.field_changed == "recurring_pattern"
        assert entry.old_value is None
        assert entry.new_value == '{"type": "every_month"}'

        assert store.update_task(task.id, recurring_pattern="none").recurring_pattern is None

    def test_unreadable_pattern_is_ignored(self, store, inbox):
        task = store.create_task(inbox.id, "Odd")
        with store.Session.begin() as session:
            session.get(TaskRow, task.id).recurring_pattern = "not json"
        assert store.get_task(task.id).recurring_pattern is None


class TestSubtasks:
    def test_toggle(self, store, inbox):
        task = store.create_task(inbox.id, "Trip")
        sub = store.add_subtask(task.id, "Pack")
        assert not sub.is_completed
        assert store.toggle_subtask(sub.id).is_completed
        assert not store.toggle_subtask(sub.id).is_completed

    def test_toggle_unknown(self, store):
        with pytest.raises(NotFoundError, match="Subtask not found"):
            store.toggle_subtask("missing")

    def test_kept_in_creation_order(self, store, inbox):
        task = store.create_task(inbox.id, "Trip")
        for name in ("Pack", "Book", "Go"):
            store.add_subtask(task.id, name)
        assert [s.name for s in store.get_subtasks(task.id)] == ["Pack", "Book", "Go"]


class TestReminders:
    def test_pending_are_due_and_untriggered(self, store, inbox):
        task = store.create_task(inbox.id, "Call mum")
        store.add_reminder(task.id, "2025-01-15T08:30")
        store.add_reminder(task.id, "2025-01-15T08:00")
        store.add_reminder(task.id, "2025-01-15T10:00")

        pending = store.get_pending_reminders()
        assert [r.reminder_time for r in pending] == [datetime(2025, 1, 15, 8, 0), datetime(2025, 1, 15, 8, 30)]

    def test_pending_as_of(self, store, inbox):
        task = store.create_task(inbox.id, "Call mum")
        store.add_reminder(task.id, "2025-01-15T10:00")
        assert store.get_pending_reminders(datetime(2025, 1, 15, 10, 0)) != []
        assert store.get_pending_reminders(datetime(2025, 1, 15, 9, 59)) == []

    def test_mark_triggered(self, store, inbox):
        task = store.create_task(inbox.id, "Call mum")
        reminder = store.add_reminder(task.id, "2025-01-15T08:00")

        assert store.mark_reminder_triggered(reminder.id) is True
        assert store.mark_reminder_triggered(reminder.id) is False
        assert store.get_pending_reminders() == []
        assert store.get_reminders(task.id)[0].is_triggered

    def test_mark_unknown(self, store):
        with pytest.raises(NotFoundError, match="Reminder not found"):
            store.mark_reminder_triggered("missing")


class TestListAndLabelEdits:
    def test_update_list(self, store, clock):
        work = store.create_list("Work", color="#112233", emoji="W")
        clock.instant += timedelta(hours=1)

        updated = store.update_list(work.id, name="Job", emoji="")
        assert updated.name == "Job"
        assert updated.color == "#112233"
        assert updated.emoji is None
        assert updated.updated_at == work.updated_at + timedelta(hours=1)

    def test_update_list_validates(self, store):
        work = store.create_list("Work")
        with pytest.raises(ValidationError):
            store.update_list(work.id, color="blue")
        with pytest.raises(NotFoundError):
            store.update_list("missing", name="x")

    def test_update_label(self, store):
        label = store.create_label("home", icon="H")
        updated = store.update_label(label.id, name="house", color="#00ff00")
        assert (updated.name, updated.color, updated.icon) == ("house", "#00ff00", "H")
        with pytest.raises(ValidationError):
            store.update_label(label.id, icon="x" * 11)

    def test_tasks_for_label_newest_first(self, store, inbox, clock):
        label = store.create_label("home")
        first = store.create_task(inbox.id, "Clean", label_ids=[label.id])
        clock.instant += timedelta(minutes=5)
        second = store.create_task(inbox.id, "Cook", label_ids=[label.id])
        store.create_task(inbox.id, "Work")

        assert [t.id for t in store.get_tasks_for_label(label.id)] == [second.id, first.id]

    def test_tasks_for_unknown_label(self, store):
        with pytest.raises(NotFoundError):
            store.get_tasks_for_label("missing")
