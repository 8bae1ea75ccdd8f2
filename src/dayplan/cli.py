"""dayplan CLI - personal task manager."""

import json
import logging
import sys
from datetime import date

import click

from .adapters.sqlite_store import NotFoundError, SQLiteTaskStore
from .config import load_config
from .core.classify import CalendarWindow
from .core.counts import display_count, subtask_progress
from .core.recurrence import RecurrenceType
from .core.search import CompletionFilter, SearchKind
from .core.tasks import Priority, Task, TaskLog
from .core.validation import ValidationError, parse_recurrence
from .core.views import ViewName, ViewResult
from .queries import (
    default_view,
    get_clock,
    get_store,
    list_badges,
    list_view,
    overdue,
    pending_reminders,
    run_view,
    search,
    task_details,
)

PRIORITY_MARKERS = {Priority.HIGH: "!!!", Priority.MEDIUM: "!!", Priority.LOW: "!", Priority.NONE: ""}

EMPTY_MESSAGES = {
    ViewName.TODAY: "Nothing due today.",
    ViewName.WEEK: "Nothing left this week.",
    ViewName.UPCOMING: "Nothing upcoming.",
    ViewName.ALL: "No tasks yet.",
}

REPEAT_CHOICES = ["none"] + [t.value for t in RecurrenceType]


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _open(as_of: date | None = None) -> tuple:
    """Load config and open the store with the right clock. The store closes with the command."""
    config = load_config()
    clock = get_clock(config, as_of)
    store = get_store(config, clock)
    click.get_current_context().call_on_close(store.close)
    return config, clock, store


def _resolve_task(store: SQLiteTaskStore, ref: str) -> Task:
    """Find a task by full id or unique id prefix."""
    try:
        return store.get_task(ref)
    except NotFoundError:
        pass
    matches = [t for t in store.get_all() if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise NotFoundError(f"Task id prefix {ref!r} is ambiguous ({len(matches)} matches)")
    raise NotFoundError(f"Task not found: {ref}")


def _resolve_list(store: SQLiteTaskStore, name: str | None):
    if not name:
        return store.get_default_list()
    found = store.find_list(name)
    if found is None:
        raise NotFoundError(f"List not found: {name}")
    return found


def _resolve_label(store: SQLiteTaskStore, name: str):
    found = store.find_label(name)
    if found is None:
        raise NotFoundError(f"Label not found: {name}")
    return found


def _repeat(repeat: str | None, every: int | None):
    """Rule from --repeat/--every. --every alone means a custom interval."""
    if repeat is None and every is None:
        return None
    return parse_recurrence(repeat or RecurrenceType.CUSTOM.value, every)


def _format_task(task: Task, window: CalendarWindow) -> str:
    check = "x" if task.is_completed else " "
    marker = PRIORITY_MARKERS[task.priority]
    parts = [f"[{check}] {task.id[:8]}  {task.name}"]
    if marker:
        parts.append(marker)
    if task.date and task.date != window.today:
        parts.append(f"({task.date.strftime('%a %b %d')})")
    if task.deadline:
        parts.append(f"due {task.deadline.strftime('%b %d %H:%M')}")
    if task.recurring_pattern:
        parts.append(f"~{task.recurring_pattern.type.value}")
    return " ".join(parts)


def _format_log(entry: TaskLog) -> str:
    when = entry.created_at.strftime("%Y-%m-%d %H:%M") if entry.created_at else "?"
    return f"{when}  {entry.describe()}"


def _show_view(result: ViewResult, as_json: bool, empty_msg: str) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    window = CalendarWindow.for_day(result.date)
    if not result.groups:
        click.echo(empty_msg)
    for i, group in enumerate(result.groups):
        if i:
            click.echo()
        click.echo(f"### {group.title} ({display_count(len(group.tasks))})")
        for task in group.tasks:
            click.echo(f"  {_format_task(task, window)}")

    if result.overdue_count and not result.group("overdue"):
        click.echo(f"\n{display_count(result.overdue_count)} overdue")


def view_options(func):
    """Flags shared by every view command."""
    func = click.option("--json", "as_json", is_flag=True, help="Output as JSON")(func)
    func = click.option(
        "--as-of",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="Pretend today is this day (YYYY-MM-DD)",
    )(func)
    func = click.option(
        "--completed/--no-completed",
        "include_completed",
        default=None,
        help="Show completed tasks (default from config)",
    )(func)
    return func


def _run(view: ViewName, include_completed, as_of, as_json: bool) -> None:
    config, clock, store = _open(as_of.date() if as_of else None)
    options = config.view_options(include_completed, view)
    _show_view(run_view(view, store, clock, options), as_json, EMPTY_MESSAGES[view])


@click.group(invoke_without_command=True)
@click.version_option(package_name="dayplan")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """dayplan - personal task manager.

    With no command, shows the DEFAULT_VIEW from the config (today unless set).
    """
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )
    if ctx.invoked_subcommand is None:
        config, clock, store = _open()
        options = config.view_options()
        _show_view(default_view(store, clock, options), False, EMPTY_MESSAGES[options.current_view])


@main.command()
def init():
    """Create the database and the default Inbox list."""
    config, _, store = _open()
    inbox = store.get_default_list()
    click.echo(f"Database ready at {config.db_path} (default list: {inbox.name})")


@main.command()
@view_options
def today(include_completed, as_of, as_json: bool):
    """Show overdue tasks and today's tasks."""
    _run(ViewName.TODAY, include_completed, as_of, as_json)


@main.command()
@view_options
def week(include_completed, as_of, as_json: bool):
    """Show the rest of this week, through Sunday.

    Tomorrow is always its own group, so on a Sunday it holds next Monday.
    """
    _run(ViewName.WEEK, include_completed, as_of, as_json)


@main.command()
@view_options
def upcoming(include_completed, as_of, as_json: bool):
    """Show every scheduled task from today on."""
    _run(ViewName.UPCOMING, include_completed, as_of, as_json)


@main.command("all")
@view_options
def all_(include_completed, as_of, as_json: bool):
    """Show every task, grouped by date."""
    _run(ViewName.ALL, include_completed, as_of, as_json)


@main.command("list")
@click.argument("name")
@view_options
def list_(name: str, include_completed, as_of, as_json: bool):
    """Show the tasks of one list."""
    config, clock, store = _open(as_of.date() if as_of else None)
    try:
        task_list = _resolve_list(store, name)
    except NotFoundError as e:
        _fail(str(e))
    options = config.view_options(include_completed, ViewName.LIST)
    _show_view(list_view(store, clock, task_list.id, options), as_json, f"{task_list.name} is empty.")


@main.command("range")
@click.argument("start", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.argument("end", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def range_(start, end, as_json: bool):
    """List tasks scheduled between START and END (inclusive)."""
    _, clock, store = _open()
    tasks = store.get_by_date_range(start.date(), end.date())
    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return
    if not tasks:
        click.echo("No tasks in range.")
        return
    window = CalendarWindow.from_reference(clock.now())
    for task in tasks:
        click.echo(_format_task(task, window))


@main.command("overdue")
@click.option("--as-of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
def overdue_(as_of):
    """Print the overdue badge count."""
    _, clock, store = _open(as_of.date() if as_of else None)
    click.echo(display_count(overdue(store, clock)))


@main.command("search")
@click.argument("query")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in SearchKind]),
    default=SearchKind.ALL.value,
    help="What to search",
)
@click.option(
    "--completed",
    type=click.Choice([c.value for c in CompletionFilter]),
    default=CompletionFilter.ALL.value,
    help="Filter tasks by completion",
)
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Maximum results per kind")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def search_(query: str, kind: str, completed: str, limit: int | None, as_json: bool):
    """Search tasks, lists and labels."""
    config, clock, store = _open()
    results = search(
        store,
        query,
        kind=SearchKind(kind),
        completed=CompletionFilter(completed),
        limit=config.search_limit if limit is None else limit,
    )

    if as_json:
        click.echo(json.dumps(results.to_dict(), indent=2))
        return
    if results.empty:
        click.echo("No matches.")
        return

    window = CalendarWindow.from_reference(clock.now())
    if results.tasks:
        click.echo("### Tasks")
        for hit in results.tasks:
            click.echo(f"  {_format_task(hit.item, window)}")
    if results.lists:
        click.echo("### Lists")
        for hit in results.lists:
            click.echo(f"  {hit.item.emoji or '-'} {hit.item.name}")
    if results.labels:
        click.echo("### Labels")
        for hit in results.labels:
            click.echo(f"  #{hit.item.name}")


@main.command()
@click.argument("name")
@click.option("--list", "list_name", default=None, help="List name (default: Inbox)")
@click.option("--date", "day", default=None, help="Scheduled day, YYYY-MM-DD")
@click.option("--deadline", default=None, help="Hard deadline, YYYY-MM-DDTHH:MM")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    default=Priority.NONE.value,
)
@click.option("--description", default=None)
@click.option("--estimate", type=int, default=None, help="Estimate in minutes")
@click.option("--repeat", type=click.Choice(REPEAT_CHOICES), default=None, help="Repeat the task when completed")
@click.option("--every", type=int, default=None, help="Days between repeats (custom)")
def add(name, list_name, day, deadline, priority, description, estimate, repeat, every):
    """Add a task."""
    _, _, store = _open()
    try:
        task_list = _resolve_list(store, list_name)
        task = store.create_task(
            task_list.id,
            name,
            description=description,
            date=day,
            deadline=deadline,
            priority=priority,
            estimate_minutes=estimate,
            recurring_pattern=_repeat(repeat, every),
        )
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    click.echo(f"Added {task.id[:8]} to {task_list.name}: {task.name}")


@main.command()
@click.argument("task_ref")
@click.option("--name", default=None)
@click.option("--date", "day", default=None, help="YYYY-MM-DD, or '' to clear")
@click.option("--deadline", default=None, help="YYYY-MM-DDTHH:MM, or '' to clear")
@click.option("--priority", type=click.Choice([p.value for p in Priority]), default=None)
@click.option("--description", default=None)
@click.option("--list", "list_name", default=None, help="Move to list")
@click.option("--estimate", type=int, default=None, help="Estimate in minutes")
@click.option("--actual", type=int, default=None, help="Time spent in minutes")
@click.option("--repeat", type=click.Choice(REPEAT_CHOICES), default=None, help="Repeat rule, or 'none' to stop")
@click.option("--every", type=int, default=None, help="Days between repeats (custom)")
def edit(task_ref, name, day, deadline, priority, description, list_name, estimate, actual, repeat, every):
    """Change fields of a task."""
    _, _, store = _open()
    changes = {
        "name": name,
        "date": day,
        "deadline": deadline,
        "priority": priority,
        "description": description,
        "estimate_minutes": estimate,
        "actual_minutes": actual,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    try:
        task = _resolve_task(store, task_ref)
        if list_name:
            changes["list_id"] = _resolve_list(store, list_name).id
        if repeat is not None or every is not None:
            changes["recurring_pattern"] = _repeat(repeat, every) or "none"
        if not changes:
            click.echo("Nothing to change.")
            return
        task = store.update_task(task.id, **changes)
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    click.echo(f"Updated {task.id[:8]}: {task.name}")


@main.command()
@click.argument("task_ref")
def done(task_ref):
    """Toggle a task's completion. Completing a repeating task schedules the next one."""
    _, _, store = _open()
    try:
        task = _resolve_task(store, task_ref)
        if task.recurring_pattern and not task.is_completed:
            task, following = store.complete_recurring(task.id)
        else:
            task, following = store.toggle_completion(task.id), None
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    state = "Completed" if task.is_completed else "Reopened"
    click.echo(f"{state} {task.id[:8]}: {task.name}")
    if following:
        click.echo(f"Next {following.id[:8]} on {following.date.isoformat()}")


@main.command()
@click.argument("task_ref")
def rm(task_ref):
    """Delete a task."""
    _, _, store = _open()
    try:
        task = _resolve_task(store, task_ref)
        store.delete_task(task.id)
    except NotFoundError as e:
        _fail(str(e))
    click.echo(f"Deleted {task.id[:8]}: {task.name}")


@main.command()
@click.argument("task_ref")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(task_ref, as_json: bool):
    """Show a task with its labels, subtasks and reminders."""
    _, _, store = _open()
    try:
        details = task_details(store, _resolve_task(store, task_ref).id)
    except NotFoundError as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps(details.to_dict(), indent=2))
        return

    task = details.task
    marker = PRIORITY_MARKERS[task.priority]
    click.echo(f"{task.name} {marker}".rstrip())
    click.echo(f"  id: {task.id}")
    click.echo(f"  list: {details.task_list.name}")
    if task.date:
        click.echo(f"  date: {task.date.isoformat()}")
    if task.deadline:
        click.echo(f"  deadline: {task.deadline.strftime('%Y-%m-%d %H:%M')}")
    if task.recurring_pattern:
        click.echo(f"  repeats: {task.recurring_pattern.type.value}")
    if task.description:
        click.echo(f"  {task.description}")
    if details.labels:
        click.echo("  labels: " + " ".join(f"#{l.name}" for l in details.labels))
    if details.subtasks:
        finished, total = details.progress
        click.echo(f"  subtasks ({finished}/{total}):")
        for n, sub in enumerate(details.subtasks, 1):
            click.echo(f"    [{'x' if sub.is_completed else ' '}] {n}. {sub.name}")
    if details.reminders:
        click.echo("  reminders:")
        for r in details.reminders:
            sent = " (sent)" if r.is_triggered else ""
            click.echo(f"    {r.reminder_time.strftime('%Y-%m-%d %H:%M')}{sent}")


def _log_dict(entry: TaskLog) -> dict:
    return {
        "task_id": entry.task_id,
        "action": entry.action.value,
        "field_changed": entry.field_changed,
        "old_value": entry.old_value,
        "new_value": entry.new_value,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


@main.command()
@click.argument("task_ref", required=False)
@click.option("--recent", type=click.IntRange(min=1), default=None, help="Latest N entries across all tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def log(task_ref, recent: int | None, as_json: bool):
    """Show a task's activity log, or recent activity across tasks."""
    _, _, store = _open()
    if task_ref:
        try:
            task = _resolve_task(store, task_ref)
        except NotFoundError as e:
            _fail(str(e))
        entries = store.get_logs_for_task(task.id)
    else:
        entries = store.get_recent_logs(20 if recent is None else recent)

    if as_json:
        click.echo(json.dumps([_log_dict(e) for e in entries], indent=2))
        return

    if task_ref:
        click.echo(f"Activity for {task.name}")
        for entry in entries:
            click.echo(f"  {_format_log(entry)}")
        return

    if not entries:
        click.echo("No activity yet.")
        return
    names = {t.id: t.name for t in store.get_all()}
    for entry in entries:
        click.echo(f"{_format_log(entry)}  ({names.get(entry.task_id, entry.task_id[:8])})")


@main.group()
def subtasks():
    """Manage a task's subtasks."""


@subtasks.command("add")
@click.argument("task_ref")
@click.argument("name")
def subtasks_add(task_ref, name):
    """Add a subtask to a task."""
    _, _, store = _open()
    try:
        task = _resolve_task(store, task_ref)
        store.add_subtask(task.id, name)
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    finished, total = subtask_progress(store.get_subtasks(task.id))
    click.echo(f"Added subtask to {task.name} ({finished}/{total})")


@subtasks.command("toggle")
@click.argument("task_ref")
@click.argument("number", type=click.IntRange(min=1))
def subtasks_toggle(task_ref, number: int):
    """Check or uncheck subtask NUMBER (as numbered by `show`)."""
    _, _, store = _open()
    try:
        task = _resolve_task(store, task_ref)
        subs = store.get_subtasks(task.id)
        if number > len(subs):
            raise NotFoundError(f"{task.name} has {len(subs)} subtasks")
        sub = store.toggle_subtask(subs[number - 1].id)
    except NotFoundError as e:
        _fail(str(e))
    finished, total = subtask_progress(store.get_subtasks(task.id))
    state = "Checked" if sub.is_completed else "Unchecked"
    click.echo(f"{state} {sub.name} ({finished}/{total})")


@main.group()
def reminders():
    """Manage reminders."""


@reminders.command("add")
@click.argument("task_ref")
@click.argument("when")
def reminders_add(task_ref, when):
    """Remind about a task at WHEN (YYYY-MM-DDTHH:MM)."""
    _, _, store = _open()
    try:
        task = _resolve_task(store, task_ref)
        reminder = store.add_reminder(task.id, when)
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    click.echo(f"Reminder for {task.name} at {reminder.reminder_time.strftime('%Y-%m-%d %H:%M')}")


@reminders.command("due")
@click.option("--mark", is_flag=True, help="Mark the listed reminders as triggered")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def reminders_due(mark: bool, as_json: bool):
    """Show reminders that are due and not yet triggered."""
    _, clock, store = _open()
    due = pending_reminders(store, clock)
    if mark:
        for reminder, _task in due:
            store.mark_reminder_triggered(reminder.id)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {"id": r.id, "task_id": t.id, "task": t.name, "reminder_time": r.reminder_time.isoformat()}
                    for r, t in due
                ],
                indent=2,
            )
        )
        return
    if not due:
        click.echo("No reminders due.")
        return
    for reminder, task in due:
        click.echo(f"{reminder.reminder_time.strftime('%Y-%m-%d %H:%M')}  {task.id[:8]}  {task.name}")


@main.group(invoke_without_command=True)
@click.pass_context
def lists(ctx):
    """Manage lists."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(lists_show)


@lists.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def lists_show(as_json: bool = False):
    """Show lists with their remaining-task badges."""
    _, _, store = _open()
    badges = list_badges(store)
    if as_json:
        click.echo(json.dumps([b.to_dict() for b in badges], indent=2))
        return
    for b in badges:
        emoji = b.task_list.emoji or "-"
        default = " (default)" if b.task_list.is_default else ""
        click.echo(f"{emoji} {b.task_list.name}{default}  {b.badge}")


@lists.command("add")
@click.argument("name")
@click.option("--color", default=None, help="Hex colour, e.g. #22c55e")
@click.option("--emoji", default=None)
def lists_add(name, color, emoji):
    """Create a list."""
    _, _, store = _open()
    try:
        task_list = store.create_list(name, color=color, emoji=emoji)
    except ValidationError as e:
        _fail(str(e))
    click.echo(f"Created list {task_list.name}")


@lists.command("edit")
@click.argument("name")
@click.option("--name", "new_name", default=None, help="Rename the list")
@click.option("--color", default=None, help="Hex colour, or '' to clear")
@click.option("--emoji", default=None, help="Emoji, or '' to clear")
def lists_edit(name, new_name, color, emoji):
    """Rename or restyle a list."""
    _, _, store = _open()
    if new_name is None and color is None and emoji is None:
        click.echo("Nothing to change.")
        return
    try:
        task_list = _resolve_list(store, name)
        task_list = store.update_list(task_list.id, name=new_name, color=color, emoji=emoji)
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    click.echo(f"Updated list {task_list.name}")


@lists.command("done-all")
@click.argument("name")
def lists_done_all(name):
    """Complete every open task in a list."""
    _, _, store = _open()
    try:
        task_list = _resolve_list(store, name)
        count = store.complete_all_in_list(task_list.id)
    except NotFoundError as e:
        _fail(str(e))
    click.echo(f"Completed {count} tasks in {task_list.name}")


@lists.command("rm")
@click.argument("name")
@click.confirmation_option(prompt="Delete this list and all its tasks?")
def lists_rm(name):
    """Delete a list and all its tasks."""
    _, _, store = _open()
    try:
        task_list = _resolve_list(store, name)
        removed = store.delete_list(task_list.id)
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    click.echo(f"Deleted list {task_list.name} ({removed} tasks)")


@main.group(invoke_without_command=True)
@click.pass_context
def labels(ctx):
    """Manage labels."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(labels_show)


@labels.command("show")
def labels_show():
    """Show labels."""
    _, _, store = _open()
    all_labels = store.get_labels()
    if not all_labels:
        click.echo("No labels.")
        return
    for label in all_labels:
        click.echo(f"#{label.name}")


@labels.command("add")
@click.argument("name")
@click.option("--color", default=None, help="Hex colour, e.g. #22c55e")
@click.option("--icon", default=None)
def labels_add(name, color, icon):
    """Create a label."""
    _, _, store = _open()
    try:
        label = store.create_label(name, color=color, icon=icon)
    except ValidationError as e:
        _fail(str(e))
    click.echo(f"Created label #{label.name}")


@labels.command("edit")
@click.argument("name")
@click.option("--name", "new_name", default=None, help="Rename the label")
@click.option("--color", default=None, help="Hex colour, or '' to clear")
@click.option("--icon", default=None, help="Icon, or '' to clear")
def labels_edit(name, new_name, color, icon):
    """Rename or restyle a label."""
    _, _, store = _open()
    if new_name is None and color is None and icon is None:
        click.echo("Nothing to change.")
        return
    try:
        label = _resolve_label(store, name)
        label = store.update_label(label.id, name=new_name, color=color, icon=icon)
    except (ValidationError, NotFoundError) as e:
        _fail(str(e))
    click.echo(f"Updated label #{label.name}")


@labels.command("rm")
@click.argument("name")
def labels_rm(name):
    """Delete a label. Its tasks are kept."""
    _, _, store = _open()
    try:
        label = _resolve_label(store, name)
        store.delete_label(label.id)
    except NotFoundError as e:
        _fail(str(e))
    click.echo(f"Deleted label #{label.name}")


@labels.command("tasks")
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def labels_tasks(name, as_json: bool):
    """Show the tasks carrying a label, newest first."""
    _, clock, store = _open()
    try:
        label = _resolve_label(store, name)
    except NotFoundError as e:
        _fail(str(e))
    tasks = store.get_tasks_for_label(label.id)
    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return
    if not tasks:
        click.echo(f"No tasks tagged #{label.name}.")
        return
    window = CalendarWindow.from_reference(clock.now())
    for task in tasks:
        click.echo(_format_task(task, window))


@labels.command("tag")
@click.argument("task_ref")
@click.argument("label_name")
@click.option("--remove", is_flag=True, help="Detach instead of attach")
def labels_tag(task_ref, label_name, remove: bool):
    """Attach a label to a task (or detach with --remove)."""
    _, _, store = _open()
    try:
        task = _resolve_task(store, task_ref)
        label = _resolve_label(store, label_name)
        if remove:
            store.remove_label_from_task(task.id, label.id)
        else:
            store.add_label_to_task(task.id, label.id)
    except NotFoundError as e:
        _fail(str(e))
    verb = "Removed" if remove else "Tagged"
    click.echo(f"{verb} #{label.name} on {task.name}")


if __name__ == "__main__":
    main()
