from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import click

from ticktask.config import SETTINGS
from ticktask.domain.codec import rule_to_dict, settings_to_dict
from ticktask.domain.entities import TaskEntity
from ticktask.domain.enums import QUADRANT_LABELS, QUADRANT_ORDER, DueBucket, Priority, Quadrant, RuleLogic, Theme
from ticktask.domain.filters import TaskFilters
from ticktask.domain.rules import EisenhowerRule
from ticktask.services.backup_service import BackupService
from ticktask.services.catalog_service import DEFAULT_COLOR, ListService, TagService
from ticktask.services.reminder_service import ReminderService
from ticktask.services.rule_service import RuleService
from ticktask.services.settings_service import SettingsService
from ticktask.services.state import AppState, Repositories
from ticktask.services.task_service import TaskService

DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"]


@dataclass
class AppContext:
    state: AppState
    clock: Callable[[], datetime] = datetime.now
    tasks: TaskService = field(init=False)
    rules: RuleService = field(init=False)
    backups: BackupService = field(init=False)
    lists: ListService = field(init=False)
    tags: TagService = field(init=False)
    settings: SettingsService = field(init=False)

    def __post_init__(self) -> None:
        repos = self.state.repos
        self.tasks = TaskService(repos.tasks, repos.tags, repos.settings, clock=self.clock)
        self.rules = RuleService(repos.rules)
        self.backups = BackupService(self.state)
        self.lists = ListService(repos.lists, repos.tasks)
        self.tags = TagService(repos.tags)
        self.settings = SettingsService(repos.settings)

    def resolve_task(self, prefix: str) -> TaskEntity:
        snapshot = self.state.refresh()
        exact = snapshot.find_task(prefix)
        if exact is not None:
            return exact
        matches = [task for task in snapshot.tasks if task.id.startswith(prefix)]
        if not matches:
            raise click.ClickException(f"No task with id {prefix!r}")
        if len(matches) > 1:
            raise click.ClickException(f"Task id {prefix!r} is ambiguous")
        return matches[0]


def _default_context(verbose: bool = False) -> AppContext:
    from ticktask.infra.db import init_db
    from ticktask.infra.logging import setup_logging
    from ticktask.infra.seed import seed_defaults

    setup_logging(verbose)
    init_db()
    seed_defaults()
    return AppContext(state=AppState(Repositories()))


def format_task(task: TaskEntity, now: datetime) -> str:
    parts = [task.id[:8], "[x]" if task.completed else "[ ]", task.title]
    if task.priority != Priority.NONE:
        parts.append(f"!{task.priority.value}")
    if task.due_date:
        marker = " (overdue)" if task.due_date < now and not task.completed else ""
        parts.append(f"due {task.due_date:%Y-%m-%d %H:%M}{marker}")
    if task.recurrence_rule:
        parts.append(f"repeats {task.recurrence_rule}")
    if task.manual_quadrant:
        parts.append(f"pinned:{task.manual_quadrant.value}")
    parts.extend(f"#{tag}" for tag in task.tags)
    return "  ".join(parts)


def describe_rule(rule: EisenhowerRule) -> str:
    conditions = []
    for condition in rule_to_dict(rule)["conditions"]:
        text = f"{condition['type']} {condition['operator']}"
        value = condition["value"]
        if value is not None:
            text += f" {','.join(map(str, value)) if isinstance(value, list) else value}"
        conditions.append(text)
    if not conditions:
        return "matches everything" if rule.logic == RuleLogic.AND else "matches nothing"
    return f" {rule.logic} ".join(conditions)


@click.group()
@click.version_option(package_name="ticktask")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to the console")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """TickTask - Eisenhower matrix task manager."""
    if ctx.obj is None:
        ctx.obj = _default_context(verbose)


@main.command()
@click.pass_obj
def init(app: AppContext) -> None:
    """Create the database schema and seed defaults."""
    snapshot = app.state.refresh()
    click.echo(f"Database ready: {len(snapshot.rules)} rules, {len(snapshot.lists)} lists.")


@main.command()
@click.argument("title", nargs=-1, required=True)
@click.option("--priority", "-p", type=click.Choice([p.value for p in Priority]))
@click.option("--due", "-d", type=click.DateTime(formats=DATETIME_FORMATS))
@click.option("--list", "list_id", help="List id")
@click.option("--tag", "-t", "tags", multiple=True)
@click.option("--repeat", "-r", help="daily, weekly, biweekly, monthly or weekdays:1,3,5")
@click.option("--quadrant", "-q", type=click.Choice([q.value for q in Quadrant]))
@click.pass_obj
def add(app: AppContext, title: tuple[str, ...], priority, due, list_id, tags, repeat, quadrant) -> None:
    """Add a task. Words starting with # become tags."""
    defaults: dict = {"tags": tags}
    if priority:
        defaults["priority"] = priority
    if due:
        defaults["due_date"] = due
    if list_id:
        defaults["list_id"] = list_id
    if repeat:
        defaults["recurrence_rule"] = repeat
    if quadrant:
        defaults["manual_quadrant"] = quadrant
    try:
        task = app.tasks.create_task(" ".join(title), defaults)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added {format_task(task, app.clock())}")


@main.command()
@click.argument("task_id")
@click.pass_obj
def done(app: AppContext, task_id: str) -> None:
    """Mark a task completed; recurring tasks spawn their next instance."""
    task = app.resolve_task(task_id)
    if task.completed:
        click.echo(f"Already completed: {task.title}")
        return
    app.tasks.mark_done(task.id)
    click.echo(f"Completed {task.title}")

    completed = app.tasks.get_task(task.id)
    if completed and completed.next_occurrence_id and not task.next_occurrence_id:
        successor = app.tasks.get_task(completed.next_occurrence_id)
        if successor:
            click.echo(f"Next: {format_task(successor, app.clock())}")


@main.command()
@click.argument("task_id")
@click.pass_obj
def reopen(app: AppContext, task_id: str) -> None:
    """Mark a completed task as open again."""
    task = app.resolve_task(task_id)
    app.tasks.set_completed(task.id, False)
    click.echo(f"Reopened {task.title}")


@main.command()
@click.argument("task_id")
@click.argument("quadrant", type=click.Choice([q.value for q in Quadrant] + ["auto"]))
@click.pass_obj
def move(app: AppContext, task_id: str, quadrant: str) -> None:
    """Pin a task to a quadrant, or 'auto' to let the rules decide."""
    task = app.resolve_task(task_id)
    app.tasks.set_manual_quadrant(task.id, None if quadrant == "auto" else quadrant)
    click.echo(f"{task.title} -> {quadrant}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def matrix(app: AppContext, as_json: bool) -> None:
    """Show open tasks sorted into the four quadrants."""
    now = app.clock()
    partition = app.state.refresh().by_quadrant(now)
    if as_json:
        click.echo(json.dumps({q.value: [t.id for t in partition[q]] for q in QUADRANT_ORDER}, indent=2))
        return
    for quadrant in QUADRANT_ORDER:
        tasks = partition[quadrant]
        click.echo(f"== {QUADRANT_LABELS[quadrant]} ({len(tasks)})")
        for task in tasks:
            click.echo(f"  {format_task(task, now)}")


@main.command(name="ls")
@click.option("--search", "-s")
@click.option("--tag", "-t", "tags", multiple=True)
@click.option("--list", "list_id")
@click.option("--priority", "-p", "priorities", multiple=True, type=click.Choice([p.value for p in Priority]))
@click.option("--due", type=click.Choice([b.value for b in DueBucket]))
@click.option("--completed/--open", default=None)
@click.pass_obj
def list_tasks(app: AppContext, search, tags, list_id, priorities, due, completed) -> None:
    """List tasks matching every given filter."""
    filters = TaskFilters(
        search=search,
        tags=tuple(tags),
        list_id=list_id,
        priorities=tuple(Priority(p) for p in priorities),
        due=DueBucket(due) if due else None,
        completed=completed,
    )
    now = app.clock()
    for task in app.state.refresh().filtered(filters, now, SETTINGS.week_starts_on):
        click.echo(format_task(task, now))


@main.command()
@click.pass_obj
def rules(app: AppContext) -> None:
    """Show the classification rules in evaluation order."""
    by_quadrant = {rule.quadrant: rule for rule in app.rules.list_rules()}
    for quadrant in QUADRANT_ORDER:
        rule = by_quadrant.get(quadrant)
        if rule is None:
            click.echo(f"{quadrant.value}: (no rule)")
            continue
        click.echo(f"{quadrant.value}: {rule.name} [{describe_rule(rule)}]")


@main.command(name="reset-rules")
@click.pass_obj
def reset_rules(app: AppContext) -> None:
    """Replace the rule set with the defaults."""
    app.rules.reset_defaults()
    click.echo("Rules reset to defaults.")


@main.command()
@click.pass_obj
def reminders(app: AppContext) -> None:
    """List tasks whose reminder falls in the next few minutes."""
    repos = app.state.repos
    service = ReminderService(
        repos.tasks,
        repos.settings,
        notifier=lambda task: click.echo(f"Reminder: {task.title}"),
        window=timedelta(minutes=SETTINGS.reminder_window_min),
    )
    if not service.check(app.clock()):
        click.echo("No reminders due.")


@main.group(invoke_without_command=True)
@click.pass_context
def lists(ctx: click.Context) -> None:
    """Show task lists, or manage them with a subcommand."""
    if ctx.invoked_subcommand is not None:
        return
    app: AppContext = ctx.obj
    counts = Counter(task.list_id for task in app.state.refresh().tasks)
    for item in app.lists.list_lists():
        click.echo(f"{item.id}  {item.name}  ({counts[item.id]} tasks)")


@lists.command(name="add")
@click.argument("name")
@click.option("--color", default=DEFAULT_COLOR)
@click.pass_obj
def add_list(app: AppContext, name: str, color: str) -> None:
    try:
        item = app.lists.create_list(name, color=color)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added list {item.name} ({item.id})")


@lists.command(name="rm")
@click.argument("list_id")
@click.pass_obj
def remove_list(app: AppContext, list_id: str) -> None:
    """Delete a list; its tasks stay, without a list."""
    if app.state.repos.lists.get_list(list_id) is None:
        raise click.ClickException(f"No list with id {list_id!r}")
    app.lists.delete_list(list_id)
    click.echo(f"Deleted list {list_id}")


@main.group(invoke_without_command=True)
@click.pass_context
def tags(ctx: click.Context) -> None:
    """Show tags, or manage them with a subcommand."""
    if ctx.invoked_subcommand is None:
        for tag in ctx.obj.tags.list_tags():
            click.echo(f"{tag.id}  #{tag.name}")


@tags.command(name="add")
@click.argument("name")
@click.pass_obj
def add_tag(app: AppContext, name: str) -> None:
    try:
        tag = app.tags.create_tag(name)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Tag #{tag.name} ({tag.id})")


@tags.command(name="rename")
@click.argument("tag_id")
@click.argument("name")
@click.pass_obj
def rename_tag(app: AppContext, tag_id: str, name: str) -> None:
    """Rename a tag. Rules that name the old tag are left unchanged."""
    tag = app.tags.rename_tag(tag_id, name)
    if tag is None:
        raise click.ClickException(f"No tag with id {tag_id!r}")
    click.echo(f"Renamed to #{tag.name}")


@tags.command(name="rm")
@click.argument("tag_id")
@click.pass_obj
def remove_tag(app: AppContext, tag_id: str) -> None:
    app.tags.delete_tag(tag_id)
    click.echo(f"Deleted tag {tag_id}")


@main.command()
@click.option("--priority", "default_priority", type=click.Choice([p.value for p in Priority]))
@click.option("--due-rule", "default_due_date_rule")
@click.option("--reminder", "default_reminder", help="Minutes before the due date, or 'none'")
@click.option("--auto-tag", "auto_apply_tags", multiple=True)
@click.option("--theme", type=click.Choice([t.value for t in Theme]))
@click.pass_obj
def settings(app: AppContext, **options) -> None:
    """Show the user settings; options update them."""
    changes = {key: value for key, value in options.items() if value not in (None, ())}
    try:
        current = app.settings.update_settings(**changes) if changes else app.settings.get_settings()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    for key, value in settings_to_dict(current).items():
        click.echo(f"{key}: {', '.join(value) if isinstance(value, list) else value}")


@main.command(name="export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def export_backup(app: AppContext, path: Path) -> None:
    """Write a JSON backup of every task, list, tag, setting and rule."""
    app.backups.export_backup(path, app.clock())
    click.echo(f"Backup written to {path}")


@main.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.confirmation_option(prompt="This replaces all current data. Continue?")
@click.pass_obj
def import_backup(app: AppContext, path: Path) -> None:
    """Restore a JSON backup, replacing all current data."""
    try:
        snapshot = app.backups.import_backup(path)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Restored {len(snapshot.tasks)} tasks.")


if __name__ == "__main__":
    main()
