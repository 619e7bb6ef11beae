from __future__ import annotations

import logging
import re
import uuid
from dataclasses import fields, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol

from ticktask.domain.entities import TaskEntity, UserSettings, unique_tags
from ticktask.domain.enums import Priority, Quadrant, RecurrenceKind
from ticktask.domain.filters import TaskFilters, filter_tasks
from ticktask.domain.recurrence import build_next_instance, parse_recurrence
from ticktask.infra.repository import SettingsRepository, TagRepository, TaskRepository

logger = logging.getLogger(__name__)

INLINE_TAG = re.compile(r"#(\w+)")
TASK_FIELDS = frozenset(field.name for field in fields(TaskEntity))


class DueDateParser(Protocol):
    def __call__(self, text: str, now: datetime) -> Optional[tuple[datetime, str]]:
        """Return the parsed instant and the matched text fragment, or None."""


def new_id() -> str:
    return str(uuid.uuid4())


def extract_inline_tags(title: str) -> tuple[str, list[str]]:
    tags = INLINE_TAG.findall(title)
    clean = " ".join(INLINE_TAG.sub("", title).split())
    return clean, tags


def normalize_recurrence(rule: str | None) -> str | None:
    if not rule:
        return None
    spec = parse_recurrence(rule)
    if spec is None:
        raise ValueError(f"Unknown recurrence rule {rule!r}")
    if spec.kind == RecurrenceKind.WEEKDAYS and not spec.weekdays:
        raise ValueError("A weekdays recurrence needs at least one weekday")
    return rule.strip()


class TaskService:
    def __init__(
        self,
        repo: TaskRepository,
        tag_repo: TagRepository | None = None,
        settings_repo: SettingsRepository | None = None,
        due_parser: DueDateParser | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._repo = repo
        self._tag_repo = tag_repo
        self._settings_repo = settings_repo
        self._due_parser = due_parser
        self._clock = clock
        self._id_factory = id_factory

    def list_tasks(self, filters: TaskFilters | None = None, week_starts_on: int = 1) -> list[TaskEntity]:
        tasks = self._repo.list_tasks()
        if filters is None:
            return tasks
        return filter_tasks(tasks, filters, self._clock(), week_starts_on)

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._repo.get_task(task_id)

    def create_task(self, title: str, defaults: dict | None = None) -> TaskEntity:
        defaults = self._normalize_data(defaults or {})
        settings = self._settings()
        now = self._clock()

        clean_title, inline_tags = extract_inline_tags(title)
        due_date = defaults.pop("due_date", None)
        if due_date is None and self._due_parser is not None:
            due_date, clean_title = self._parse_due_from_title(clean_title, now)
        if due_date is None:
            due_date = self._default_due_date(settings, now)

        if not clean_title:
            raise ValueError("Task title must not be empty")

        self._ensure_tags(inline_tags)
        tags = unique_tags([*inline_tags, *settings.auto_apply_tags, *defaults.pop("tags", ())])

        data = {
            "title": clean_title,
            "description": "",
            "list_id": None,
            "priority": settings.default_priority.value,
            "completed": False,
            "recurrence_rule": None,
            "manual_quadrant": None,
            "reminder_at": None,
            **defaults,
            "id": self._id_factory(),
            "tags": tags,
            "due_date": due_date,
            "created_at": now,
            "updated_at": now,
        }
        task = self._repo.create_task(data)
        logger.info("Created task %s", task.id)
        return task

    def update_task(self, task_id: str, data: dict) -> TaskEntity | None:
        before = self._repo.get_task(task_id)
        if before is None:
            return None

        normalized = self._normalize_data(data)
        if "title" in normalized and not str(normalized["title"]).strip():
            raise ValueError("Task title must not be empty")
        normalized["updated_at"] = self._clock()

        if normalized.get("completed") and not before.completed:
            successor = self._next_instance(_apply_changes(before, normalized))
            if successor is not None:
                task = self._repo.complete_with_successor(task_id, normalized, successor)
                logger.info("Spawned %s from recurring task %s due %s", successor.id, task_id, successor.due_date)
                return task
        return self._repo.update_task(task_id, normalized)

    def delete_task(self, task_id: str) -> None:
        self._repo.delete_task(task_id)

    def set_completed(self, task_id: str, completed: bool) -> TaskEntity | None:
        return self.update_task(task_id, {"completed": completed})

    def mark_done(self, task_id: str) -> TaskEntity | None:
        return self.set_completed(task_id, True)

    def toggle_complete(self, task_id: str) -> TaskEntity | None:
        task = self._repo.get_task(task_id)
        if not task:
            return None
        return self.set_completed(task_id, not task.completed)

    def set_manual_quadrant(self, task_id: str, quadrant: Quadrant | str | None) -> TaskEntity | None:
        return self.update_task(task_id, {"manual_quadrant": Quadrant(quadrant) if quadrant else None})

    def _settings(self) -> UserSettings:
        if self._settings_repo is None:
            return UserSettings()
        return self._settings_repo.get_settings() or UserSettings()

    def _parse_due_from_title(self, title: str, now: datetime) -> tuple[datetime | None, str]:
        parsed = self._due_parser(title, now)
        if not parsed:
            return None, title
        due_date, matched = parsed
        return due_date, " ".join(title.replace(matched, "", 1).split())

    def _default_due_date(self, settings: UserSettings, now: datetime) -> datetime | None:
        rule = settings.default_due_date_rule
        if not rule or rule == "none" or self._due_parser is None:
            return None
        parsed = self._due_parser(rule, now)
        return parsed[0] if parsed else None

    def _ensure_tags(self, names: list[str]) -> None:
        if self._tag_repo is None:
            return
        for name in dict.fromkeys(names):
            if self._tag_repo.get_by_name(name) is None:
                self._tag_repo.create_tag({"id": self._id_factory(), "name": name})

    def _normalize_data(self, data: dict) -> dict:
        normalized = dict(data)
        for key, value in normalized.items():
            if isinstance(value, Enum):
                normalized[key] = value.value
        if "priority" in normalized:
            normalized["priority"] = Priority(normalized["priority"] or Priority.NONE).value
        if normalized.get("manual_quadrant"):
            normalized["manual_quadrant"] = Quadrant(normalized["manual_quadrant"]).value
        if "recurrence_rule" in normalized:
            normalized["recurrence_rule"] = normalize_recurrence(normalized["recurrence_rule"])
        if "tags" in normalized:
            normalized["tags"] = unique_tags(normalized["tags"] or ())
        return normalized

    def _next_instance(self, task: TaskEntity) -> TaskEntity | None:
        if not task.recurrence_rule or task.next_occurrence_id:
            return None
        successor = build_next_instance(task, self._clock(), self._id_factory())
        if successor is None:
            logger.warning("Task %s has unusable recurrence %r", task.id, task.recurrence_rule)
        return successor


def _apply_changes(task: TaskEntity, data: dict) -> TaskEntity:
    changes = {key: value for key, value in data.items() if key in TASK_FIELDS}
    if "priority" in changes:
        changes["priority"] = Priority(changes["priority"])
    if "manual_quadrant" in changes:
        changes["manual_quadrant"] = Quadrant(changes["manual_quadrant"]) if changes["manual_quadrant"] else None
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"])
    return replace(task, **changes)
