"""Conversion between domain entities and JSON-ready dictionaries.

The wire format keeps the camelCase keys of stored records and backups.
Unknown enum strings degrade to a default instead of failing the whole
record.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import StrEnum
from typing import Any, Iterable, TypeVar

from .conditions import RuleCondition
from .entities import ListEntity, TagEntity, TaskEntity, UserSettings
from .enums import Priority, Quadrant, RuleLogic, Theme
from .rules import EisenhowerRule
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

E = TypeVar("E", bound=StrEnum)


def coerce_enum(enum_cls: type[E], value: Any, default: E | None) -> E | None:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown %s value %r, using %r", enum_cls.__name__, value, default)
        return default


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            logger.warning("Ignoring unparseable datetime %r", value)
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_tag_names(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return [value]
        if isinstance(value, str):
            return [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(f"Tags must be a list of names, got {value!r}")
    return [str(tag) for tag in value]


def task_to_dict(task: TaskEntity) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "listId": task.list_id,
        "tags": list(task.tags),
        "priority": task.priority.value,
        "dueDate": format_datetime(task.due_date),
        "completed": task.completed,
        "recurrenceRule": task.recurrence_rule,
        "createdAt": format_datetime(task.created_at),
        "updatedAt": format_datetime(task.updated_at),
        "manualQuadrant": task.manual_quadrant.value if task.manual_quadrant else None,
        "reminderAt": format_datetime(task.reminder_at),
        "nextOccurrenceId": task.next_occurrence_id,
    }


def _record_id(data: Any, kind: str) -> str:
    if not isinstance(data, dict):
        raise ValueError(f"{kind} record must be an object, got {data!r}")
    record_id = data.get("id")
    if not record_id:
        raise ValueError(f"{kind} record has no id: {data!r}")
    return str(record_id)


def task_from_dict(data: dict[str, Any]) -> TaskEntity:
    task_id = _record_id(data, "Task")
    try:
        tags = tuple(parse_tag_names(data.get("tags")))
    except ValueError as exc:
        raise ValueError(f"Task {task_id!r}: {exc}") from exc
    now = datetime.now()
    return TaskEntity(
        id=task_id,
        title=str(data.get("title") or ""),
        description=data.get("description") or "",
        list_id=data.get("listId") or None,
        tags=tags,
        priority=coerce_enum(Priority, data.get("priority"), Priority.NONE),
        due_date=parse_datetime(data.get("dueDate")),
        completed=bool(data.get("completed", False)),
        recurrence_rule=data.get("recurrenceRule") or None,
        manual_quadrant=coerce_enum(Quadrant, data.get("manualQuadrant"), None),
        reminder_at=parse_datetime(data.get("reminderAt")),
        next_occurrence_id=data.get("nextOccurrenceId") or None,
        created_at=parse_datetime(data.get("createdAt")) or now,
        updated_at=parse_datetime(data.get("updatedAt")) or now,
    )


def condition_to_dict(condition: RuleCondition) -> dict[str, Any]:
    value = condition.raw_value if condition.raw_value is not None else condition.value
    if isinstance(value, (tuple, set, frozenset)):
        value = list(value)
    return {"type": condition.type, "operator": condition.operator, "value": value}


def condition_from_dict(data: dict[str, Any]) -> RuleCondition:
    return RuleCondition.build(str(data.get("type", "")), str(data.get("operator", "")), data.get("value"))


def rule_to_dict(rule: EisenhowerRule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "quadrant": rule.quadrant.value,
        "name": rule.name,
        "conditions": [condition_to_dict(condition) for condition in rule.conditions],
        "logic": str(rule.logic),
    }


def rule_from_dict(data: dict[str, Any]) -> EisenhowerRule:
    quadrant = coerce_enum(Quadrant, data.get("quadrant"), None)
    if quadrant is None:
        raise ValueError(f"Rule has unknown quadrant {data.get('quadrant')!r}")
    conditions = data.get("conditions") or []
    if isinstance(conditions, str):
        conditions = json.loads(conditions)
    logic = data.get("logic") or RuleLogic.AND.value
    return EisenhowerRule(
        id=data.get("id"),
        quadrant=quadrant,
        name=str(data.get("name") or quadrant.value),
        # An unknown combinator is kept as-is and never matches.
        logic=coerce_enum(RuleLogic, logic, None) or logic,
        conditions=tuple(condition_from_dict(item) for item in conditions if isinstance(item, dict)),
    )


def list_to_dict(item: ListEntity) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "color": item.color,
        "icon": item.icon,
        "sortOrder": item.sort_order,
    }


def list_from_dict(data: dict[str, Any]) -> ListEntity:
    list_id = _record_id(data, "List")
    try:
        sort_order = int(data.get("sortOrder") or 0)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"List {list_id!r} has invalid sortOrder {data.get('sortOrder')!r}") from exc
    return ListEntity(
        id=list_id,
        name=str(data.get("name") or ""),
        color=data.get("color") or "#6b7280",
        icon=data.get("icon") or "list",
        sort_order=sort_order,
    )


def tag_to_dict(tag: TagEntity) -> dict[str, Any]:
    return {"id": tag.id, "name": tag.name, "color": tag.color}


def tag_from_dict(data: dict[str, Any]) -> TagEntity:
    return TagEntity(id=_record_id(data, "Tag"), name=str(data.get("name") or ""), color=data.get("color") or "#6b7280")


def settings_to_dict(settings: UserSettings) -> dict[str, Any]:
    return {
        "defaultPriority": settings.default_priority.value,
        "defaultDueDateRule": settings.default_due_date_rule,
        "defaultReminder": settings.default_reminder,
        "autoApplyTags": list(settings.auto_apply_tags),
        "theme": settings.theme.value,
    }


def settings_from_dict(data: dict[str, Any] | None) -> UserSettings:
    if not data:
        return UserSettings()
    if not isinstance(data, dict):
        raise ValueError(f"Settings must be an object, got {data!r}")
    return UserSettings(
        default_priority=coerce_enum(Priority, data.get("defaultPriority"), Priority.NONE),
        default_due_date_rule=data.get("defaultDueDateRule") or "none",
        default_reminder=str(data.get("defaultReminder") or "none"),
        auto_apply_tags=tuple(parse_tag_names(data.get("autoApplyTags"))),
        theme=coerce_enum(Theme, data.get("theme"), Theme.DARK),
    )


def _parse_rules(items: Iterable[dict[str, Any]]) -> tuple[EisenhowerRule, ...]:
    rules = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping rule record %r", item)
            continue
        try:
            rules.append(rule_from_dict(item))
        except ValueError as exc:
            logger.warning("Skipping rule %r: %s", item.get("id"), exc)
    return tuple(rules)


def build_backup(snapshot: Snapshot, exported_at: datetime) -> dict[str, Any]:
    return {
        "version": BACKUP_VERSION,
        "exportedAt": format_datetime(exported_at),
        "tasks": [task_to_dict(task) for task in snapshot.tasks],
        "lists": [list_to_dict(item) for item in snapshot.lists],
        "tags": [tag_to_dict(tag) for tag in snapshot.tags],
        "settings": settings_to_dict(snapshot.settings),
        "rules": [rule_to_dict(rule) for rule in snapshot.rules],
    }


def parse_backup(data: dict[str, Any]) -> Snapshot:
    if not isinstance(data, dict) or "tasks" not in data:
        raise ValueError("Not a backup payload: missing 'tasks'")
    version = data.get("version", BACKUP_VERSION)
    if version != BACKUP_VERSION:
        raise ValueError(f"Unsupported backup version {version!r}")
    return Snapshot(
        tasks=tuple(task_from_dict(item) for item in _section(data, "tasks")),
        lists=tuple(list_from_dict(item) for item in _section(data, "lists")),
        tags=tuple(tag_from_dict(item) for item in _section(data, "tags")),
        settings=settings_from_dict(data.get("settings")),
        rules=_parse_rules(_section(data, "rules")),
    )


def _section(data: dict[str, Any], key: str) -> list[Any]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"Backup section {key!r} must be a list")
    return items
