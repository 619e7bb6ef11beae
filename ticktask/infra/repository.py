from __future__ import annotations

import json
from typing import Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from ticktask.domain.codec import (
    coerce_enum,
    condition_from_dict,
    condition_to_dict,
    parse_tag_names,
)
from ticktask.domain.entities import ListEntity, TagEntity, TaskEntity, UserSettings
from ticktask.domain.enums import Priority, Quadrant, RuleLogic, Theme
from ticktask.domain.rules import EisenhowerRule
from ticktask.domain.snapshot import Snapshot

from .db import SessionLocal
from .models import ListModel, RuleModel, SettingsModel, TagModel, TaskModel

SETTINGS_ROW_ID = 1


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title,
        description=model.description or "",
        list_id=model.list_id,
        tags=tuple(parse_tag_names(model.tags)),
        priority=coerce_enum(Priority, model.priority, Priority.NONE),
        due_date=model.due_date,
        completed=bool(model.completed),
        recurrence_rule=model.recurrence_rule,
        manual_quadrant=coerce_enum(Quadrant, model.manual_quadrant, None),
        reminder_at=model.reminder_at,
        next_occurrence_id=model.next_occurrence_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_columns(data: dict) -> dict:
    columns = dict(data)
    if "tags" in columns:
        columns["tags"] = json.dumps(list(columns["tags"] or []))
    for key in ("priority", "manual_quadrant"):
        if columns.get(key) is not None:
            columns[key] = str(columns[key])
    return columns


def _entity_columns(task: TaskEntity) -> dict:
    return _to_columns({
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "list_id": task.list_id,
        "tags": task.tags,
        "priority": task.priority,
        "due_date": task.due_date,
        "completed": task.completed,
        "recurrence_rule": task.recurrence_rule,
        "manual_quadrant": task.manual_quadrant,
        "reminder_at": task.reminder_at,
        "next_occurrence_id": task.next_occurrence_id,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    })


def _rule_to_entity(model: RuleModel) -> EisenhowerRule:
    conditions = json.loads(model.conditions or "[]")
    return EisenhowerRule(
        id=model.id,
        quadrant=Quadrant(model.quadrant),
        name=model.name,
        logic=coerce_enum(RuleLogic, model.logic, None) or model.logic,
        conditions=tuple(condition_from_dict(item) for item in conditions),
    )


def _rule_to_model(rule: EisenhowerRule) -> RuleModel:
    return RuleModel(
        id=rule.id or f"rule-{rule.quadrant.value}",
        quadrant=rule.quadrant.value,
        name=rule.name,
        conditions=json.dumps([condition_to_dict(condition) for condition in rule.conditions]),
        logic=str(rule.logic),
    )


def _list_to_entity(model: ListModel) -> ListEntity:
    return ListEntity(
        id=model.id,
        name=model.name,
        color=model.color,
        icon=model.icon,
        sort_order=model.sort_order,
    )


def _tag_to_entity(model: TagModel) -> TagEntity:
    return TagEntity(id=model.id, name=model.name, color=model.color)


def _settings_to_entity(model: SettingsModel) -> UserSettings:
    return UserSettings(
        default_priority=coerce_enum(Priority, model.default_priority, Priority.NONE),
        default_due_date_rule=model.default_due_date_rule,
        default_reminder=model.default_reminder,
        auto_apply_tags=tuple(parse_tag_names(model.auto_apply_tags)),
        theme=coerce_enum(Theme, model.theme, Theme.DARK),
    )


def _settings_columns(settings: UserSettings) -> dict:
    return {
        "default_priority": settings.default_priority.value,
        "default_due_date_rule": settings.default_due_date_rule,
        "default_reminder": settings.default_reminder,
        "auto_apply_tags": json.dumps(list(settings.auto_apply_tags)),
        "theme": settings.theme.value,
    }


class TaskRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def list_tasks(self) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = select(TaskModel).order_by(TaskModel.created_at.desc())
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: str) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def create_task(self, data: dict) -> TaskEntity:
        with self._session_factory() as session:
            task = TaskModel(**_to_columns(data))
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def update_task(self, task_id: str, data: dict) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None

            for key, value in _to_columns(data).items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def complete_with_successor(self, task_id: str, data: dict, successor: TaskEntity) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            with session.begin():
                task = session.get(TaskModel, task_id)
                if not task:
                    return None
                for key, value in _to_columns(data).items():
                    setattr(task, key, value)
                session.add(TaskModel(**_entity_columns(successor)))
                task.next_occurrence_id = successor.id
            session.refresh(task)
            return _to_entity(task)

    def delete_task(self, task_id: str) -> None:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return
            session.delete(task)
            session.commit()

    def clear_list(self, list_id: str) -> int:
        with self._session_factory() as session:
            result = session.execute(
                update(TaskModel).where(TaskModel.list_id == list_id).values(list_id=None)
            )
            session.commit()
            return result.rowcount or 0


class ListRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def list_lists(self) -> list[ListEntity]:
        with self._session_factory() as session:
            stmt = select(ListModel).order_by(ListModel.sort_order.asc(), ListModel.name.asc())
            return [_list_to_entity(item) for item in session.scalars(stmt)]

    def get_list(self, list_id: str) -> Optional[ListEntity]:
        with self._session_factory() as session:
            item = session.get(ListModel, list_id)
            return _list_to_entity(item) if item else None

    def create_list(self, data: dict) -> ListEntity:
        with self._session_factory() as session:
            if data.get("sort_order") is None:
                data["sort_order"] = self._next_sort_order(session)
            item = ListModel(**data)
            session.add(item)
            session.commit()
            session.refresh(item)
            return _list_to_entity(item)

    def update_list(self, list_id: str, data: dict) -> Optional[ListEntity]:
        with self._session_factory() as session:
            item = session.get(ListModel, list_id)
            if not item:
                return None
            for key, value in data.items():
                setattr(item, key, value)
            session.commit()
            session.refresh(item)
            return _list_to_entity(item)

    def delete_list(self, list_id: str) -> None:
        with self._session_factory() as session:
            item = session.get(ListModel, list_id)
            if not item:
                return
            session.delete(item)
            session.commit()

    @staticmethod
    def _next_sort_order(session: Session) -> int:
        count = session.scalar(select(func.count()).select_from(ListModel))
        return count or 0


class TagRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def list_tags(self) -> list[TagEntity]:
        with self._session_factory() as session:
            stmt = select(TagModel).order_by(TagModel.name.asc())
            return [_tag_to_entity(tag) for tag in session.scalars(stmt)]

    def get_by_name(self, name: str) -> Optional[TagEntity]:
        with self._session_factory() as session:
            stmt = select(TagModel).where(func.lower(TagModel.name) == name.lower())
            tag = session.scalars(stmt).first()
            return _tag_to_entity(tag) if tag else None

    def create_tag(self, data: dict) -> TagEntity:
        with self._session_factory() as session:
            tag = TagModel(**data)
            session.add(tag)
            session.commit()
            session.refresh(tag)
            return _tag_to_entity(tag)

    def update_tag(self, tag_id: str, data: dict) -> Optional[TagEntity]:
        with self._session_factory() as session:
            tag = session.get(TagModel, tag_id)
            if not tag:
                return None
            for key, value in data.items():
                setattr(tag, key, value)
            session.commit()
            session.refresh(tag)
            return _tag_to_entity(tag)

    def delete_tag(self, tag_id: str) -> None:
        with self._session_factory() as session:
            tag = session.get(TagModel, tag_id)
            if not tag:
                return
            session.delete(tag)
            session.commit()


class SettingsRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def get_settings(self) -> Optional[UserSettings]:
        with self._session_factory() as session:
            row = session.get(SettingsModel, SETTINGS_ROW_ID)
            return _settings_to_entity(row) if row else None

    def save_settings(self, settings: UserSettings) -> UserSettings:
        with self._session_factory() as session:
            row = session.get(SettingsModel, SETTINGS_ROW_ID)
            if row is None:
                row = SettingsModel(id=SETTINGS_ROW_ID)
                session.add(row)
            for key, value in _settings_columns(settings).items():
                setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return _settings_to_entity(row)


class RuleRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def list_rules(self) -> list[EisenhowerRule]:
        with self._session_factory() as session:
            stmt = select(RuleModel).order_by(RuleModel.quadrant.asc())
            return [_rule_to_entity(rule) for rule in session.scalars(stmt)]

    def count_rules(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(RuleModel)) or 0

    def replace_rules(self, rules: Iterable[EisenhowerRule]) -> list[EisenhowerRule]:
        with self._session_factory() as session:
            with session.begin():
                session.execute(delete(RuleModel))
                session.add_all([_rule_to_model(rule) for rule in rules])
        return self.list_rules()


def restore_snapshot(snapshot: Snapshot, session_factory: sessionmaker = SessionLocal) -> None:
    with session_factory() as session:
        with session.begin():
            for model in (TaskModel, ListModel, TagModel, RuleModel, SettingsModel):
                session.execute(delete(model))
            session.add_all([TaskModel(**_entity_columns(task)) for task in snapshot.tasks])
            session.add_all([
                ListModel(id=item.id, name=item.name, color=item.color, icon=item.icon, sort_order=item.sort_order)
                for item in snapshot.lists
            ])
            session.add_all([TagModel(id=tag.id, name=tag.name, color=tag.color) for tag in snapshot.tags])
            session.add_all([_rule_to_model(rule) for rule in snapshot.rules])
            session.add(SettingsModel(id=SETTINGS_ROW_ID, **_settings_columns(snapshot.settings)))
