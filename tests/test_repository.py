from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from ticktask.domain.conditions import RuleCondition
from ticktask.domain.entities import TaskEntity, UserSettings
from ticktask.domain.enums import Priority, Quadrant, RuleLogic, Theme
from ticktask.domain.rules import DEFAULT_RULES, EisenhowerRule
from ticktask.domain.snapshot import Snapshot
from ticktask.infra.repository import (
    ListRepository,
    RuleRepository,
    SettingsRepository,
    TagRepository,
    TaskRepository,
    restore_snapshot,
)
from ticktask.infra.seed import DEFAULT_LISTS, seed_defaults
from ticktask.services.catalog_service import ListService, TagService
from ticktask.services.rule_service import RuleService
from ticktask.services.settings_service import SettingsService
from ticktask.services.task_service import TaskService


def _task_data(task_id: str, **kwargs) -> dict:
    data = {
        "id": task_id,
        "title": kwargs.pop("title", "Task"),
        "created_at": datetime(2026, 1, 14, 9, 0),
        "updated_at": datetime(2026, 1, 14, 9, 0),
    }
    data.update(kwargs)
    return data


def test_task_round_trip_keeps_tags_and_enums(session_factory) -> None:
    repo = TaskRepository(session_factory)
    repo.create_task(_task_data(
        "t1",
        tags=("work", "urgent", "work"),
        priority="high",
        manual_quadrant="delegate",
        due_date=datetime(2026, 1, 16, 17, 0),
        recurrence_rule="weekdays:1,3,5",
    ))

    task = repo.get_task("t1")

    assert task.tags == ("work", "urgent")
    assert task.priority == Priority.HIGH
    assert task.manual_quadrant == Quadrant.DELEGATE
    assert task.due_date == datetime(2026, 1, 16, 17, 0)
    assert task.completed is False


def test_update_and_delete_task(session_factory) -> None:
    repo = TaskRepository(session_factory)
    repo.create_task(_task_data("t1"))

    updated = repo.update_task("t1", {"completed": True, "next_occurrence_id": "t2"})
    assert updated.completed is True
    assert updated.next_occurrence_id == "t2"
    assert repo.update_task("missing", {"completed": True}) is None

    repo.delete_task("t1")
    assert repo.get_task("t1") is None


def test_deleting_list_detaches_tasks(session_factory) -> None:
    tasks = TaskRepository(session_factory)
    lists = ListRepository(session_factory)
    service = ListService(lists, tasks)
    work = service.create_list("Work")
    tasks.create_task(_task_data("t1", list_id=work.id))
    tasks.create_task(_task_data("t2", list_id="other"))

    service.delete_list(work.id)

    assert lists.get_list(work.id) is None
    assert tasks.get_task("t1").list_id is None
    assert tasks.get_task("t2").list_id == "other"


def test_rules_are_replaced_as_a_batch(session_factory) -> None:
    repo = RuleRepository(session_factory)
    repo.replace_rules(DEFAULT_RULES)
    assert repo.count_rules() == 4

    custom = EisenhowerRule(
        id="mine",
        quadrant=Quadrant.DO,
        name="Urgent tag",
        logic=RuleLogic.OR,
        conditions=(RuleCondition.build("tag", "contains", ["urgent"]), RuleCondition.build("dueDate", "within", "x")),
    )
    saved = repo.replace_rules([custom])

    assert [rule.id for rule in saved] == ["mine"]
    assert saved[0].conditions[0].value == ("urgent",)
    assert saved[0].conditions[1].is_valid is False
    assert saved[0].conditions[1].raw_value == "x"


def test_rule_service_rejects_duplicate_quadrants(session_factory) -> None:
    service = RuleService(RuleRepository(session_factory))
    service.reset_defaults()
    duplicate = [
        EisenhowerRule(quadrant=Quadrant.DO, name="a"),
        EisenhowerRule(quadrant=Quadrant.DO, name="b"),
    ]

    with pytest.raises(ValueError):
        service.save_rules(duplicate)

    assert len(service.list_rules()) == 4


def test_rule_service_classify_uses_stored_rules(session_factory) -> None:
    service = RuleService(RuleRepository(session_factory))
    service.reset_defaults()
    task = TaskEntity(id="t1", title="Urgent", priority=Priority.HIGH)

    assert service.classify(task, datetime(2026, 1, 14, 9, 0)) == Quadrant.DO


def test_seed_defaults_is_idempotent(session_factory) -> None:
    seed_defaults(session_factory)
    seed_defaults(session_factory)

    assert RuleRepository(session_factory).count_rules() == 4
    assert [item.id for item in ListRepository(session_factory).list_lists()] == [l.id for l in DEFAULT_LISTS]
    assert SettingsRepository(session_factory).get_settings() == UserSettings()


def test_settings_service_partial_update(session_factory) -> None:
    service = SettingsService(SettingsRepository(session_factory))

    updated = service.update_settings(theme="light", auto_apply_tags=["home", "home"], default_reminder="15")

    assert updated.theme == Theme.LIGHT
    assert updated.auto_apply_tags == ("home",)
    assert updated.reminder_lead_minutes == 15
    assert service.get_settings().default_priority == Priority.NONE
    with pytest.raises(ValueError):
        service.update_settings(colour="red")


def test_tag_service_dedupes_by_name_and_rename_leaves_rules_alone(session_factory) -> None:
    tags = TagService(TagRepository(session_factory))
    rules = RuleService(RuleRepository(session_factory))
    urgent = tags.create_tag("#urgent")
    assert tags.create_tag("URGENT").id == urgent.id

    rules.save_rules([EisenhowerRule(
        quadrant=Quadrant.DO,
        name="Urgent",
        conditions=(RuleCondition.build("tag", "contains", "urgent"),),
    )])
    tags.rename_tag(urgent.id, "asap")

    assert rules.list_rules()[0].conditions[0].value == ("urgent",)
    assert [tag.name for tag in tags.list_tags()] == ["asap"]


def test_restore_snapshot_replaces_everything(session_factory) -> None:
    seed_defaults(session_factory)
    TaskRepository(session_factory).create_task(_task_data("old"))
    snapshot = Snapshot(
        tasks=(TaskEntity(id="new", title="Restored", tags=("a",), priority=Priority.LOW),),
        settings=UserSettings(theme=Theme.LIGHT),
        rules=DEFAULT_RULES[:1],
    )

    restore_snapshot(snapshot, session_factory)

    assert [task.id for task in TaskRepository(session_factory).list_tasks()] == ["new"]
    assert ListRepository(session_factory).list_lists() == []
    assert SettingsRepository(session_factory).get_settings().theme == Theme.LIGHT
    assert [rule.quadrant for rule in RuleRepository(session_factory).list_rules()] == [Quadrant.DO]


def test_rule_preview_classifies_without_saving(session_factory) -> None:
    service = RuleService(RuleRepository(session_factory))
    service.reset_defaults()
    task = TaskEntity(id="t1", title="Tagged", tags=("urgent",))
    draft = [EisenhowerRule(
        quadrant=Quadrant.DELEGATE,
        name="Urgent tag",
        conditions=(RuleCondition.build("tag", "contains", "urgent"),),
    )]

    partition = service.preview([task], draft, datetime(2026, 1, 14, 9, 0))

    assert [t.id for t in partition[Quadrant.DELEGATE]] == ["t1"]
    assert service.classify(task, datetime(2026, 1, 14, 9, 0)) == Quadrant.ELIMINATE


def test_completion_and_successor_are_written_together(session_factory) -> None:
    repo = TaskRepository(session_factory)
    ids = iter(["other", "t1", "t2"])
    service = TaskService(repo, clock=lambda: datetime(2026, 1, 14, 9, 0), id_factory=lambda: next(ids))
    service.create_task("Other")
    task = service.create_task("Standup", {"due_date": datetime(2026, 1, 16, 9, 30), "recurrence_rule": "weekdays:1,2,3,4,5"})

    done = service.mark_done(task.id)

    assert done.completed is True
    assert done.next_occurrence_id == "t2"
    assert repo.get_task("t2").due_date == datetime(2026, 1, 19, 9, 30)


def test_failed_successor_insert_rolls_back_completion(session_factory) -> None:
    repo = TaskRepository(session_factory)
    ids = iter(["other", "t1", "other"])
    service = TaskService(repo, clock=lambda: datetime(2026, 1, 14, 9, 0), id_factory=lambda: next(ids))
    service.create_task("Other")
    task = service.create_task("Daily", {"due_date": datetime(2026, 1, 14, 8, 0), "recurrence_rule": "daily"})

    with pytest.raises(IntegrityError):
        service.mark_done(task.id)

    stored = repo.get_task(task.id)
    assert stored.completed is False
    assert stored.next_occurrence_id is None
    assert len(repo.list_tasks()) == 2
