from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from ticktask.domain.conditions import RuleCondition, evaluate
from ticktask.domain.entities import TaskEntity
from ticktask.domain.enums import Priority

NOW = datetime(2026, 1, 14, 9, 0)


def _task(**kwargs) -> TaskEntity:
    return TaskEntity(id=kwargs.pop("id", "t1"), title=kwargs.pop("title", "Task"), **kwargs)


def _check(task: TaskEntity, type: str, operator: str, value=None) -> bool:
    return evaluate(task, RuleCondition.build(type, operator, value), NOW)


def test_priority_operators() -> None:
    task = _task(priority=Priority.MEDIUM)
    assert _check(task, "priority", "equals", "medium")
    assert not _check(task, "priority", "notEquals", "medium")
    assert _check(task, "priority", "in", ["medium", "high"])
    assert not _check(task, "priority", "notIn", ["medium", "high"])
    assert _check(task, "priority", "notIn", ["low"])


@pytest.mark.parametrize(
    ("due", "operator", "days", "expected"),
    [
        (NOW + timedelta(days=1), "within", 2, True),
        (NOW + timedelta(days=2), "within", 2, True),
        (NOW + timedelta(days=3), "within", 2, False),
        (NOW - timedelta(hours=1), "within", 2, False),
        (NOW + timedelta(days=3), "after", 2, True),
        (NOW + timedelta(days=2), "after", 2, False),
        (NOW + timedelta(days=1), "before", 2, True),
        (NOW + timedelta(days=2), "before", 2, False),
        (NOW + timedelta(hours=12), "within", "0.5", True),
    ],
)
def test_due_date_offsets_measured_from_now(due, operator, days, expected) -> None:
    assert _check(_task(due_date=due), "dueDate", operator, days) is expected


def test_due_date_operators_need_a_due_date() -> None:
    task = _task()
    for operator in ("within", "after", "before", "overdue"):
        assert not _check(task, "dueDate", operator, 2)
    assert _check(task, "dueDate", "noDueDate")


def test_overdue() -> None:
    assert _check(_task(due_date=NOW - timedelta(minutes=1)), "dueDate", "overdue")
    assert not _check(_task(due_date=NOW), "dueDate", "overdue")
    assert not _check(_task(due_date=NOW), "dueDate", "noDueDate")


def test_tag_contains_single_value_or_set() -> None:
    task = _task(tags=("work", "urgent"))
    assert _check(task, "tag", "contains", "urgent")
    assert _check(task, "tag", "contains", ["home", "work"])
    assert not _check(task, "tag", "contains", ["home"])
    assert _check(task, "tag", "notContains", "home")
    assert not _check(task, "tag", "notContains", ["home", "work"])


def test_list_operators() -> None:
    task = _task(list_id="work")
    assert _check(task, "list", "equals", "work")
    assert _check(task, "list", "notEquals", "inbox")
    assert _check(task, "list", "in", ["work", "personal"])
    assert not _check(_task(), "list", "in", ["work"])
    assert _check(_task(), "list", "notEquals", "work")


def test_status_equals() -> None:
    assert _check(_task(completed=True), "status", "equals", "completed")
    assert not _check(_task(completed=False), "status", "equals", "completed")
    assert _check(_task(completed=False), "status", "equals", "active")


@pytest.mark.parametrize("value", [None, 5, ["completed"], ""])
def test_status_equals_anything_but_completed_selects_open_tasks(value) -> None:
    assert _check(_task(completed=False), "status", "equals", value)
    assert not _check(_task(completed=True), "status", "equals", value)


def test_membership_operators_need_a_list_value() -> None:
    task = _task(priority=Priority.MEDIUM, list_id="work")
    assert not _check(task, "priority", "in", "medium")
    assert not _check(task, "priority", "notIn", "high")
    assert not _check(task, "list", "in", "work")
    assert RuleCondition.build("priority", "notIn", "high").is_valid is False


@pytest.mark.parametrize(
    ("type", "operator", "value"),
    [
        ("dueDate", "within", "soon"),
        ("dueDate", "after", None),
        ("dueDate", "within", float("nan")),
        ("dueDate", "within", True),
        ("dueDate", "within", 10**12),
        ("priority", "in", 5),
        ("priority", "contains", "high"),
        ("status", "notEquals", "completed"),
        ("colour", "equals", "red"),
        ("list", "notIn", ["work"]),
    ],
)
def test_malformed_or_undefined_conditions_never_match(type, operator, value) -> None:
    task = _task(priority=Priority.HIGH, due_date=NOW + timedelta(days=1), list_id="inbox")
    assert _check(task, type, operator, value) is False


def test_build_marks_malformed_values_invalid_and_keeps_raw() -> None:
    condition = RuleCondition.build("dueDate", "within", "soon")
    assert condition.is_valid is False
    assert condition.raw_value == "soon"
    assert RuleCondition.build("dueDate", "within", "7").value == 7.0
