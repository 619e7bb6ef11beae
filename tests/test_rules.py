from __future__ import annotations

from datetime import datetime, timedelta

from ticktask.domain.conditions import RuleCondition
from ticktask.domain.entities import TaskEntity
from ticktask.domain.enums import Priority, Quadrant, RuleLogic
from ticktask.domain.rules import DEFAULT_RULES, EisenhowerRule, classify, rule_matches

NOW = datetime(2026, 1, 14, 9, 0)


def _rule(quadrant: Quadrant, logic: RuleLogic = RuleLogic.AND, *conditions: RuleCondition) -> EisenhowerRule:
    return EisenhowerRule(quadrant=quadrant, name=quadrant.value, logic=logic, conditions=conditions)


HIGH = RuleCondition.build("priority", "equals", "high")


def test_manual_quadrant_wins_over_any_rules() -> None:
    task = TaskEntity(id="t1", title="Pinned", priority=Priority.HIGH, manual_quadrant=Quadrant.DELEGATE)
    assert classify(task, DEFAULT_RULES, NOW) == Quadrant.DELEGATE
    assert classify(task, [], NOW) == Quadrant.DELEGATE
    assert classify(task, [_rule(Quadrant.DO)], NOW) == Quadrant.DELEGATE


def test_order_is_fixed_regardless_of_rule_list_order() -> None:
    task = TaskEntity(id="t1", title="Both", priority=Priority.HIGH)
    rules = [
        _rule(Quadrant.ELIMINATE, RuleLogic.AND, HIGH),
        _rule(Quadrant.SCHEDULE, RuleLogic.AND, HIGH),
        _rule(Quadrant.DO, RuleLogic.AND, HIGH),
    ]
    assert classify(task, rules, NOW) == Quadrant.DO
    assert classify(task, rules[:2], NOW) == Quadrant.SCHEDULE


def test_empty_and_matches_everything_empty_or_matches_nothing() -> None:
    task = TaskEntity(id="t1", title="Anything")
    assert rule_matches(_rule(Quadrant.DO, RuleLogic.AND), task, NOW)
    assert not rule_matches(_rule(Quadrant.DO, RuleLogic.OR), task, NOW)
    assert classify(task, [_rule(Quadrant.DELEGATE, RuleLogic.AND)], NOW) == Quadrant.DELEGATE
    assert classify(task, [_rule(Quadrant.DO, RuleLogic.OR)], NOW) == Quadrant.ELIMINATE


def test_unknown_logic_never_matches() -> None:
    task = TaskEntity(id="t1", title="Anything")
    rule = EisenhowerRule(quadrant=Quadrant.DO, name="odd", logic="XOR")
    assert classify(task, [rule], NOW) == Quadrant.ELIMINATE


def test_no_rule_matches_falls_back_to_eliminate() -> None:
    task = TaskEntity(id="t1", title="Low", priority=Priority.LOW)
    assert classify(task, [_rule(Quadrant.DO, RuleLogic.AND, HIGH)], NOW) == Quadrant.ELIMINATE
    assert classify(task, [], NOW) == Quadrant.ELIMINATE


def test_bad_condition_does_not_abort_classification() -> None:
    task = TaskEntity(id="t1", title="Due", due_date=NOW + timedelta(days=1))
    broken = RuleCondition.build("dueDate", "within", "two")
    rules = [_rule(Quadrant.DO, RuleLogic.OR, broken), _rule(Quadrant.SCHEDULE, RuleLogic.AND)]
    assert classify(task, rules, NOW) == Quadrant.SCHEDULE


def test_default_rules_high_priority_due_tomorrow_is_do() -> None:
    task = TaskEntity(id="t1", title="Ship", priority=Priority.HIGH, due_date=NOW + timedelta(days=1))
    assert classify(task, DEFAULT_RULES, NOW) == Quadrant.DO


def test_default_rules_no_priority_no_due_is_eliminate() -> None:
    task = TaskEntity(id="t1", title="Someday")
    assert classify(task, DEFAULT_RULES, NOW) == Quadrant.ELIMINATE


def test_default_rules_medium_later_is_schedule() -> None:
    task = TaskEntity(id="t1", title="Plan", priority=Priority.MEDIUM, due_date=NOW + timedelta(days=5))
    assert classify(task, DEFAULT_RULES, NOW) == Quadrant.SCHEDULE


def test_default_rules_low_this_week_is_delegate() -> None:
    task = TaskEntity(id="t1", title="Errand", priority=Priority.LOW, due_date=NOW + timedelta(days=4))
    assert classify(task, DEFAULT_RULES, NOW) == Quadrant.DELEGATE


def test_default_rules_medium_without_due_date_falls_through() -> None:
    task = TaskEntity(id="t1", title="Vague", priority=Priority.MEDIUM)
    assert classify(task, DEFAULT_RULES, NOW) == Quadrant.ELIMINATE
