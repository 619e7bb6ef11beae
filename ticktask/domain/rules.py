from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from .conditions import RuleCondition, evaluate
from .entities import TaskEntity
from .enums import QUADRANT_ORDER, ConditionOperator, ConditionType, Quadrant, RuleLogic


@dataclass(frozen=True)
class EisenhowerRule:
    quadrant: Quadrant
    name: str
    logic: RuleLogic = RuleLogic.AND
    conditions: tuple[RuleCondition, ...] = ()
    id: str | None = None


def rule_matches(rule: EisenhowerRule, task: TaskEntity, now: datetime) -> bool:
    results = (evaluate(task, condition, now) for condition in rule.conditions)
    if rule.logic == RuleLogic.AND:
        return all(results)
    if rule.logic == RuleLogic.OR:
        return any(results)
    return False


Attempt = Callable[[TaskEntity, Sequence[EisenhowerRule], datetime], Optional[Quadrant]]


def _manual_override(task: TaskEntity, rules: Sequence[EisenhowerRule], now: datetime) -> Quadrant | None:
    if task.manual_quadrant is None:
        return None
    try:
        return Quadrant(task.manual_quadrant)
    except ValueError:
        return None


def _rule_cascade(task: TaskEntity, rules: Sequence[EisenhowerRule], now: datetime) -> Quadrant | None:
    for quadrant in QUADRANT_ORDER:
        for rule in rules:
            if rule.quadrant == quadrant and rule_matches(rule, task, now):
                return quadrant
    return None


def _default_sink(task: TaskEntity, rules: Sequence[EisenhowerRule], now: datetime) -> Quadrant:
    return Quadrant.ELIMINATE


# First non-empty answer wins.
CLASSIFICATION_CHAIN: tuple[Attempt, ...] = (_manual_override, _rule_cascade, _default_sink)


def classify(task: TaskEntity, rules: Sequence[EisenhowerRule], now: datetime) -> Quadrant:
    for attempt in CLASSIFICATION_CHAIN:
        quadrant = attempt(task, rules, now)
        if quadrant is not None:
            return quadrant
    return Quadrant.ELIMINATE


DEFAULT_RULES: tuple[EisenhowerRule, ...] = (
    EisenhowerRule(
        id="rule-do",
        quadrant=Quadrant.DO,
        name="Do First",
        logic=RuleLogic.OR,
        conditions=(
            RuleCondition.build(ConditionType.PRIORITY, ConditionOperator.EQUALS, "high"),
            RuleCondition.build(ConditionType.DUE_DATE, ConditionOperator.WITHIN, "2"),
        ),
    ),
    EisenhowerRule(
        id="rule-schedule",
        quadrant=Quadrant.SCHEDULE,
        name="Schedule",
        logic=RuleLogic.AND,
        conditions=(
            RuleCondition.build(ConditionType.PRIORITY, ConditionOperator.IN, ["medium", "high"]),
            RuleCondition.build(ConditionType.DUE_DATE, ConditionOperator.AFTER, "2"),
        ),
    ),
    EisenhowerRule(
        id="rule-delegate",
        quadrant=Quadrant.DELEGATE,
        name="Delegate",
        logic=RuleLogic.AND,
        conditions=(
            RuleCondition.build(ConditionType.PRIORITY, ConditionOperator.EQUALS, "low"),
            RuleCondition.build(ConditionType.DUE_DATE, ConditionOperator.WITHIN, "7"),
        ),
    ),
    EisenhowerRule(
        id="rule-eliminate",
        quadrant=Quadrant.ELIMINATE,
        name="Eliminate",
        logic=RuleLogic.AND,
        conditions=(
            RuleCondition.build(ConditionType.PRIORITY, ConditionOperator.EQUALS, "none"),
        ),
    ),
)
