from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable

from .entities import TaskEntity
from .enums import ConditionOperator as Op
from .enums import ConditionType as Type

logger = logging.getLogger(__name__)

ConditionValue = str | tuple[str, ...] | float | None


class ValueShape(Enum):
    NONE = "none"
    TEXT = "text"
    TEXT_SET = "text_set"
    TAG_SET = "tag_set"
    DAYS = "days"
    ANY = "any"


# Every (type, operator) pair that means something, and the value it carries.
CONDITION_SHAPES: dict[tuple[str, str], ValueShape] = {
    (Type.PRIORITY, Op.EQUALS): ValueShape.TEXT,
    (Type.PRIORITY, Op.NOT_EQUALS): ValueShape.TEXT,
    (Type.PRIORITY, Op.IN): ValueShape.TEXT_SET,
    (Type.PRIORITY, Op.NOT_IN): ValueShape.TEXT_SET,
    (Type.DUE_DATE, Op.WITHIN): ValueShape.DAYS,
    (Type.DUE_DATE, Op.AFTER): ValueShape.DAYS,
    (Type.DUE_DATE, Op.BEFORE): ValueShape.DAYS,
    (Type.DUE_DATE, Op.OVERDUE): ValueShape.NONE,
    (Type.DUE_DATE, Op.NO_DUE_DATE): ValueShape.NONE,
    (Type.TAG, Op.CONTAINS): ValueShape.TAG_SET,
    (Type.TAG, Op.NOT_CONTAINS): ValueShape.TAG_SET,
    (Type.LIST, Op.EQUALS): ValueShape.TEXT,
    (Type.LIST, Op.NOT_EQUALS): ValueShape.TEXT,
    (Type.LIST, Op.IN): ValueShape.TEXT_SET,
    # Anything other than "completed" selects open tasks.
    (Type.STATUS, Op.EQUALS): ValueShape.ANY,
}

_INVALID = object()


@dataclass(frozen=True)
class RuleCondition:
    type: str
    operator: str
    value: ConditionValue = None
    is_valid: bool = True
    raw_value: Any = field(default=None, compare=False, hash=False)

    @classmethod
    def build(cls, type: str, operator: str, value: Any = None) -> RuleCondition:
        shape = CONDITION_SHAPES.get((type, operator))
        coerced = _INVALID if shape is None else _coerce(shape, value)
        if coerced is _INVALID:
            logger.debug("Malformed condition %s/%s with value %r", type, operator, value)
            return cls(type=type, operator=operator, value=None, is_valid=False, raw_value=value)
        return cls(type=type, operator=operator, value=coerced, is_valid=True, raw_value=value)

    @property
    def shape(self) -> ValueShape | None:
        return CONDITION_SHAPES.get((self.type, self.operator))


def _coerce(shape: ValueShape, value: Any) -> ConditionValue | object:
    if shape is ValueShape.NONE:
        return None
    if shape is ValueShape.TEXT:
        return value if isinstance(value, str) else _INVALID
    if shape is ValueShape.ANY:
        return tuple(value) if isinstance(value, (list, set, frozenset)) else value
    if shape is ValueShape.TAG_SET and isinstance(value, str):
        return (value,)
    if shape in (ValueShape.TEXT_SET, ValueShape.TAG_SET):
        if isinstance(value, (list, tuple, set, frozenset)) and all(isinstance(item, str) for item in value):
            return tuple(value)
        return _INVALID
    return _coerce_days(value)


def _coerce_days(value: Any) -> float | object:
    if isinstance(value, bool):
        return _INVALID
    try:
        days = float(value)
    except (TypeError, ValueError):
        return _INVALID
    return days if math.isfinite(days) else _INVALID


def _horizon(now: datetime, days: float) -> datetime:
    return now + timedelta(days=days)


Predicate = Callable[[TaskEntity, Any, datetime], bool]

_PREDICATES: dict[tuple[str, str], Predicate] = {
    (Type.PRIORITY, Op.EQUALS): lambda task, value, now: task.priority == value,
    (Type.PRIORITY, Op.NOT_EQUALS): lambda task, value, now: task.priority != value,
    (Type.PRIORITY, Op.IN): lambda task, value, now: task.priority in value,
    (Type.PRIORITY, Op.NOT_IN): lambda task, value, now: task.priority not in value,
    (Type.DUE_DATE, Op.WITHIN): lambda task, value, now: (
        task.due_date is not None and now <= task.due_date <= _horizon(now, value)
    ),
    (Type.DUE_DATE, Op.AFTER): lambda task, value, now: (
        task.due_date is not None and task.due_date > _horizon(now, value)
    ),
    (Type.DUE_DATE, Op.BEFORE): lambda task, value, now: (
        task.due_date is not None and task.due_date < _horizon(now, value)
    ),
    (Type.DUE_DATE, Op.OVERDUE): lambda task, value, now: task.due_date is not None and task.due_date < now,
    (Type.DUE_DATE, Op.NO_DUE_DATE): lambda task, value, now: task.due_date is None,
    (Type.TAG, Op.CONTAINS): lambda task, value, now: any(tag in task.tags for tag in value),
    (Type.TAG, Op.NOT_CONTAINS): lambda task, value, now: not any(tag in task.tags for tag in value),
    (Type.LIST, Op.EQUALS): lambda task, value, now: task.list_id == value,
    (Type.LIST, Op.NOT_EQUALS): lambda task, value, now: task.list_id != value,
    (Type.LIST, Op.IN): lambda task, value, now: (task.list_id or "") in value,
    (Type.STATUS, Op.EQUALS): lambda task, value, now: (
        task.completed if value == "completed" else not task.completed
    ),
}


def evaluate(task: TaskEntity, condition: RuleCondition, now: datetime) -> bool:
    if not condition.is_valid:
        return False
    predicate = _PREDICATES.get((condition.type, condition.operator))
    if predicate is None:
        return False
    try:
        return bool(predicate(task, condition.value, now))
    except (TypeError, ValueError, OverflowError) as exc:
        logger.debug("Condition %s/%s failed on task %s: %s", condition.type, condition.operator, task.id, exc)
        return False
