from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable

from .dates import add_days, add_months, add_weeks, get_next_weekday_occurrence
from .entities import TaskEntity
from .enums import RecurrenceKind

logger = logging.getLogger(__name__)

WEEKDAYS_PREFIX = f"{RecurrenceKind.WEEKDAYS.value}:"
LEGACY_WEEKDAYS = frozenset({1, 2, 3, 4, 5})


@dataclass(frozen=True)
class RecurrenceSpec:
    kind: RecurrenceKind
    weekdays: frozenset[int] = frozenset()

    def with_weekdays(self, weekdays: Iterable[int]) -> RecurrenceSpec:
        selected = frozenset(day for day in weekdays if 0 <= day <= 6)
        if not selected:
            logger.warning("Refusing to clear every weekday of %s; keeping %s", self.kind, sorted(self.weekdays))
            return self
        return replace(self, kind=RecurrenceKind.WEEKDAYS, weekdays=selected)

    def __str__(self) -> str:
        return format_recurrence(self)


def parse_recurrence(text: str | None) -> RecurrenceSpec | None:
    if not text:
        return None
    text = text.strip()
    if text.startswith(WEEKDAYS_PREFIX):
        return RecurrenceSpec(RecurrenceKind.WEEKDAYS, _parse_weekdays(text[len(WEEKDAYS_PREFIX):]))
    if text == RecurrenceKind.WEEKDAYS.value:
        return RecurrenceSpec(RecurrenceKind.WEEKDAYS, LEGACY_WEEKDAYS)
    try:
        kind = RecurrenceKind(text)
    except ValueError:
        return None
    return RecurrenceSpec(kind)


def _parse_weekdays(raw: str) -> frozenset[int]:
    days = set()
    for token in raw.split(","):
        try:
            day = int(token.strip())
        except ValueError:
            continue
        if 0 <= day <= 6:
            days.add(day)
    return frozenset(days)


def format_recurrence(spec: RecurrenceSpec) -> str:
    if spec.kind == RecurrenceKind.WEEKDAYS:
        return WEEKDAYS_PREFIX + ",".join(str(day) for day in sorted(spec.weekdays))
    return spec.kind.value


def next_occurrence(
    base: datetime | None,
    rule: RecurrenceSpec | str | None,
    now: datetime,
) -> datetime | None:
    spec = parse_recurrence(rule) if isinstance(rule, str) or rule is None else rule
    if spec is None:
        return None

    start = base if base is not None else now
    try:
        return _advance(start, spec)
    except (ValueError, OverflowError) as exc:
        logger.warning("No next occurrence of %s after %s: %s", format_recurrence(spec), start, exc)
        return None


def _advance(start: datetime, spec: RecurrenceSpec) -> datetime | None:
    if spec.kind == RecurrenceKind.DAILY:
        return add_days(start, 1)
    if spec.kind == RecurrenceKind.WEEKLY:
        return add_weeks(start, 1)
    if spec.kind == RecurrenceKind.BIWEEKLY:
        return add_weeks(start, 2)
    if spec.kind == RecurrenceKind.MONTHLY:
        return add_months(start, 1)
    if spec.kind == RecurrenceKind.WEEKDAYS:
        return get_next_weekday_occurrence(start, spec.weekdays)
    return None


def build_next_instance(task: TaskEntity, now: datetime, new_id: str) -> TaskEntity | None:
    next_due = next_occurrence(task.due_date, task.recurrence_rule, now)
    if next_due is None:
        return None
    return TaskEntity(
        id=new_id,
        title=task.title,
        description=task.description,
        tags=task.tags,
        priority=task.priority,
        due_date=next_due,
        completed=False,
        recurrence_rule=task.recurrence_rule,
        manual_quadrant=task.manual_quadrant,
        list_id=task.list_id,
        created_at=now,
        updated_at=now,
    )
