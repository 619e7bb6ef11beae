from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from .entities import TaskEntity

DEFAULT_REMINDER_WINDOW = timedelta(minutes=5)


def reminder_instant(task: TaskEntity, lead_minutes: int | None = None) -> datetime | None:
    if task.reminder_at is not None:
        return task.reminder_at
    if task.due_date is None:
        return None
    if lead_minutes:
        return task.due_date - timedelta(minutes=lead_minutes)
    return task.due_date


def tasks_needing_reminder(
    tasks: Iterable[TaskEntity],
    now: datetime,
    window: timedelta = DEFAULT_REMINDER_WINDOW,
    lead_minutes: int | None = None,
) -> list[TaskEntity]:
    horizon = now + window
    selected = []
    for task in tasks:
        if task.completed:
            continue
        instant = reminder_instant(task, lead_minutes)
        if instant is not None and now <= instant <= horizon:
            selected.append(task)
    return sorted(selected, key=lambda task: reminder_instant(task, lead_minutes))
