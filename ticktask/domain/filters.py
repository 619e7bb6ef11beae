from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .dates import is_same_day, is_this_week
from .entities import TaskEntity
from .enums import DueBucket, Priority


@dataclass(frozen=True)
class TaskFilters:
    search: str | None = None
    tags: tuple[str, ...] = ()
    list_id: str | None = None
    priorities: tuple[Priority, ...] = ()
    due: DueBucket | None = None
    completed: bool | None = None


def _matches_search(task: TaskEntity, search: str) -> bool:
    needle = search.lower()
    if needle in task.title.lower():
        return True
    tag_needle = needle.replace("#", "")
    return any(tag_needle in tag.lower() for tag in task.tags)


def _matches_due(task: TaskEntity, bucket: DueBucket, now: datetime, week_starts_on: int) -> bool:
    due = task.due_date
    if bucket == DueBucket.NO_DUE:
        return due is None
    if due is None:
        return False
    if bucket == DueBucket.TODAY:
        return is_same_day(due, now)
    if bucket == DueBucket.THIS_WEEK:
        return is_this_week(due, now, week_starts_on)
    if bucket == DueBucket.UPCOMING:
        return due > now
    if bucket == DueBucket.OVERDUE:
        return due < now
    return True


def matches_filters(task: TaskEntity, filters: TaskFilters, now: datetime, week_starts_on: int = 1) -> bool:
    if filters.search and not _matches_search(task, filters.search):
        return False
    if filters.tags and not any(tag in task.tags for tag in filters.tags):
        return False
    if filters.list_id and task.list_id != filters.list_id:
        return False
    if filters.priorities and task.priority not in filters.priorities:
        return False
    if filters.due and not _matches_due(task, filters.due, now, week_starts_on):
        return False
    if filters.completed is not None and task.completed != filters.completed:
        return False
    return True


def filter_tasks(
    tasks: Iterable[TaskEntity],
    filters: TaskFilters,
    now: datetime,
    week_starts_on: int = 1,
) -> list[TaskEntity]:
    return [task for task in tasks if matches_filters(task, filters, now, week_starts_on)]
