from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .entities import ListEntity, TagEntity, TaskEntity, UserSettings
from .filters import TaskFilters, filter_tasks
from .matrix import QuadrantPartition, partition_by_quadrant
from .rules import EisenhowerRule


@dataclass(frozen=True)
class Snapshot:
    tasks: tuple[TaskEntity, ...] = ()
    lists: tuple[ListEntity, ...] = ()
    tags: tuple[TagEntity, ...] = ()
    settings: UserSettings = field(default_factory=UserSettings)
    rules: tuple[EisenhowerRule, ...] = ()

    def by_quadrant(self, now: datetime) -> QuadrantPartition:
        return partition_by_quadrant(self.tasks, self.rules, now)

    def filtered(self, filters: TaskFilters, now: datetime, week_starts_on: int = 1) -> list[TaskEntity]:
        return filter_tasks(self.tasks, filters, now, week_starts_on)

    def find_task(self, task_id: str) -> TaskEntity | None:
        return next((task for task in self.tasks if task.id == task_id), None)
