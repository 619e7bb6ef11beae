from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from .entities import TaskEntity
from .enums import QUADRANT_ORDER, Quadrant
from .rules import EisenhowerRule, classify

QuadrantPartition = dict[Quadrant, list[TaskEntity]]


def empty_partition() -> QuadrantPartition:
    return {quadrant: [] for quadrant in QUADRANT_ORDER}


def partition_by_quadrant(
    tasks: Iterable[TaskEntity],
    rules: Sequence[EisenhowerRule],
    now: datetime,
) -> QuadrantPartition:
    # Callers pass a snapshot of the rules; the list is not re-read mid-pass.
    rules = tuple(rules)
    partition = empty_partition()
    for task in tasks:
        if task.completed:
            continue
        partition[classify(task, rules, now)].append(task)
    return partition


def quadrant_counts(partition: QuadrantPartition) -> dict[Quadrant, int]:
    return {quadrant: len(partition.get(quadrant, [])) for quadrant in QUADRANT_ORDER}
