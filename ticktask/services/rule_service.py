from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from ticktask.domain.entities import TaskEntity
from ticktask.domain.enums import Quadrant
from ticktask.domain.matrix import QuadrantPartition, partition_by_quadrant
from ticktask.domain.rules import DEFAULT_RULES, EisenhowerRule, classify
from ticktask.infra.repository import RuleRepository

logger = logging.getLogger(__name__)


def validate_rules(rules: Iterable[EisenhowerRule]) -> list[EisenhowerRule]:
    seen: set[Quadrant] = set()
    validated = []
    for rule in rules:
        if not isinstance(rule.quadrant, Quadrant):
            raise ValueError(f"Rule {rule.name!r} has unknown quadrant {rule.quadrant!r}")
        if rule.quadrant in seen:
            raise ValueError(f"More than one rule for quadrant {rule.quadrant.value!r}")
        seen.add(rule.quadrant)
        validated.append(rule)
    return validated


class RuleService:
    def __init__(self, repo: RuleRepository) -> None:
        self._repo = repo

    def list_rules(self) -> list[EisenhowerRule]:
        return self._repo.list_rules()

    def save_rules(self, rules: Sequence[EisenhowerRule]) -> list[EisenhowerRule]:
        saved = self._repo.replace_rules(validate_rules(rules))
        logger.info("Saved %d rules", len(saved))
        return saved

    def reset_defaults(self) -> list[EisenhowerRule]:
        return self.save_rules(DEFAULT_RULES)

    def classify(self, task: TaskEntity, now: datetime) -> Quadrant:
        return classify(task, self._repo.list_rules(), now)

    def preview(
        self,
        tasks: Iterable[TaskEntity],
        rules: Sequence[EisenhowerRule],
        now: datetime,
    ) -> QuadrantPartition:
        # Unsaved edits are classified against the live task list.
        return partition_by_quadrant(tasks, validate_rules(rules), now)
