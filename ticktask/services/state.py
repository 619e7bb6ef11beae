from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import sessionmaker

from ticktask.domain.entities import UserSettings
from ticktask.domain.snapshot import Snapshot
from ticktask.infra.db import SessionLocal
from ticktask.infra.repository import (
    ListRepository,
    RuleRepository,
    SettingsRepository,
    TagRepository,
    TaskRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class Repositories:
    session_factory: sessionmaker = SessionLocal
    tasks: TaskRepository = field(init=False)
    lists: ListRepository = field(init=False)
    tags: TagRepository = field(init=False)
    settings: SettingsRepository = field(init=False)
    rules: RuleRepository = field(init=False)

    def __post_init__(self) -> None:
        self.tasks = TaskRepository(self.session_factory)
        self.lists = ListRepository(self.session_factory)
        self.tags = TagRepository(self.session_factory)
        self.settings = SettingsRepository(self.session_factory)
        self.rules = RuleRepository(self.session_factory)


class AppState:
    """Single writer of the in-memory snapshot.

    Views (matrix, filtered lists) are computed from ``snapshot`` by pure
    functions; writes go through the services and are followed by
    ``refresh()``.
    """

    def __init__(self, repos: Repositories) -> None:
        self.repos = repos
        self._snapshot = Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def refresh(self) -> Snapshot:
        self._snapshot = Snapshot(
            tasks=tuple(self.repos.tasks.list_tasks()),
            lists=tuple(self.repos.lists.list_lists()),
            tags=tuple(self.repos.tags.list_tags()),
            settings=self.repos.settings.get_settings() or UserSettings(),
            rules=tuple(self.repos.rules.list_rules()),
        )
        logger.debug("Loaded snapshot with %d tasks and %d rules", len(self._snapshot.tasks), len(self._snapshot.rules))
        return self._snapshot
