from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from ticktask.domain.entities import TaskEntity
from ticktask.domain.reminders import DEFAULT_REMINDER_WINDOW, reminder_instant, tasks_needing_reminder
from ticktask.infra.repository import SettingsRepository, TaskRepository

logger = logging.getLogger(__name__)

Notifier = Callable[[TaskEntity], None]


class ReminderService:
    def __init__(
        self,
        repo: TaskRepository,
        settings_repo: SettingsRepository | None = None,
        notifier: Notifier | None = None,
        window: timedelta = DEFAULT_REMINDER_WINDOW,
    ) -> None:
        self._repo = repo
        self._settings_repo = settings_repo
        self._notifier = notifier
        self._window = window
        self._sent: set[tuple[str, datetime]] = set()

    def due_reminders(self, now: datetime) -> list[TaskEntity]:
        return tasks_needing_reminder(self._repo.list_tasks(), now, self._window, self._lead_minutes())

    def check(self, now: datetime) -> list[TaskEntity]:
        # Instants already in the past can never be selected again.
        self._sent = {key for key in self._sent if key[1] >= now}
        lead = self._lead_minutes()
        fresh = []
        for task in self.due_reminders(now):
            key = (task.id, reminder_instant(task, lead))
            if key in self._sent:
                continue
            self._sent.add(key)
            fresh.append(task)
            if self._notifier is not None:
                self._notifier(task)
        if fresh:
            logger.info("Sent %d reminders", len(fresh))
        return fresh

    def _lead_minutes(self) -> int | None:
        if self._settings_repo is None:
            return None
        settings = self._settings_repo.get_settings()
        return settings.reminder_lead_minutes if settings else None
