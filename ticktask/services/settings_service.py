from __future__ import annotations

from dataclasses import fields, replace

from ticktask.domain.entities import UserSettings, unique_tags
from ticktask.domain.enums import Priority, Theme
from ticktask.infra.repository import SettingsRepository

_FIELDS = {field.name for field in fields(UserSettings)}


class SettingsService:
    def __init__(self, repo: SettingsRepository) -> None:
        self._repo = repo

    def get_settings(self) -> UserSettings:
        return self._repo.get_settings() or UserSettings()

    def update_settings(self, **changes) -> UserSettings:
        unknown = set(changes) - _FIELDS
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if "default_priority" in changes:
            changes["default_priority"] = Priority(changes["default_priority"])
        if "theme" in changes:
            changes["theme"] = Theme(changes["theme"])
        if "auto_apply_tags" in changes:
            changes["auto_apply_tags"] = unique_tags(changes["auto_apply_tags"])
        return self._repo.save_settings(replace(self.get_settings(), **changes))
