from __future__ import annotations

import logging

from sqlalchemy.orm import sessionmaker

from ticktask.domain.entities import ListEntity, UserSettings
from ticktask.domain.rules import DEFAULT_RULES

from .db import SessionLocal
from .repository import ListRepository, RuleRepository, SettingsRepository

logger = logging.getLogger(__name__)

DEFAULT_LISTS: tuple[ListEntity, ...] = (
    ListEntity(id="inbox", name="Inbox", color="#3b82f6", icon="inbox", sort_order=0),
    ListEntity(id="work", name="Work", color="#8b5cf6", icon="briefcase", sort_order=1),
    ListEntity(id="personal", name="Personal", color="#22c55e", icon="home", sort_order=2),
)


def seed_defaults(session_factory: sessionmaker = SessionLocal) -> None:
    settings_repo = SettingsRepository(session_factory)
    if settings_repo.get_settings() is None:
        settings_repo.save_settings(UserSettings())
        logger.info("Seeded default settings")

    rule_repo = RuleRepository(session_factory)
    if rule_repo.count_rules() == 0:
        rule_repo.replace_rules(DEFAULT_RULES)
        logger.info("Seeded %d default rules", len(DEFAULT_RULES))

    list_repo = ListRepository(session_factory)
    if not list_repo.list_lists():
        for item in DEFAULT_LISTS:
            list_repo.create_list({
                "id": item.id,
                "name": item.name,
                "color": item.color,
                "icon": item.icon,
                "sort_order": item.sort_order,
            })
        logger.info("Seeded %d default lists", len(DEFAULT_LISTS))
