from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from .enums import Priority, Quadrant, Theme


def unique_tags(tags: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(tag for tag in tags if tag))


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    tags: tuple[str, ...] = ()
    priority: Priority = Priority.NONE
    due_date: Optional[datetime] = None
    completed: bool = False
    recurrence_rule: str | None = None
    manual_quadrant: Quadrant | None = None
    list_id: str | None = None
    description: str = ""
    reminder_at: Optional[datetime] = None
    next_occurrence_id: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        # Tags are a set with a stable display order.
        object.__setattr__(self, "tags", unique_tags(self.tags))


@dataclass(frozen=True)
class ListEntity:
    id: str
    name: str
    color: str = "#6b7280"
    icon: str = "list"
    sort_order: int = 0


@dataclass(frozen=True)
class TagEntity:
    id: str
    name: str
    color: str = "#6b7280"


@dataclass(frozen=True)
class UserSettings:
    default_priority: Priority = Priority.NONE
    default_due_date_rule: str = "none"
    default_reminder: str = "none"
    auto_apply_tags: tuple[str, ...] = ()
    theme: Theme = Theme.DARK

    def __post_init__(self) -> None:
        object.__setattr__(self, "auto_apply_tags", unique_tags(self.auto_apply_tags))

    @property
    def reminder_lead_minutes(self) -> int | None:
        try:
            minutes = int(self.default_reminder)
        except (TypeError, ValueError):
            return None
        return minutes if minutes >= 0 else None
