from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text

from .db import Base


def localnow() -> datetime:
    return datetime.now()


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    list_id = Column(String(36), nullable=True, index=True)
    tags = Column(Text, nullable=False, default="[]")
    priority = Column(String(10), nullable=False, default="none", index=True)
    due_date = Column(DateTime, nullable=True, index=True)
    completed = Column(Boolean, nullable=False, default=False, index=True)
    recurrence_rule = Column(String(40), nullable=True)
    manual_quadrant = Column(String(16), nullable=True)
    reminder_at = Column(DateTime, nullable=True)
    next_occurrence_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False, default=localnow)
    updated_at = Column(DateTime, nullable=False, default=localnow, onupdate=localnow)

    __table_args__ = (
        CheckConstraint("priority IN ('none', 'low', 'medium', 'high')", name="ck_tasks_priority"),
    )


class ListModel(Base):
    __tablename__ = "lists"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    color = Column(String(20), nullable=False, default="#6b7280")
    icon = Column(String(40), nullable=False, default="list")
    sort_order = Column(Integer, nullable=False, default=0)


class TagModel(Base):
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(20), nullable=False, default="#6b7280")


class SettingsModel(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, default=1)
    default_priority = Column(String(10), nullable=False, default="none")
    default_due_date_rule = Column(String(100), nullable=False, default="none")
    default_reminder = Column(String(20), nullable=False, default="none")
    auto_apply_tags = Column(Text, nullable=False, default="[]")
    theme = Column(String(10), nullable=False, default="dark")


class RuleModel(Base):
    __tablename__ = "eisenhower_rules"

    id = Column(String(36), primary_key=True)
    quadrant = Column(String(16), nullable=False)
    name = Column(String(100), nullable=False)
    conditions = Column(Text, nullable=False, default="[]")
    logic = Column(String(3), nullable=False, default="AND")

    __table_args__ = (
        CheckConstraint(
            "quadrant IN ('do', 'schedule', 'delegate', 'eliminate')", name="ck_eisenhower_rules_quadrant"
        ),
    )
