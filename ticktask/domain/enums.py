from __future__ import annotations

from enum import StrEnum


class Priority(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Quadrant(StrEnum):
    DO = "do"
    SCHEDULE = "schedule"
    DELEGATE = "delegate"
    ELIMINATE = "eliminate"


# Evaluation order of the rule cascade. Not user-configurable.
QUADRANT_ORDER: tuple[Quadrant, ...] = (
    Quadrant.DO,
    Quadrant.SCHEDULE,
    Quadrant.DELEGATE,
    Quadrant.ELIMINATE,
)

QUADRANT_LABELS: dict[Quadrant, str] = {
    Quadrant.DO: "Do First",
    Quadrant.SCHEDULE: "Schedule",
    Quadrant.DELEGATE: "Delegate",
    Quadrant.ELIMINATE: "Eliminate",
}


class RuleLogic(StrEnum):
    AND = "AND"
    OR = "OR"


class ConditionType(StrEnum):
    PRIORITY = "priority"
    DUE_DATE = "dueDate"
    TAG = "tag"
    LIST = "list"
    STATUS = "status"


class ConditionOperator(StrEnum):
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    IN = "in"
    NOT_IN = "notIn"
    WITHIN = "within"
    AFTER = "after"
    BEFORE = "before"
    OVERDUE = "overdue"
    NO_DUE_DATE = "noDueDate"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"


class RecurrenceKind(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    WEEKDAYS = "weekdays"


class DueBucket(StrEnum):
    TODAY = "today"
    THIS_WEEK = "thisWeek"
    UPCOMING = "upcoming"
    OVERDUE = "overdue"
    NO_DUE = "noDue"


class Theme(StrEnum):
    DARK = "dark"
    LIGHT = "light"
