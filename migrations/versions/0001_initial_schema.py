"""create tasks, lists, tags, settings and rules tables"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("list_id", sa.String(length=36), nullable=True),
        sa.Column("tags", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default="none"),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_rule", sa.String(length=40), nullable=True),
        sa.Column("manual_quadrant", sa.String(length=16), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("priority IN ('none', 'low', 'medium', 'high')", name="ck_tasks_priority"),
    )
    op.create_index("ix_tasks_list_id", "tasks", ["list_id"], unique=False)
    op.create_index("ix_tasks_due_date", "tasks", ["due_date"], unique=False)
    op.create_index("ix_tasks_completed", "tasks", ["completed"], unique=False)
    op.create_index("ix_tasks_priority", "tasks", ["priority"], unique=False)

    op.create_table(
        "lists",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("color", sa.String(length=20), nullable=False, server_default="#6b7280"),
        sa.Column("icon", sa.String(length=40), nullable=False, server_default="list"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("color", sa.String(length=20), nullable=False, server_default="#6b7280"),
    )

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("default_priority", sa.String(length=10), nullable=False, server_default="none"),
        sa.Column("default_due_date_rule", sa.String(length=100), nullable=False, server_default="none"),
        sa.Column("default_reminder", sa.String(length=20), nullable=False, server_default="none"),
        sa.Column("auto_apply_tags", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("theme", sa.String(length=10), nullable=False, server_default="dark"),
    )

    op.create_table(
        "eisenhower_rules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("quadrant", sa.String(length=16), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("conditions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("logic", sa.String(length=3), nullable=False, server_default="AND"),
        sa.CheckConstraint(
            "quadrant IN ('do', 'schedule', 'delegate', 'eliminate')", name="ck_eisenhower_rules_quadrant"
        ),
    )


def downgrade() -> None:
    op.drop_table("eisenhower_rules")
    op.drop_table("settings")
    op.drop_table("tags")
    op.drop_table("lists")
    op.drop_index("ix_tasks_priority", table_name="tasks")
    op.drop_index("ix_tasks_completed", table_name="tasks")
    op.drop_index("ix_tasks_due_date", table_name="tasks")
    op.drop_index("ix_tasks_list_id", table_name="tasks")
    op.drop_table("tasks")
