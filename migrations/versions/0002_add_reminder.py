"""add explicit reminder instant"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_add_reminder"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("tasks", sa.Column("reminder_at", sa.DateTime(), nullable=True))


def downgrade() -> None:
    op.drop_column("tasks", "reminder_at")
