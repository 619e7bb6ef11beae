"""link a completed recurring task to the instance it spawned"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0003_add_next_occurrence"
down_revision = "0002_add_reminder"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("tasks", sa.Column("next_occurrence_id", sa.String(length=36), nullable=True))


def downgrade() -> None:
    op.drop_column("tasks", "next_occurrence_id")
