"""Create sleep_records table

Interval timestamps are stored as ISO-8601 text so the submitted UTC offset
survives on every backend.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create sleep_records."""
    op.create_table(
        "sleep_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("start_time", sa.String(length=40), nullable=False),
        sa.Column("end_time", sa.String(length=40), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        comment="Manually logged sleep intervals",
    )
    op.create_index(
        op.f("ix_sleep_records_start_time"), "sleep_records", ["start_time"], unique=False
    )


def downgrade() -> None:
    """Drop sleep_records."""
    op.drop_index(op.f("ix_sleep_records_start_time"), table_name="sleep_records")
    op.drop_table("sleep_records")
