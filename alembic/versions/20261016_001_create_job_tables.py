"""Create job_run and job_log tables.

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create job_run keyed by job id, and the append-only job_log."""
    op.create_table(
        "job_run",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("object_type", sa.String(32), nullable=False, server_default="job_run"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("progress", sa.Float(), nullable=False, server_default="0"),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("ix_job_run_name", "job_run", ["name"])
    op.create_index("ix_job_run_created_at", "job_run", ["created_at"])

    op.create_table(
        "job_log",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("object_type", sa.String(32), nullable=False, server_default="job_log"),
        sa.Column("job_id", sa.String(64), nullable=False),
        sa.Column("worker_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("metadata", JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("ix_job_log_job_id", "job_log", ["job_id"])
    op.create_index("ix_job_log_created_at", "job_log", ["created_at"])


def downgrade() -> None:
    """Drop job_log and job_run tables."""
    op.drop_index("ix_job_log_created_at", table_name="job_log")
    op.drop_index("ix_job_log_job_id", table_name="job_log")
    op.drop_table("job_log")
    op.drop_index("ix_job_run_created_at", table_name="job_run")
    op.drop_index("ix_job_run_name", table_name="job_run")
    op.drop_table("job_run")
