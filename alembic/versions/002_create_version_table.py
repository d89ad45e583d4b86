"""Create version table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "version",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("track_id", sa.String(length=36), sa.ForeignKey("track.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("audio_content_id", sa.String(length=128), nullable=False),
        sa.Column("voice_note_content_id", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("track_id", "version_number", name="uq_version_track_number"),
    )
    op.create_index(op.f("ix_version_track_id"), "version", ["track_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_version_track_id"), table_name="version")
    op.drop_table("version")
