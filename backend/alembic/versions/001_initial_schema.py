"""Initial schema — projects, houses, round_entries.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, server_default="新規プロジェクト"),
        sa.Column("requirements", sa.Text, nullable=True),
        sa.Column("profile", sa.Text, nullable=True),
        sa.Column("current_round", sa.Integer, nullable=False, server_default="0"),
        sa.Column("external_ref", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_projects_external_ref", "projects", ["external_ref"])

    op.create_table(
        "houses",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column(
            "project_id", UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("filename", sa.String(500), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_houses_project_id", "houses", ["project_id"])

    op.create_table(
        "round_entries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "project_id", UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "house_id", sa.String(100),
            sa.ForeignKey("houses.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("round_number", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rating", sa.String(20), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("rated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("project_id", "house_id", name="uq_round_entries_project_house"),
    )
    op.create_index("ix_round_entries_project_id", "round_entries", ["project_id"])
    op.create_index(
        "ix_round_entries_project_round", "round_entries", ["project_id", "round_number"],
    )


def downgrade() -> None:
    op.drop_table("round_entries")
    op.drop_table("houses")
    op.drop_table("projects")
