"""Project ORM — aggregate root for one customer's recommendation workflow.

Invariants:
    - id is UUID primary key
    - current_round ∈ {0, 1, 2, 3, 4}; 4 (COMPLETED_ROUND) is terminal
    - current_round only increases, by exactly 1 per accepted rating submission
    - profile is regenerated (best-effort) at every round transition

Design Decisions:
    - cascade delete for houses and round entries: project owns both
    - external_ref holds the CRM customer id for imported projects
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fango.core.domain_types import DEFAULT_PROJECT_NAME
from fango.db.base import Base


class Project(Base):
    """Project aggregate root — owns houses and round entries."""
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(200), nullable=False, default=DEFAULT_PROJECT_NAME,
    )
    requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_round: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    external_ref: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    houses: Mapped[list["House"]] = relationship(
        "House", back_populates="project",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    round_entries: Mapped[list["RoundEntry"]] = relationship(
        "RoundEntry", back_populates="project",
        cascade="all, delete-orphan", passive_deletes=True,
    )
