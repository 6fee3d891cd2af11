"""RoundEntry ORM — placement of a house into a project round, with its rating.

Invariants:
    - (project_id, house_id) is unique: a house is offered at most once per project
    - round_number ∈ 0..3; rating NULL until the client submits
    - position is the 0-based order in which the ranking chain picked the house
    - Mutated once (rating + notes) on submission; never deleted individually

Design Decisions:
    - house_id weakly references houses.id (no ORM relationship ownership)
    - Unique constraint backs the ledger's DuplicatePlacementError check at storage level
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fango.core.domain_types import HOUSE_ID_MAX_LENGTH
from fango.db.base import Base


class RoundEntry(Base):
    """RoundEntry entity — one house offered in one round."""
    __tablename__ = "round_entries"
    __table_args__ = (
        UniqueConstraint(
            "project_id", "house_id", name="uq_round_entries_project_house",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    house_id: Mapped[str] = mapped_column(
        String(HOUSE_ID_MAX_LENGTH), ForeignKey("houses.id", ondelete="CASCADE"),
        nullable=False,
    )
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    rated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    project: Mapped["Project"] = relationship(
        "Project", back_populates="round_entries",
    )
