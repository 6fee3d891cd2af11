"""House ORM — one recommendable listing (one page of an ingested document).

Invariants:
    - Always belongs to a Project (project_id FK, ON DELETE CASCADE)
    - Immutable after ingestion
    - summary is optional free text shown alongside the listing; never parsed
    - id is an opaque string: similarity-server page id when available, else a UUID

Design Decisions:
    - String primary key: ids must match what the similarity server returns
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fango.core.domain_types import HOUSE_ID_MAX_LENGTH
from fango.db.base import Base


class House(Base):
    """House entity — a single property listing."""
    __tablename__ = "houses"

    id: Mapped[str] = mapped_column(
        String(HOUSE_ID_MAX_LENGTH), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    project: Mapped["Project"] = relationship(
        "Project", back_populates="houses",
    )
