"""Item Store — the pool of recommendable houses per project.

Invariants:
    - Houses are immutable after add_items
    - list_unplaced_items = all houses minus houses referenced by any round entry,
      evaluated at call time (autoflush makes same-session placements visible)
    - No ordering guarantee on list_items; list_unplaced_items ordered by filename for
      reproducible prompts

Design Decisions:
    - Set difference computed in SQL (NOT IN subquery), not in Python
"""

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.documents import NewHouse
from fango.core.errors import HouseConflictError
from fango.models.house import House
from fango.models.round_entry import RoundEntry

logger = logging.getLogger(__name__)


class ItemStore:
    """Read/insert access to a project's houses."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_items(
        self, project_id: UUID, items: Iterable[NewHouse],
    ) -> list[str]:
        """Insert houses; fails with HouseConflictError if any id already exists."""
        items = list(items)
        ids = [item.id for item in items]
        if not ids:
            return []

        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        result = await self.db.execute(select(House.id).where(House.id.in_(ids)))
        existing = sorted(set(result.scalars().all()) | set(duplicates))
        if existing:
            raise HouseConflictError(existing)

        for item in items:
            self.db.add(House(
                id=item.id,
                project_id=project_id,
                filename=item.filename,
                content=item.content,
            ))
        await self.db.flush()
        logger.info(
            f"Stored {len(ids)} house(s)", extra={"project_id": str(project_id)},
        )
        return ids

    async def list_items(self, project_id: UUID) -> list[House]:
        result = await self.db.execute(
            select(House).where(House.project_id == project_id),
        )
        return list(result.scalars().all())

    async def list_unplaced_items(self, project_id: UUID) -> list[House]:
        """Houses with no round entry anywhere in the project."""
        placed = (
            select(RoundEntry.house_id)
            .where(RoundEntry.project_id == project_id)
        )
        result = await self.db.execute(
            select(House)
            .where(House.project_id == project_id)
            .where(House.id.not_in(placed))
            .order_by(House.filename, House.id)
        )
        return list(result.scalars().all())
