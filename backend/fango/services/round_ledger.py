"""Round Ledger — append-only record of which house was offered in which round.

Invariants:
    - place_items raises DuplicatePlacementError if any id is already placed anywhere
      in the project (or repeated in the call) — nothing is inserted in that case
    - record_ratings validates every triple before mutating any entry
    - Entries are never deleted individually; rating + notes set once per submission
    - all_rated is vacuously true for a round with zero entries

Design Decisions:
    - Duplicate placement is a caller defect: logged at ERROR and raised, never deduped
    - No commit here: the round controller owns the unit of work
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.domain_types import Rating
from fango.core.errors import (
    DuplicatePlacementError, ErrorContext, UnknownEntryError,
)
from fango.core.ranking_context import RatedHouse
from fango.core.round_state import RatingInput, all_rated
from fango.models.house import House
from fango.models.round_entry import RoundEntry

logger = logging.getLogger(__name__)


def entry_rating(entry: RoundEntry) -> Rating | None:
    """Typed view of the stored rating column."""
    return Rating(entry.rating) if entry.rating is not None else None


class RoundLedger:
    """Placement and rating persistence for round entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def place_items(
        self, project_id: UUID, round_number: int, house_ids: Iterable[str],
    ) -> list[RoundEntry]:
        """Create one unrated entry per house for the given round."""
        house_ids = list(house_ids)
        placed = await self.placed_house_ids(project_id)
        seen: set[str] = set()
        duplicates = []
        for house_id in house_ids:
            if house_id in placed or house_id in seen:
                duplicates.append(house_id)
            seen.add(house_id)
        if duplicates:
            logger.error(
                f"Duplicate placement rejected: {duplicates}",
                extra={
                    "project_id": str(project_id),
                    "round_number": round_number,
                    "error_code": "DUPLICATE_PLACEMENT",
                },
            )
            raise DuplicatePlacementError(
                duplicates,
                ErrorContext(project_id=str(project_id), round_number=round_number),
            )

        entries = [
            RoundEntry(
                project_id=project_id,
                house_id=house_id,
                round_number=round_number,
                position=i,
            )
            for i, house_id in enumerate(house_ids)
        ]
        self.db.add_all(entries)
        await self.db.flush()
        return entries

    async def record_ratings(
        self,
        project_id: UUID,
        round_number: int,
        ratings: Iterable[RatingInput],
    ) -> None:
        """Set rating + notes on existing entries. All-or-nothing."""
        ratings = list(ratings)
        by_house = {
            e.house_id: e
            for e in await self.get_round_entries(project_id, round_number)
        }
        for r in ratings:
            if r.house_id not in by_house:
                raise UnknownEntryError(
                    r.house_id, round_number,
                    ErrorContext(project_id=str(project_id)),
                )

        now = datetime.now(timezone.utc)
        for r in ratings:
            entry = by_house[r.house_id]
            entry.rating = r.rating.value
            entry.notes = r.notes or ""
            entry.rated_at = now
        await self.db.flush()

    async def get_round_entries(
        self, project_id: UUID, round_number: int,
    ) -> list[RoundEntry]:
        result = await self.db.execute(
            select(RoundEntry)
            .where(RoundEntry.project_id == project_id)
            .where(RoundEntry.round_number == round_number)
            .order_by(RoundEntry.position)
        )
        return list(result.scalars().all())

    async def get_round_with_houses(
        self, project_id: UUID, round_number: int,
    ) -> list[tuple[RoundEntry, House]]:
        """Entries of one round joined with their houses, in placement order."""
        result = await self.db.execute(
            select(RoundEntry, House)
            .join(House, House.id == RoundEntry.house_id)
            .where(RoundEntry.project_id == project_id)
            .where(RoundEntry.round_number == round_number)
            .order_by(RoundEntry.position)
        )
        return [(entry, house) for entry, house in result.all()]

    async def all_rated(self, project_id: UUID, round_number: int) -> bool:
        entries = await self.get_round_entries(project_id, round_number)
        return all_rated([entry_rating(e) for e in entries])

    async def placed_house_ids(self, project_id: UUID) -> set[str]:
        result = await self.db.execute(
            select(RoundEntry.house_id).where(RoundEntry.project_id == project_id),
        )
        return set(result.scalars().all())

    async def rated_history(self, project_id: UUID) -> list[RatedHouse]:
        """Every rated entry of the project joined with its house."""
        result = await self.db.execute(
            select(RoundEntry, House)
            .join(House, House.id == RoundEntry.house_id)
            .where(RoundEntry.project_id == project_id)
            .where(RoundEntry.rating.is_not(None))
            .order_by(RoundEntry.round_number, RoundEntry.position)
        )
        return [
            RatedHouse(
                house_id=house.id,
                filename=house.filename,
                content=house.content,
                rating=Rating(entry.rating),
                notes=entry.notes,
            )
            for entry, house in result.all()
        ]
