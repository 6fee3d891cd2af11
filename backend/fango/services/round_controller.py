"""Round Controller — drives a project through rounds 0..3 to completion.

Invariants:
    - start and submit_ratings run inside the project's lock (one writer per project)
    - start on an already-started project is a pure read of the active round
    - submit_ratings: validate (no mutation on rejection) → record ratings → current_round += 1
      → rebuild profile (best-effort) → select next round if ≤ 3 → single commit
    - A re-submission for a round that already advanced is rejected with RoundNotActiveError
    - Rounds 1..3 whose selection comes back empty complete the project immediately
    - Reads (current_round_view, round_view) never mutate

Design Decisions:
    - One commit per transition: an abandoned request rolls back entirely and the retry
      starts from the same state
    - An empty round 0 (no houses yet) leaves the project NotStarted so it can be retried
      after ingestion
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.domain_types import (
    COMPLETED_ROUND, INITIAL_ROUND, ROUND_SIZE, RoundPhase,
)
from fango.core.round_state import (
    RatingInput, check_submission, derive_phase, is_completed,
    needs_selection, next_round,
)
from fango.infrastructure.project_locks import ProjectLockRegistry
from fango.models.house import House
from fango.models.project import Project
from fango.models.round_entry import RoundEntry
from fango.services.profile_builder import PreferenceProfileBuilder
from fango.services.projects import get_project_or_raise
from fango.services.ranking_chain import RankingOracleChain
from fango.services.round_ledger import RoundLedger, entry_rating

logger = logging.getLogger(__name__)


@dataclass
class RoundView:
    """What the presentation layer receives after any controller operation."""
    project_id: UUID
    round_number: int
    phase: RoundPhase
    entries: list[tuple[RoundEntry, House]] = field(default_factory=list)


class RoundController:
    """State machine over Project.current_round + the round ledger."""

    def __init__(
        self,
        db: AsyncSession,
        chain: RankingOracleChain,
        profile_builder: PreferenceProfileBuilder,
        locks: ProjectLockRegistry,
        round_size: int = ROUND_SIZE,
    ):
        self.db = db
        self.chain = chain
        self.profile_builder = profile_builder
        self.locks = locks
        self.round_size = round_size
        self.ledger = RoundLedger(db)

    async def start(self, project_id: UUID) -> RoundView:
        """NotStarted → Round0Active via random sampling; otherwise read the active round."""
        async with self.locks.hold(project_id):
            project = await get_project_or_raise(self.db, project_id)
            view = await self._view(project, project.current_round)
            if view.phase != RoundPhase.NOT_STARTED:
                return view

            houses = await self.chain.select_next_round(
                self.db, project, INITIAL_ROUND, self.round_size,
            )
            await self.db.commit()
            logger.info(
                f"Round 0 started with {len(houses)} house(s)",
                extra={"project_id": str(project_id), "round_number": INITIAL_ROUND},
            )
            return await self._view(project, INITIAL_ROUND)

    async def submit_ratings(
        self, project_id: UUID, round_number: int, ratings: list[RatingInput],
    ) -> RoundView:
        """Record a complete set of ratings for the active round and advance."""
        async with self.locks.hold(project_id):
            project = await get_project_or_raise(self.db, project_id)
            entries = await self.ledger.get_round_entries(project.id, round_number)
            check_submission(
                project.current_round,
                round_number,
                {e.house_id: entry_rating(e) for e in entries},
                {r.house_id: r.rating for r in ratings},
            )

            await self.ledger.record_ratings(project.id, round_number, ratings)
            project.current_round = next_round(round_number)
            log_extra = {
                "project_id": str(project.id),
                "round_number": project.current_round,
            }
            logger.info(
                f"Round {round_number} rated, advancing to {project.current_round}",
                extra=log_extra,
            )

            await self.profile_builder.build_profile(project)

            if needs_selection(project.current_round):
                houses = await self.chain.select_next_round(
                    self.db, project, project.current_round, self.round_size,
                )
                if not houses:
                    logger.info("No houses left, project completed", extra=log_extra)
                    project.current_round = COMPLETED_ROUND

            await self.db.commit()
            return await self._view(project, project.current_round)

    async def current_round_view(self, project_id: UUID) -> RoundView:
        project = await get_project_or_raise(self.db, project_id)
        return await self._view(project, project.current_round)

    async def round_view(self, project_id: UUID, round_number: int) -> RoundView:
        project = await get_project_or_raise(self.db, project_id)
        return await self._view(project, round_number)

    async def _view(self, project: Project, round_number: int) -> RoundView:
        if is_completed(round_number):
            entries = []
        else:
            entries = await self.ledger.get_round_with_houses(project.id, round_number)
        current_entries = (
            len(entries) if round_number == project.current_round
            else len(await self.ledger.get_round_entries(project.id, project.current_round))
        )
        return RoundView(
            project_id=project.id,
            round_number=round_number,
            phase=derive_phase(project.current_round, current_entries),
            entries=entries,
        )
