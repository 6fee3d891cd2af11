"""Ranking Oracle Chain — fills a round's candidate set through ordered fallback strategies.

Invariants:
    - Result size is min(target_size, |unplaced|); never more than target_size
    - Every returned house was unplaced at selection time; no duplicates
    - Strategies run strictly in order; a later strategy runs only while the quota is short,
      and never displaces earlier picks
    - Any strategy failure (timeout, OracleUnavailableError, unexpected exception) counts as
      zero contribution and is logged — never raised
    - Round 0 uses the random fallback alone
    - select_next_round places the picks in the ledger before returning (no commit)

Design Decisions:
    - Chain = ordered list of RankingStrategy + mandatory RandomFillStrategy last
    - Chain re-validates each contribution against the context (strategies may be fakes)
"""

import asyncio
import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.candidate_selection import accept_candidates
from fango.core.domain_types import INITIAL_ROUND, ProjectId, StrategyName
from fango.core.errors import OracleUnavailableError
from fango.core.oracle_protocols import RankingStrategy
from fango.core.ranking_context import HouseSnapshot, RankingContext
from fango.models.house import House
from fango.models.project import Project
from fango.services.item_store import ItemStore
from fango.services.ranking_strategies import RandomFillStrategy
from fango.services.round_ledger import RoundLedger

logger = logging.getLogger(__name__)


@dataclass
class ChainResult:
    """Picks in selection order plus per-strategy contribution counts."""
    houses: list[HouseSnapshot] = field(default_factory=list)
    contributions: dict[StrategyName, int] = field(default_factory=dict)


def _snapshot(house: House) -> HouseSnapshot:
    return HouseSnapshot(id=house.id, filename=house.filename, content=house.content)


class RankingOracleChain:
    """Similarity → LLM → random, each asked only for what is still missing."""

    def __init__(
        self,
        strategies: list[RankingStrategy] | None = None,
        fallback: RandomFillStrategy | None = None,
    ):
        self.strategies = list(strategies or [])
        self.fallback = fallback or RandomFillStrategy()

    def strategies_for(self, round_number: int) -> list[RankingStrategy]:
        if round_number == INITIAL_ROUND:
            return [self.fallback]
        return [*self.strategies, self.fallback]

    async def fill(
        self, context: RankingContext, strategies: list[RankingStrategy],
    ) -> ChainResult:
        """Run strategies in order until the context's quota is met."""
        result = ChainResult()
        for strategy in strategies:
            need = context.remaining_need
            if need <= 0 or not context.remaining:
                break
            if not strategy.applies(context):
                continue
            picks = await self._run(strategy, context, need)
            accepted = accept_candidates(
                (h.id for h in picks),
                context.remaining, context.excluded_ids, need,
            )
            context.selected.extend(accepted)
            result.contributions[strategy.name] = len(accepted)
            logger.info(
                f"{strategy.name.value} contributed {len(accepted)}/{need}",
                extra={
                    "project_id": str(context.project_id),
                    "round_number": context.round_number,
                    "strategy": strategy.name.value,
                    "contributed": len(accepted),
                },
            )
        result.houses = list(context.selected)
        return result

    async def _run(
        self, strategy: RankingStrategy, context: RankingContext, need: int,
    ) -> list[HouseSnapshot]:
        """Call one strategy under its timeout; failures become an empty contribution."""
        log_extra = {
            "project_id": str(context.project_id),
            "round_number": context.round_number,
            "strategy": strategy.name.value,
        }
        try:
            return await asyncio.wait_for(
                strategy.contribute(context, need),
                timeout=strategy.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{strategy.name.value} timed out after {strategy.timeout_seconds}s",
                extra=log_extra,
            )
        except OracleUnavailableError as e:
            logger.warning(
                f"{strategy.name.value} unavailable: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
        except Exception as e:
            logger.error(
                f"{strategy.name.value} failed: {e}", exc_info=True, extra=log_extra,
            )
        return []

    async def select_next_round(
        self,
        db: AsyncSession,
        project: Project,
        round_number: int,
        target_size: int = 10,
    ) -> list[House]:
        """Pick up to target_size unplaced houses for round_number and place them."""
        items = ItemStore(db)
        ledger = RoundLedger(db)

        unplaced = await items.list_unplaced_items(project.id)
        if not unplaced:
            logger.info(
                "No unplaced houses left",
                extra={"project_id": str(project.id), "round_number": round_number},
            )
            return []

        context = RankingContext(
            project_id=ProjectId(project.id),
            round_number=round_number,
            target_size=target_size,
            requirements=project.requirements,
            profile=project.profile,
            unplaced=[_snapshot(h) for h in unplaced],
            rated=await ledger.rated_history(project.id),
            placed_ids=frozenset(await ledger.placed_house_ids(project.id)),
        )
        result = await self.fill(context, self.strategies_for(round_number))

        picked_ids = [h.id for h in result.houses]
        await ledger.place_items(project.id, round_number, picked_ids)
        by_id = {h.id: h for h in unplaced}
        return [by_id[house_id] for house_id in picked_ids]
