"""Ranking Strategies — the three stages of the candidate fallback chain.

Invariants:
    - contribute() returns at most remaining_need houses, all from context.remaining,
      none in context.excluded_ids, no duplicates
    - Oracle-backed strategies raise on failure; the chain converts that to zero contribution
    - SimilarityStrategy applies only when at least one rating exists
    - RandomFillStrategy always applies and never calls out

Design Decisions:
    - Each strategy re-validates oracle output itself (accept_candidates), so a strategy
      is independently testable with a lying fake oracle
"""

import logging
import random

from fango.core.candidate_selection import accept_candidates, random_fill
from fango.core.domain_types import StrategyName, to_coarse
from fango.core.format_prompts import (
    RANKING_SYSTEM_PROMPT, build_ranking_prompt, parse_id_list,
)
from fango.core.oracle_protocols import RatingSignal, SimilarityOracle, TextOracle
from fango.core.ranking_context import HouseSnapshot, RankingContext

logger = logging.getLogger(__name__)


class SimilarityStrategy:
    """Ask the vector-similarity server for houses close to the rated history."""

    name = StrategyName.SIMILARITY

    def __init__(self, oracle: SimilarityOracle, timeout_seconds: float | None = 15.0):
        self.oracle = oracle
        self.timeout_seconds = timeout_seconds

    def applies(self, context: RankingContext) -> bool:
        return context.has_ratings

    async def contribute(
        self, context: RankingContext, remaining_need: int,
    ) -> list[HouseSnapshot]:
        signals = [
            RatingSignal(house_id=r.house_id, rating=to_coarse(r.rating))
            for r in context.rated
        ]
        excluded = context.excluded_ids
        candidates = await self.oracle.recommend(
            subject_id=str(context.project_id),
            ratings=signals,
            limit=context.target_size,
            exclude_ids=sorted(excluded),
        )
        accepted = accept_candidates(
            (c.house_id for c in candidates),
            context.remaining, excluded, remaining_need,
        )
        if len(accepted) < len(candidates):
            logger.info(
                f"Similarity oracle proposed {len(candidates)}, accepted {len(accepted)}",
                extra={"project_id": str(context.project_id), "strategy": self.name.value},
            )
        return accepted


class LLMRankingStrategy:
    """Ask the language oracle to pick houses given requirements + profile."""

    name = StrategyName.LLM

    def __init__(self, oracle: TextOracle, timeout_seconds: float | None = 180.0):
        self.oracle = oracle
        self.timeout_seconds = timeout_seconds

    def applies(self, context: RankingContext) -> bool:
        return bool(context.remaining)

    async def contribute(
        self, context: RankingContext, remaining_need: int,
    ) -> list[HouseSnapshot]:
        candidates = context.remaining
        prompt = build_ranking_prompt(
            context.requirements, context.profile, candidates, remaining_need,
        )
        text = await self.oracle.complete(system=RANKING_SYSTEM_PROMPT, prompt=prompt)
        return accept_candidates(
            parse_id_list(text), candidates, context.excluded_ids, remaining_need,
        )


class RandomFillStrategy:
    """Uniform random sample of whatever is left."""

    name = StrategyName.RANDOM
    timeout_seconds: float | None = None

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def applies(self, context: RankingContext) -> bool:
        return True

    async def contribute(
        self, context: RankingContext, remaining_need: int,
    ) -> list[HouseSnapshot]:
        return random_fill(context.remaining, remaining_need, self.rng)
