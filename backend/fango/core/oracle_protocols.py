"""Boundary Protocols — contracts between the ranking core and external oracles.

Invariants:
    - Oracle implementations raise OracleUnavailableError on any failure
    - Callers (ranking chain, profile builder) treat every oracle as untrusted

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: implementations do network IO
"""

from dataclasses import dataclass
from typing import Protocol

from fango.core.domain_types import CoarseRating, StrategyName
from fango.core.ranking_context import HouseSnapshot, RankingContext


@dataclass(frozen=True)
class RatingSignal:
    """One rated house as sent to the similarity oracle."""
    house_id: str
    rating: CoarseRating


@dataclass(frozen=True)
class ScoredCandidate:
    """One recommendation returned by the similarity oracle."""
    house_id: str
    score: float | None = None


class SimilarityOracle(Protocol):
    """Vector-similarity ranking service."""
    async def recommend(
        self,
        *,
        subject_id: str,
        ratings: list[RatingSignal],
        limit: int,
        exclude_ids: list[str],
    ) -> list[ScoredCandidate]: ...


class DocumentIndexer(Protocol):
    """Similarity-server ingestion: embeds a PDF and returns one page id per page."""
    async def index_document(
        self, *, subject_id: str, filename: str, data: bytes,
    ) -> list[str]: ...


class ListingSearch(Protocol):
    """External property search; answers with a PDF of matching listings."""
    async def search(self, *, requirements: str, type_id: str | None) -> bytes: ...


class TextOracle(Protocol):
    """Single-turn, stateless language-generation service."""
    async def complete(self, *, system: str, prompt: str) -> str: ...


class RankingStrategy(Protocol):
    """One stage of the fallback chain."""
    name: StrategyName
    timeout_seconds: float | None

    def applies(self, context: RankingContext) -> bool: ...

    async def contribute(
        self, context: RankingContext, remaining_need: int,
    ) -> list[HouseSnapshot]: ...
