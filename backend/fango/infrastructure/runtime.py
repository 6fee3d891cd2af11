"""Recommendation Runtime — container for the collaborators shared across requests.

Invariants:
    - Built once per application (FastAPI lifespan); routes receive it via get_runtime
    - An oracle is None when it is not configured; the ranking chain then skips it
    - The similarity client doubles as the document indexer; listing_search is None
      unless the search API URL and key are both set
    - stop() closes every client start() opened; clients injected by the caller are
      closed too
    - Per-request objects (controller, profile builder) are built from a session on demand

Design Decisions:
    - No module-level singletons for oracles or locks: tests build a runtime holding
      deterministic fakes and override the dependency
"""

import logging
import random

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from fango.config import Settings
from fango.core.oracle_protocols import (
    DocumentIndexer, ListingSearch, SimilarityOracle, TextOracle,
)
from fango.infrastructure.anthropic_client import ResilientAnthropicClient
from fango.infrastructure.language_oracle import AnthropicTextOracle
from fango.infrastructure.listing_search import HttpListingSearch
from fango.infrastructure.project_locks import ProjectLockRegistry
from fango.infrastructure.similarity_client import HttpSimilarityOracle
from fango.services.profile_builder import PreferenceProfileBuilder
from fango.services.ranking_chain import RankingOracleChain
from fango.services.ranking_strategies import (
    LLMRankingStrategy, RandomFillStrategy, SimilarityStrategy,
)
from fango.services.round_controller import RoundController

logger = logging.getLogger(__name__)


class RecommendationRuntime:
    """Oracles, locks and tuning shared by every request of one application."""

    def __init__(
        self,
        settings: Settings,
        similarity_oracle: SimilarityOracle | None = None,
        text_oracle: TextOracle | None = None,
        locks: ProjectLockRegistry | None = None,
        rng: random.Random | None = None,
        document_indexer: DocumentIndexer | None = None,
        listing_search: ListingSearch | None = None,
    ):
        self.settings = settings
        self.similarity_oracle = similarity_oracle
        self.text_oracle = text_oracle
        self.locks = locks or ProjectLockRegistry()
        self.rng = rng or random.Random()
        self.document_indexer = document_indexer
        self.listing_search = listing_search

    async def start(self) -> None:
        """Open clients for every oracle the settings configure."""
        s = self.settings
        if self.similarity_oracle is None and s.similarity_oracle_enabled:
            self.similarity_oracle = HttpSimilarityOracle(
                s.similarity_server_url, s.similarity_timeout_seconds,
                index_timeout_seconds=s.similarity_index_timeout_seconds,
            )
            if self.document_indexer is None:
                self.document_indexer = self.similarity_oracle
        if self.listing_search is None and s.listing_search_enabled:
            self.listing_search = HttpListingSearch(
                s.external_search_url, s.external_search_api_key,
                s.external_search_timeout_seconds,
            )
        if self.text_oracle is None and s.language_oracle_enabled:
            client = ResilientAnthropicClient(
                api_key=s.anthropic_api_key,
                max_retries=s.anthropic_max_retries,
                base_delay_ms=s.anthropic_base_delay_ms,
                max_delay_ms=s.anthropic_max_delay_ms,
                timeout_seconds=s.anthropic_timeout_seconds,
            )
            self.text_oracle = AnthropicTextOracle(client, s.llm_model, s.llm_max_tokens)
        logger.info(
            f"Runtime started (similarity={self.similarity_oracle is not None}, "
            f"language={self.text_oracle is not None}, "
            f"search={self.listing_search is not None})",
        )

    async def stop(self) -> None:
        clients = [
            self.similarity_oracle, self.text_oracle,
            self.document_indexer, self.listing_search,
        ]
        closed = set()
        for client in clients:
            close = getattr(client, "close", None)
            if close is None or id(client) in closed:
                continue
            closed.add(id(client))
            await close()
        self.similarity_oracle = None
        self.text_oracle = None
        self.document_indexer = None
        self.listing_search = None
        logger.info("Runtime stopped")

    def build_chain(self) -> RankingOracleChain:
        """Similarity → LLM → random, omitting unconfigured oracles."""
        s = self.settings
        strategies = []
        if self.similarity_oracle is not None:
            strategies.append(SimilarityStrategy(
                self.similarity_oracle, s.similarity_strategy_timeout_seconds,
            ))
        if self.text_oracle is not None:
            strategies.append(LLMRankingStrategy(
                self.text_oracle, s.llm_strategy_timeout_seconds,
            ))
        return RankingOracleChain(strategies, RandomFillStrategy(self.rng))

    def profile_builder(self, db: AsyncSession) -> PreferenceProfileBuilder:
        return PreferenceProfileBuilder(
            db, self.text_oracle, self.settings.llm_strategy_timeout_seconds,
        )

    def controller(self, db: AsyncSession) -> RoundController:
        return RoundController(
            db,
            self.build_chain(),
            self.profile_builder(db),
            self.locks,
            self.settings.round_size,
        )


def get_runtime(request: Request) -> RecommendationRuntime:
    """FastAPI dependency — the runtime built by the application lifespan."""
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise RuntimeError("Recommendation runtime not started")
    return runtime
