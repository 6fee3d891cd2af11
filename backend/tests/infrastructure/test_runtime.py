"""Recommendation Runtime — collaborator wiring and lifecycle."""

from fango.config import Settings
from fango.infrastructure.language_oracle import AnthropicTextOracle
from fango.infrastructure.listing_search import HttpListingSearch
from fango.infrastructure.runtime import RecommendationRuntime
from fango.infrastructure.similarity_client import HttpSimilarityOracle
from fango.core.domain_types import StrategyName

from tests.services.fake_oracles import (
    FakeListingSearch, FakeSimilarityOracle, FakeTextOracle,
)


def _settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "anthropic_api_key": "",
        "similarity_server_url": "",
        "external_search_url": "",
        "external_search_api_key": "",
    }
    values.update(overrides)
    return Settings(**values)


def test_chain_without_oracles_is_random_only():
    chain = RecommendationRuntime(_settings()).build_chain()
    assert [s.name for s in chain.strategies_for(1)] == [StrategyName.RANDOM]


def test_chain_order_with_both_oracles():
    runtime = RecommendationRuntime(
        _settings(), FakeSimilarityOracle(), FakeTextOracle(),
    )
    chain = runtime.build_chain()
    assert [s.name for s in chain.strategies_for(2)] == [
        StrategyName.SIMILARITY, StrategyName.LLM, StrategyName.RANDOM,
    ]
    assert [s.name for s in chain.strategies_for(0)] == [StrategyName.RANDOM]


def test_strategy_timeouts_from_settings():
    runtime = RecommendationRuntime(
        _settings(similarity_strategy_timeout_seconds=3, llm_strategy_timeout_seconds=90),
        FakeSimilarityOracle(), FakeTextOracle(),
    )
    similarity, llm = runtime.build_chain().strategies
    assert similarity.timeout_seconds == 3
    assert llm.timeout_seconds == 90


async def test_start_builds_configured_clients():
    runtime = RecommendationRuntime(_settings(
        anthropic_api_key="sk-ant-real-looking",
        similarity_server_url="http://vector.test",
    ))
    await runtime.start()
    assert isinstance(runtime.similarity_oracle, HttpSimilarityOracle)
    assert isinstance(runtime.text_oracle, AnthropicTextOracle)
    await runtime.stop()
    assert runtime.similarity_oracle is None
    assert runtime.text_oracle is None


async def test_start_leaves_unconfigured_oracles_off():
    runtime = RecommendationRuntime(_settings())
    await runtime.start()
    assert runtime.similarity_oracle is None
    assert runtime.text_oracle is None


async def test_stop_closes_injected_oracles():
    similarity, text = FakeSimilarityOracle(), FakeTextOracle()
    runtime = RecommendationRuntime(_settings(), similarity, text)
    await runtime.start()
    assert runtime.similarity_oracle is similarity
    await runtime.stop()
    assert similarity.closed and text.closed


def test_controller_uses_settings_round_size():
    runtime = RecommendationRuntime(_settings(round_size=7))
    assert runtime.controller(db=None).round_size == 7


async def test_start_builds_listing_search_and_indexer():
    runtime = RecommendationRuntime(_settings(
        similarity_server_url="http://vector.test",
        external_search_url="http://search.test",
        external_search_api_key="key",
    ))
    await runtime.start()
    assert isinstance(runtime.listing_search, HttpListingSearch)
    assert runtime.document_indexer is runtime.similarity_oracle
    await runtime.stop()
    assert runtime.listing_search is None
    assert runtime.document_indexer is None


async def test_listing_search_needs_url_and_key():
    runtime = RecommendationRuntime(_settings(external_search_url="http://search.test"))
    await runtime.start()
    assert runtime.listing_search is None
    assert runtime.document_indexer is None


async def test_stop_closes_shared_client_once():
    similarity = FakeSimilarityOracle()
    runtime = RecommendationRuntime(
        _settings(), similarity, document_indexer=similarity,
        listing_search=FakeListingSearch(b"%PDF"),
    )
    search = runtime.listing_search
    await runtime.stop()
    assert similarity.close_calls == 1
    assert search.closed
