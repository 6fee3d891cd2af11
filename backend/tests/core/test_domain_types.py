"""Domain Types — verifies round constants, rating enums and the coarse rating map.

Tests:
    - Round sequence is 0..3 with a distinct terminal marker
    - Rating values match the wire format
    - Local ratings map onto the similarity server's three-level scale
"""

from uuid import uuid4

from fango.core.domain_types import (
    COMPLETED_ROUND, FINAL_ROUND, INITIAL_ROUND, ROUND_SIZE,
    CoarseRating, ProjectId, Rating, RoundPhase, StrategyName, to_coarse,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert ProjectId(uid) == uid


def test_round_sequence_constants():
    assert INITIAL_ROUND == 0
    assert FINAL_ROUND == 3
    assert COMPLETED_ROUND == 4
    assert ROUND_SIZE == 10


def test_rating_values_serialize_to_string():
    assert Rating.GOOD.value == "good"
    assert Rating.QUESTION.value == "question"
    assert Rating.BAD.value == "bad"
    assert Rating("question") is Rating.QUESTION


def test_to_coarse_maps_each_rating():
    assert to_coarse(Rating.GOOD) == CoarseRating.GOOD
    assert to_coarse(Rating.QUESTION) == CoarseRating.MEDIUM
    assert to_coarse(Rating.BAD) == CoarseRating.POOR


def test_to_coarse_accepts_raw_strings():
    assert to_coarse("bad") == CoarseRating.POOR


def test_to_coarse_unknown_rating_is_medium():
    assert to_coarse("meh") == CoarseRating.MEDIUM


def test_round_phase_has_six_states():
    assert len(RoundPhase) == 6
    assert RoundPhase.NOT_STARTED in RoundPhase
    assert RoundPhase.COMPLETED in RoundPhase


def test_strategy_names_in_fallback_order():
    assert [s.value for s in StrategyName] == ["similarity", "llm", "random"]
