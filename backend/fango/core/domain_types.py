"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ProjectId wraps UUID; house ids stay plain strings (may come from the similarity server)
    - Round numbers form the closed sequence 0..FINAL_ROUND; COMPLETED_ROUND is terminal
    - All valid ratings encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ProjectId = NewType("ProjectId", UUID)


# ─── Round Constants ─────────────────────────────────────────────

INITIAL_ROUND: int = 0
FINAL_ROUND: int = 3
COMPLETED_ROUND: int = FINAL_ROUND + 1
ROUND_SIZE: int = 10

# Per-item excerpt bounds for language-oracle prompts
PROFILE_EXCERPT_CHARS: int = 500
RANKING_EXCERPT_CHARS: int = 800

# Width of houses.id; ids come from the similarity server or uuid4
HOUSE_ID_MAX_LENGTH: int = 100

DEFAULT_PROJECT_NAME: str = "新規プロジェクト"
EXTRACTION_FAILED_CONTENT: str = "[PDFの解析に失敗しました]"


# ─── Enums ───────────────────────────────────────────────────────

class Rating(str, Enum):
    """Client-facing rating of a house — unset until the client submits."""
    GOOD = "good"
    QUESTION = "question"
    BAD = "bad"


class CoarseRating(str, Enum):
    """Three-level scale understood by the similarity server."""
    GOOD = "good"
    MEDIUM = "medium"
    POOR = "poor"


_COARSE_BY_RATING: dict[Rating, CoarseRating] = {
    Rating.GOOD: CoarseRating.GOOD,
    Rating.QUESTION: CoarseRating.MEDIUM,
    Rating.BAD: CoarseRating.POOR,
}


def to_coarse(rating: Rating | str) -> CoarseRating:
    """Map a local rating onto the similarity server scale (unknown → medium)."""
    try:
        return _COARSE_BY_RATING[Rating(rating)]
    except ValueError:
        return CoarseRating.MEDIUM


class RoundPhase(str, Enum):
    """Round controller states, derived from current_round + ledger contents."""
    NOT_STARTED = "not_started"
    ROUND_0_ACTIVE = "round_0_active"
    ROUND_1_ACTIVE = "round_1_active"
    ROUND_2_ACTIVE = "round_2_active"
    ROUND_3_ACTIVE = "round_3_active"
    COMPLETED = "completed"


class StrategyName(str, Enum):
    """Ranking strategies in fallback order — used for logging and results."""
    SIMILARITY = "similarity"
    LLM = "llm"
    RANDOM = "random"
