"""Round Schemas — candidate sets and rating submissions.

Invariants:
    - RatingSubmission.ratings: at least one item, house ids unique
    - rating ∈ {good, question, bad} (Rating enum); notes ≤ 2000 chars
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fango.core.domain_types import Rating, RoundPhase


class RatingItem(BaseModel):
    house_id: str = Field(min_length=1, max_length=100)
    rating: Rating
    notes: str | None = Field(None, max_length=2000)


class RatingSubmission(BaseModel):
    ratings: list[RatingItem] = Field(min_length=1)

    @field_validator("ratings")
    @classmethod
    def unique_houses(cls, v: list[RatingItem]) -> list[RatingItem]:
        ids = [r.house_id for r in v]
        if len(set(ids)) != len(ids):
            raise ValueError("each house may be rated once per submission")
        return v


class RoundItem(BaseModel):
    """One house offered in a round, with its rating state."""
    house_id: str
    filename: str
    content: str | None
    position: int
    rating: Rating | None = None
    notes: str | None = None


class RoundResponse(BaseModel):
    project_id: UUID
    round: int
    phase: RoundPhase
    completed: bool
    all_rated: bool
    items: list[RoundItem]
