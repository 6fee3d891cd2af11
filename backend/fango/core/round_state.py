"""Round State Machine — pure transition rules for the recommendation rounds.

Invariants:
    - Phase is DERIVED from (current_round, entries placed in that round), never stored
    - current_round only moves forward, by exactly 1 per accepted submission
    - A submission is accepted only for the active round and only if, after applying it,
      every entry of that round carries a rating
    - check_submission is PURE: raises or returns, never mutates

Design Decisions:
    - NotStarted vs Round0Active distinguished by ledger contents: a project whose round 0
      came back empty (no houses yet) stays NotStarted and can be started again
    - Round 3 is terminal: accepting it moves to COMPLETED_ROUND with no selection
"""

from collections.abc import Mapping
from dataclasses import dataclass

from fango.core.domain_types import (
    COMPLETED_ROUND, FINAL_ROUND, INITIAL_ROUND, Rating, RoundPhase,
)
from fango.core.errors import (
    IncompleteRatingError, RoundNotActiveError, UnknownEntryError,
)

_ACTIVE_PHASES: dict[int, RoundPhase] = {
    0: RoundPhase.ROUND_0_ACTIVE,
    1: RoundPhase.ROUND_1_ACTIVE,
    2: RoundPhase.ROUND_2_ACTIVE,
    3: RoundPhase.ROUND_3_ACTIVE,
}


def derive_phase(current_round: int, placed_in_current: int) -> RoundPhase:
    """Map persisted round counter + ledger size onto a controller state."""
    if current_round >= COMPLETED_ROUND:
        return RoundPhase.COMPLETED
    if current_round == INITIAL_ROUND and placed_in_current == 0:
        return RoundPhase.NOT_STARTED
    return _ACTIVE_PHASES[current_round]


def is_completed(current_round: int) -> bool:
    return current_round >= COMPLETED_ROUND


def all_rated(ratings: list[Rating | None]) -> bool:
    """True iff no rating is unset (vacuously true for an empty round)."""
    return all(r is not None for r in ratings)


def next_round(round_number: int) -> int:
    """Round that becomes active once round_number is fully rated."""
    return min(round_number + 1, COMPLETED_ROUND)


def needs_selection(round_number: int) -> bool:
    """Whether a round number still gets a candidate set."""
    return INITIAL_ROUND <= round_number <= FINAL_ROUND


def check_submission(
    current_round: int,
    round_number: int,
    entry_ratings: Mapping[str, Rating | None],
    submitted: Mapping[str, Rating],
) -> None:
    """Validate a rating submission against the ledger. Pure — no mutation.

    entry_ratings: house_id → existing rating for every entry of round_number.
    submitted: house_id → rating carried by the request.

    Raises:
        RoundNotActiveError: round_number is not the project's active round,
            or round 0 has not been started
        UnknownEntryError: a submitted house was not offered in round_number
        IncompleteRatingError: some entry would still be unrated afterwards
    """
    if is_completed(current_round) or round_number != current_round:
        raise RoundNotActiveError(round_number, current_round)
    if not entry_ratings and derive_phase(current_round, 0) == RoundPhase.NOT_STARTED:
        raise RoundNotActiveError(round_number, current_round)

    for house_id in submitted:
        if house_id not in entry_ratings:
            raise UnknownEntryError(house_id, round_number)

    unrated = [
        house_id for house_id, rating in entry_ratings.items()
        if rating is None and house_id not in submitted
    ]
    if unrated:
        raise IncompleteRatingError(round_number, unrated)


@dataclass(frozen=True)
class RatingInput:
    """One rating carried by a client submission."""
    house_id: str
    rating: Rating
    notes: str | None = None
