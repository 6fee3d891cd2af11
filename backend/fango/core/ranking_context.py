"""Ranking Context — immutable inputs + running selection for one candidate-set fill.

Invariants:
    - unplaced holds only houses with no ledger entry at context build time
    - selected is append-only and duplicate-free (guarded by accept_candidates)
    - remaining == unplaced minus selected, in unplaced order

Design Decisions:
    - Snapshots (not ORM rows) so strategies stay free of DB access
"""

from dataclasses import dataclass, field

from fango.core.domain_types import ProjectId, Rating


@dataclass(frozen=True)
class HouseSnapshot:
    """Read-only view of a house handed to strategies and prompts."""
    id: str
    filename: str
    content: str | None = None


@dataclass(frozen=True)
class RatedHouse:
    """A rated ledger entry joined with its house."""
    house_id: str
    filename: str
    content: str | None
    rating: Rating
    notes: str | None = None


@dataclass
class RankingContext:
    """Everything a RankingStrategy may read while contributing."""

    project_id: ProjectId
    round_number: int
    target_size: int
    requirements: str | None = None
    profile: str | None = None
    unplaced: list[HouseSnapshot] = field(default_factory=list)
    rated: list[RatedHouse] = field(default_factory=list)
    placed_ids: frozenset[str] = frozenset()
    selected: list[HouseSnapshot] = field(default_factory=list)

    @property
    def selected_ids(self) -> set[str]:
        return {h.id for h in self.selected}

    @property
    def remaining(self) -> list[HouseSnapshot]:
        """Unplaced houses not yet picked by an earlier strategy."""
        taken = self.selected_ids
        return [h for h in self.unplaced if h.id not in taken]

    @property
    def excluded_ids(self) -> set[str]:
        """Ids an oracle must not propose: placed in any round or already picked."""
        return set(self.placed_ids) | self.selected_ids

    @property
    def remaining_need(self) -> int:
        return max(0, self.target_size - len(self.selected))

    @property
    def has_ratings(self) -> bool:
        return len(self.rated) > 0
