"""Candidate Selection — pure filtering of oracle proposals and random fill.

Invariants:
    - accept_candidates never returns an id outside the pool, an excluded id, or a duplicate
    - accept_candidates preserves proposal order and stops at limit
    - random_fill draws uniformly without replacement; randomness is injected

Design Decisions:
    - Oracles are untrusted: every proposal is re-validated here even when the oracle
      was told what to exclude
"""

import random
from collections.abc import Iterable, Sequence
from typing import TypeVar

from fango.core.ranking_context import HouseSnapshot

T = TypeVar("T")


def accept_candidates(
    proposed_ids: Iterable[str],
    pool: Sequence[HouseSnapshot],
    exclude: set[str],
    limit: int,
) -> list[HouseSnapshot]:
    """Keep proposals that are in the pool and not excluded, up to limit."""
    if limit <= 0:
        return []
    by_id = {h.id: h for h in pool}
    seen = set(exclude)
    accepted: list[HouseSnapshot] = []
    for raw_id in proposed_ids:
        house_id = str(raw_id).strip()
        if house_id in seen or house_id not in by_id:
            continue
        seen.add(house_id)
        accepted.append(by_id[house_id])
        if len(accepted) >= limit:
            break
    return accepted


def random_fill(pool: Sequence[T], need: int, rng: random.Random) -> list[T]:
    """Uniform sample of min(need, len(pool)) items."""
    if need <= 0 or not pool:
        return []
    return rng.sample(list(pool), min(need, len(pool)))
