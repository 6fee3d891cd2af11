"""Round Routes — start, read, rate and export recommendation rounds.

Invariants:
    - All state transitions go through RoundController (never touched here)
    - GET endpoints are pure reads: safe to retry after an abandoned request
    - Export reads the ledger directly: no controller, no lock
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.domain_types import COMPLETED_ROUND, FINAL_ROUND, INITIAL_ROUND, RoundPhase
from fango.core.round_state import RatingInput, all_rated
from fango.infrastructure.database import get_db
from fango.infrastructure.runtime import RecommendationRuntime, get_runtime
from fango.schemas.round import RatingSubmission, RoundItem, RoundResponse
from fango.services.projects import get_project_or_raise
from fango.services.round_controller import RoundView
from fango.services.round_ledger import RoundLedger, entry_rating

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects/{project_id}/rounds", tags=["rounds"])


def _to_response(view: RoundView) -> RoundResponse:
    ratings = [entry_rating(entry) for entry, _ in view.entries]
    return RoundResponse(
        project_id=view.project_id,
        round=view.round_number,
        phase=view.phase,
        completed=view.phase == RoundPhase.COMPLETED,
        all_rated=all_rated(ratings),
        items=[
            RoundItem(
                house_id=house.id,
                filename=house.filename,
                content=house.content,
                position=entry.position,
                rating=rating,
                notes=entry.notes,
            )
            for (entry, house), rating in zip(view.entries, ratings)
        ],
    )


@router.post("/start", response_model=RoundResponse)
async def start_rounds(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    runtime: RecommendationRuntime = Depends(get_runtime),
):
    """Sample round 0 (idempotent once started: returns the active round)."""
    view = await runtime.controller(db).start(project_id)
    return _to_response(view)


@router.get("/current", response_model=RoundResponse)
async def get_current_round(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    runtime: RecommendationRuntime = Depends(get_runtime),
):
    view = await runtime.controller(db).current_round_view(project_id)
    return _to_response(view)


@router.get("/{round_number}", response_model=RoundResponse)
async def get_round(
    project_id: UUID,
    round_number: int = Path(ge=INITIAL_ROUND, le=COMPLETED_ROUND),
    db: AsyncSession = Depends(get_db),
    runtime: RecommendationRuntime = Depends(get_runtime),
):
    view = await runtime.controller(db).round_view(project_id, round_number)
    return _to_response(view)


@router.post("/{round_number}/ratings", response_model=RoundResponse)
async def submit_ratings(
    project_id: UUID,
    body: RatingSubmission,
    round_number: int = Path(ge=INITIAL_ROUND, le=COMPLETED_ROUND),
    db: AsyncSession = Depends(get_db),
    runtime: RecommendationRuntime = Depends(get_runtime),
):
    """Rate the active round; on success the next round (or completion) is returned."""
    view = await runtime.controller(db).submit_ratings(
        project_id,
        round_number,
        [RatingInput(r.house_id, r.rating, r.notes) for r in body.ratings],
    )
    return _to_response(view)


@router.get("/{round_number}/export")
async def export_round(
    project_id: UUID,
    round_number: int = Path(ge=INITIAL_ROUND, le=FINAL_ROUND),
    db: AsyncSession = Depends(get_db),
):
    """Download one round's houses with their ratings as a JSON attachment."""
    project = await get_project_or_raise(db, project_id)
    entries = await RoundLedger(db).get_round_with_houses(project.id, round_number)
    payload = {
        "project_id": str(project.id),
        "project_name": project.name,
        "round": round_number,
        "houses": [
            {
                "house_id": house.id,
                "filename": house.filename,
                "content": house.content,
                "summary": house.summary,
                "position": entry.position,
                "rating": entry.rating,
                "notes": entry.notes,
            }
            for entry, house in entries
        ],
    }
    return JSONResponse(
        payload,
        headers={
            "Content-Disposition": f'attachment; filename="round_{round_number}_houses.json"',
        },
    )
