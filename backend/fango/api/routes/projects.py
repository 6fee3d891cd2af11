"""Project Routes — project CRUD, customer import, document ingestion and listing search.

Invariants:
    - Unknown project ids → ProjectNotFoundError (404 via global handler)
    - DELETE returns 202 immediately; the DB cascade runs as a background task holding
      the project lock
    - Document ingestion and listing search are all-or-nothing per request (single commit)

Design Decisions:
    - Background deletion opens its own session: the request session is closed by then
    - Similarity-server vectors for deleted houses are left in place (logged)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.errors import ExternalSearchError
from fango.infrastructure import database
from fango.infrastructure.database import get_db
from fango.infrastructure.project_locks import ProjectLockRegistry
from fango.infrastructure.runtime import RecommendationRuntime, get_runtime
from fango.models.project import Project
from fango.models.round_entry import RoundEntry
from fango.schemas.project import (
    CustomerImport, DocumentBatch, HouseResponse, ListingSearchRequest, ProjectCreate,
    ProjectResponse, RequirementsUpdate,
)
from fango.services.ingestion import (
    DocumentUpload, import_customer, ingest_documents, search_listings,
)
from fango.services.item_store import ItemStore
from fango.services.projects import delete_project, get_project_or_raise

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.post(
    "", response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate, db: AsyncSession = Depends(get_db),
):
    project = Project(name=body.name)
    db.add(project)
    await db.commit()
    await db.refresh(project)
    logger.info("Project created", extra={"project_id": str(project.id)})
    return project


@router.get("")
async def list_projects(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List projects, newest first."""
    result = await db.execute(
        select(Project)
        .order_by(Project.created_at.desc())
        .limit(limit).offset(offset)
    )
    return {
        "projects": [
            ProjectResponse.model_validate(p).model_dump(mode="json")
            for p in result.scalars().all()
        ],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{project_id}")
async def get_project(
    project_id: UUID, db: AsyncSession = Depends(get_db),
):
    """Project with its houses and every round entry."""
    project = await get_project_or_raise(db, project_id)
    houses = await ItemStore(db).list_items(project.id)
    result = await db.execute(
        select(RoundEntry)
        .where(RoundEntry.project_id == project.id)
        .order_by(RoundEntry.round_number, RoundEntry.position)
    )
    return {
        "project": ProjectResponse.model_validate(project).model_dump(mode="json"),
        "houses": [
            HouseResponse.model_validate(h).model_dump(mode="json")
            for h in sorted(houses, key=lambda h: h.created_at)
        ],
        "recommendations": [
            {
                "house_id": e.house_id,
                "round": e.round_number,
                "rating": e.rating,
                "notes": e.notes,
            }
            for e in result.scalars().all()
        ],
    }


@router.put("/{project_id}/requirements", response_model=ProjectResponse)
async def update_requirements(
    project_id: UUID,
    body: RequirementsUpdate,
    db: AsyncSession = Depends(get_db),
):
    project = await get_project_or_raise(db, project_id)
    project.requirements = body.requirements
    await db.commit()
    return project


async def _delete_project_in_background(
    project_id: UUID, locks: ProjectLockRegistry,
) -> None:
    """Background task: delete project and everything it owns.

    Runs under the project lock, so an in-flight start/submit finishes first and
    any request queued behind the deletion sees the project gone.
    """
    manager = database.db_manager
    if not manager:
        logger.error(f"Cannot delete project {project_id}: database not initialized")
        return
    async with locks.hold(project_id):
        async with manager.session() as db:
            if not await delete_project(db, project_id):
                logger.warning(f"Project {project_id} already deleted (background cleanup)")


@router.delete("/{project_id}", status_code=status.HTTP_202_ACCEPTED)
async def remove_project(
    project_id: UUID,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    runtime: RecommendationRuntime = Depends(get_runtime),
):
    """Accept project deletion. DB cascade runs in background."""
    await get_project_or_raise(db, project_id)
    background_tasks.add_task(_delete_project_in_background, project_id, runtime.locks)


@router.post(
    "/import", response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_project(
    body: CustomerImport, db: AsyncSession = Depends(get_db),
):
    """Create a project from a customer inquiry scraped from the CRM."""
    return await import_customer(db, body.model_dump())


@router.post("/{project_id}/documents", status_code=status.HTTP_201_CREATED)
async def upload_documents(
    project_id: UUID,
    body: DocumentBatch,
    db: AsyncSession = Depends(get_db),
):
    """Add listing documents as houses, or text documents as requirements."""
    project = await get_project_or_raise(db, project_id)
    result = await ingest_documents(db, project, [
        DocumentUpload(
            filename=d.filename,
            content=d.content,
            content_type=d.content_type,
            page_ids=d.page_ids,
        )
        for d in body.documents
    ])
    await db.commit()
    return {
        "house_ids": result.house_ids,
        "requirement_files": result.requirement_files,
        "requirements": project.requirements,
    }


@router.post("/{project_id}/search-properties", status_code=status.HTTP_201_CREATED)
async def search_properties(
    project_id: UUID,
    body: ListingSearchRequest,
    db: AsyncSession = Depends(get_db),
    runtime: RecommendationRuntime = Depends(get_runtime),
):
    """Add the listings the external search API finds for the requirements."""
    project = await get_project_or_raise(db, project_id)
    if runtime.listing_search is None:
        raise ExternalSearchError("not_configured", "EXTERNAL_SEARCH_URL/API_KEY not set")
    result = await search_listings(
        db, project, runtime.listing_search, runtime.document_indexer,
        requirements=body.requirements, type_id=body.type_id,
    )
    await db.commit()
    return {
        "house_ids": result.house_ids,
        "processed_pages": len(result.house_ids),
    }
