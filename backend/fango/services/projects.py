"""Project Lookup & Deletion — shared by routes and the round controller.

Invariants:
    - get_project_or_raise raises ProjectNotFoundError (never returns None)
    - delete_project removes entries, houses, then the project (FK order)

Design Decisions:
    - Explicit bulk deletes instead of ORM cascade: no async lazy loads of large
      collections, and works on SQLite without PRAGMA foreign_keys
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.errors import ProjectNotFoundError
from fango.models.house import House
from fango.models.project import Project
from fango.models.round_entry import RoundEntry

logger = logging.getLogger(__name__)


async def get_project_or_raise(db: AsyncSession, project_id: UUID) -> Project:
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if not project:
        raise ProjectNotFoundError(str(project_id))
    return project


async def delete_project(db: AsyncSession, project_id: UUID) -> bool:
    """Delete a project and everything it owns. Returns False if already gone."""
    result = await db.execute(select(Project.id).where(Project.id == project_id))
    if result.scalar_one_or_none() is None:
        return False
    await db.execute(delete(RoundEntry).where(RoundEntry.project_id == project_id))
    await db.execute(delete(House).where(House.project_id == project_id))
    await db.execute(delete(Project).where(Project.id == project_id))
    await db.commit()
    logger.info(
        f"Project {project_id} deleted (similarity vectors are not removed)",
        extra={"project_id": str(project_id)},
    )
    return True
