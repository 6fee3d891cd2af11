"""Document Ingestion — turns uploaded documents and CRM inquiries into project state.

Invariants:
    - Text documents (.txt / text/plain) only extend Project.requirements
    - Every other document becomes one house per page via ItemStore.add_items
    - A failing document aborts the whole batch (caller does not commit)
    - Customer import creates exactly one project with external_ref = customer_id
    - Listing search adds one house per page of the returned PDF; the similarity server
      indexes the PDF first when configured, and its page ids become the house ids

Design Decisions:
    - Uploaded documents arrive as extracted text (form-feed separated pages); only the
      PDF fetched from the listing search is parsed here
    - Indexing is best-effort: without page ids the houses get local UUIDs and are only
      reachable by the LLM and random strategies
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.documents import (
    append_requirements, build_customer_requirements, build_document_houses,
    build_page_houses, is_requirements_document,
)
from fango.core.domain_types import DEFAULT_PROJECT_NAME
from fango.core.errors import OracleUnavailableError
from fango.core.oracle_protocols import DocumentIndexer, ListingSearch
from fango.infrastructure.pdf_text import extract_pdf_pages
from fango.models.project import Project
from fango.services.item_store import ItemStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentUpload:
    filename: str
    content: str
    content_type: str | None = None
    page_ids: list[str] | None = None


@dataclass
class IngestionResult:
    house_ids: list[str] = field(default_factory=list)
    requirement_files: list[str] = field(default_factory=list)


async def ingest_documents(
    db: AsyncSession, project: Project, documents: list[DocumentUpload],
) -> IngestionResult:
    """Route each document to requirements or to the item store. No commit."""
    store = ItemStore(db)
    result = IngestionResult()
    for doc in documents:
        if is_requirements_document(doc.filename, doc.content_type):
            project.requirements = append_requirements(
                project.requirements, doc.filename, doc.content,
            )
            result.requirement_files.append(doc.filename)
            continue
        houses = build_document_houses(doc.filename, doc.content, doc.page_ids)
        result.house_ids.extend(await store.add_items(project.id, houses))

    await db.flush()
    logger.info(
        f"Ingested {len(documents)} document(s): {len(result.house_ids)} house(s), "
        f"{len(result.requirement_files)} requirement file(s)",
        extra={"project_id": str(project.id)},
    )
    return result


async def import_customer(db: AsyncSession, customer: dict) -> Project:
    """Create a project from scraped inquiry data. Commits."""
    requirements = customer.get("requirements") or build_customer_requirements(customer)
    customer_id = customer.get("customer_id")
    name = customer.get("name") or (
        f"顧客 {customer_id}" if customer_id else DEFAULT_PROJECT_NAME
    )
    project = Project(
        name=name,
        requirements=requirements or None,
        external_ref=customer_id,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    logger.info(
        "Project imported from customer inquiry",
        extra={"project_id": str(project.id)},
    )
    return project


async def search_listings(
    db: AsyncSession,
    project: Project,
    search: ListingSearch,
    indexer: DocumentIndexer | None = None,
    requirements: str | None = None,
    type_id: str | None = None,
) -> IngestionResult:
    """Fetch matching listings and store one house per result page. No commit."""
    project_ref = str(project.id)
    data = await search.search(
        requirements=requirements or project.requirements or "",
        type_id=type_id,
    )
    pages = extract_pdf_pages(data)
    filename = f"search_result_{datetime.now(timezone.utc):%Y%m%d%H%M%S%f}.pdf"

    page_ids: list[str] = []
    if indexer is not None:
        try:
            page_ids = await indexer.index_document(
                subject_id=project_ref, filename=filename, data=data,
            )
        except OracleUnavailableError as e:
            logger.warning(
                f"Search result not indexed, using local ids: {e.message}",
                extra={"project_id": project_ref},
            )
        if page_ids and len(page_ids) != len(pages):
            logger.warning(
                f"Indexer returned {len(page_ids)} page id(s) for {len(pages)} page(s)",
                extra={"project_id": project_ref},
            )

    houses = build_page_houses(filename, pages, page_ids)
    house_ids = await ItemStore(db).add_items(project.id, houses)
    await db.flush()
    logger.info(
        f"Listing search added {len(house_ids)} house(s)",
        extra={"project_id": project_ref},
    )
    return IngestionResult(house_ids=house_ids)
