"""Project Schemas — project management, customer import and document upload.

Invariants:
    - ProjectCreate.name: optional, stripped; blank → default project name
    - DocumentInput.filename non-empty; page_ids stripped, non-empty, at most
      HOUSE_ID_MAX_LENGTH characters and unique when present
    - CustomerImport carries fields already extracted by the CRM scraper

Design Decisions:
    - Documents arrive as extracted text (pages separated by form feed): no multipart parsing
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fango.core.domain_types import DEFAULT_PROJECT_NAME, HOUSE_ID_MAX_LENGTH


class ProjectCreate(BaseModel):
    name: str = Field(DEFAULT_PROJECT_NAME, max_length=200)

    @field_validator("name", mode="before")
    @classmethod
    def default_blank_name(cls, v):
        if v is None:
            return DEFAULT_PROJECT_NAME
        if isinstance(v, str):
            return v.strip() or DEFAULT_PROJECT_NAME
        return v


class RequirementsUpdate(BaseModel):
    """Free-text customer requirements (replaces the current value)."""
    requirements: str = Field(max_length=50_000)


class CustomerImport(BaseModel):
    customer_id: str = Field(min_length=1, max_length=100)
    name: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=200)
    property_name: str | None = Field(None, max_length=500)
    requirements: str | None = Field(None, max_length=50_000)


class DocumentInput(BaseModel):
    filename: str = Field(min_length=1, max_length=400)
    content: str = ""
    content_type: str | None = None
    page_ids: list[str] | None = None

    @field_validator("filename")
    @classmethod
    def strip_filename(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("filename cannot be empty or whitespace")
        return v

    @field_validator("page_ids")
    @classmethod
    def normalize_page_ids(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        ids = [p.strip() for p in v]
        if not all(ids):
            raise ValueError("page_ids cannot contain empty ids")
        if any(len(p) > HOUSE_ID_MAX_LENGTH for p in ids):
            raise ValueError(f"page_ids must be at most {HOUSE_ID_MAX_LENGTH} characters")
        if len(set(ids)) != len(ids):
            raise ValueError("page_ids must be unique")
        return ids


class DocumentBatch(BaseModel):
    documents: list[DocumentInput] = Field(min_length=1, max_length=100)


class ListingSearchRequest(BaseModel):
    """Search parameters; requirements default to the project's own."""
    requirements: str | None = Field(None, max_length=50_000)
    type_id: str | None = Field(None, max_length=50)


class ProjectResponse(BaseModel):
    """Project response — public-facing project data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    requirements: str | None
    profile: str | None
    current_round: int
    external_ref: str | None
    created_at: datetime


class HouseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    content: str | None
    summary: str | None = None
    created_at: datetime
