"""Document Handling — page splitting and requirement text assembly for ingestion.

Invariants:
    - One page → one house; page filenames are page_{n}_{filename} (1-based)
    - page_ids (issued by the similarity server) are used positionally when present
    - Blank page text is stored as EXTRACTION_FAILED_CONTENT
    - Requirement blocks appended as 【filename】 sections separated by a blank line

Design Decisions:
    - Pages delimited by form feed (pdftotext convention); format parsing stays outside
"""

import uuid
from dataclasses import dataclass

from fango.core.domain_types import EXTRACTION_FAILED_CONTENT

PAGE_BREAK = "\f"

_CUSTOMER_FIELDS = (
    ("name", "お客様名"),
    ("phone", "電話番号"),
    ("email", "メールアドレス"),
    ("property_name", "問合せ物件"),
)


@dataclass(frozen=True)
class NewHouse:
    """House ready for insertion into the item store."""
    id: str
    filename: str
    content: str


def is_requirements_document(filename: str, content_type: str | None = None) -> bool:
    """Plain-text uploads carry customer requirements, not listings."""
    return content_type == "text/plain" or filename.lower().endswith(".txt")


def split_pages(text: str) -> list[str]:
    """Split extracted document text into pages; trailing empty page dropped."""
    pages = text.split(PAGE_BREAK)
    if len(pages) > 1 and not pages[-1].strip():
        pages.pop()
    return pages


def build_document_houses(
    filename: str, text: str, page_ids: list[str] | None = None,
) -> list[NewHouse]:
    """One NewHouse per page of the document."""
    return build_page_houses(filename, split_pages(text), page_ids)


def build_page_houses(
    filename: str, pages: list[str], page_ids: list[str] | None = None,
) -> list[NewHouse]:
    """One NewHouse per already-extracted page text."""
    page_ids = page_ids or []
    houses = []
    for i, page in enumerate(pages):
        house_id = page_ids[i] if i < len(page_ids) else str(uuid.uuid4())
        houses.append(NewHouse(
            id=house_id,
            filename=f"page_{i + 1}_{filename}",
            content=page.strip() or EXTRACTION_FAILED_CONTENT,
        ))
    return houses


def append_requirements(existing: str | None, filename: str, text: str) -> str:
    """Append a text document to the requirements under a 【filename】 header."""
    block = f"【{filename}】\n{text}"
    if not existing:
        return block
    return f"{existing}\n\n{block}"


def build_customer_requirements(customer: dict) -> str:
    """Requirement lines from CRM inquiry fields (missing fields skipped)."""
    lines = [
        f"【{label}】{customer[key]}"
        for key, label in _CUSTOMER_FIELDS
        if customer.get(key)
    ]
    return "\n".join(lines)
