"""Request Schemas — boundary validation for projects, documents and ratings.

Invariants:
    - Blank project names fall back to the default name
    - Document filenames non-blank; page_ids stripped, non-empty, bounded and unique
    - Rating submissions non-empty, one rating per house, rating in the enum
"""

import pytest
from pydantic import ValidationError

from fango.core.domain_types import DEFAULT_PROJECT_NAME, HOUSE_ID_MAX_LENGTH, Rating
from fango.schemas.project import CustomerImport, DocumentInput, ProjectCreate
from fango.schemas.round import RatingItem, RatingSubmission


def test_project_name_defaults():
    assert ProjectCreate().name == DEFAULT_PROJECT_NAME
    assert ProjectCreate(name="  ").name == DEFAULT_PROJECT_NAME
    assert ProjectCreate(name=" 田中様 ").name == "田中様"


def test_document_filename_required():
    with pytest.raises(ValidationError):
        DocumentInput(filename="   ", content="x")


def test_document_page_ids_unique():
    with pytest.raises(ValidationError):
        DocumentInput(filename="a.pdf", content="x", page_ids=["p", "p"])


def test_document_page_ids_stripped():
    doc = DocumentInput(filename="a.pdf", content="x\fy", page_ids=[" pg1 ", "pg2"])
    assert doc.page_ids == ["pg1", "pg2"]


def test_document_page_ids_unique_after_stripping():
    with pytest.raises(ValidationError):
        DocumentInput(filename="a.pdf", content="x", page_ids=["p", " p "])


def test_document_page_ids_reject_blank():
    with pytest.raises(ValidationError):
        DocumentInput(filename="a.pdf", content="x", page_ids=["p", "   "])


def test_document_page_ids_fit_house_id_column():
    DocumentInput(filename="a.pdf", content="x", page_ids=["p" * HOUSE_ID_MAX_LENGTH])
    with pytest.raises(ValidationError):
        DocumentInput(
            filename="a.pdf", content="x", page_ids=["p" * (HOUSE_ID_MAX_LENGTH + 1)],
        )


def test_customer_import_requires_id():
    with pytest.raises(ValidationError):
        CustomerImport(customer_id="")


def test_rating_item_parses_enum():
    item = RatingItem(house_id="h1", rating="question")
    assert item.rating == Rating.QUESTION
    assert item.notes is None


def test_rating_item_rejects_unknown_rating():
    with pytest.raises(ValidationError):
        RatingItem(house_id="h1", rating="excellent")


def test_rating_notes_bounded():
    with pytest.raises(ValidationError):
        RatingItem(house_id="h1", rating="good", notes="x" * 2001)


def test_submission_requires_items():
    with pytest.raises(ValidationError):
        RatingSubmission(ratings=[])


def test_submission_rejects_duplicate_houses():
    with pytest.raises(ValidationError):
        RatingSubmission(ratings=[
            {"house_id": "h1", "rating": "good"},
            {"house_id": "h1", "rating": "bad"},
        ])
