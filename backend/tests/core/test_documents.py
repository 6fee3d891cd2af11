"""Document Handling — tests for page splitting and requirement text assembly.

Tests cover:
    - .txt and text/plain are requirement documents
    - One house per form-feed page, page_{n}_{filename} naming, page_ids used positionally
    - Blank pages stored as the extraction failure sentinel, including a trailing
      blank page of an already-extracted PDF
    - Requirements appended under 【filename】 headers
    - Customer requirement lines skip missing fields
"""

from fango.core.documents import (
    append_requirements, build_customer_requirements, build_document_houses,
    build_page_houses,
    is_requirements_document, split_pages,
)
from fango.core.domain_types import EXTRACTION_FAILED_CONTENT


def test_txt_is_requirements_document():
    assert is_requirements_document("要望.TXT")
    assert is_requirements_document("notes", "text/plain")
    assert not is_requirements_document("物件.pdf", "application/pdf")


def test_split_pages_on_form_feed():
    assert split_pages("a\fb\fc") == ["a", "b", "c"]


def test_split_pages_drops_trailing_empty_page():
    assert split_pages("a\fb\f") == ["a", "b"]


def test_single_page_document():
    assert split_pages("only") == ["only"]


def test_houses_named_per_page():
    houses = build_document_houses("listing.pdf", "one\ftwo")
    assert [h.filename for h in houses] == ["page_1_listing.pdf", "page_2_listing.pdf"]
    assert [h.content for h in houses] == ["one", "two"]


def test_page_ids_used_positionally():
    houses = build_document_houses("l.pdf", "one\ftwo\fthree", ["p-1", "p-2"])
    assert houses[0].id == "p-1"
    assert houses[1].id == "p-2"
    assert houses[2].id not in ("p-1", "p-2")


def test_generated_ids_unique():
    houses = build_document_houses("l.pdf", "a\fb\fc")
    assert len({h.id for h in houses}) == 3


def test_blank_page_gets_failure_sentinel():
    houses = build_document_houses("scan.pdf", "   \ftext")
    assert houses[0].content == EXTRACTION_FAILED_CONTENT
    assert houses[1].content == "text"


def test_extracted_pages_keep_trailing_blank_page():
    houses = build_page_houses("search.pdf", ["一件目", ""], ["s-1", "s-2"])
    assert [h.id for h in houses] == ["s-1", "s-2"]
    assert houses[1].filename == "page_2_search.pdf"
    assert houses[1].content == EXTRACTION_FAILED_CONTENT


def test_append_requirements_to_empty():
    assert append_requirements(None, "a.txt", "駅近") == "【a.txt】\n駅近"


def test_append_requirements_to_existing():
    result = append_requirements("既存", "b.txt", "ペット可")
    assert result == "既存\n\n【b.txt】\nペット可"


def test_customer_requirements_lines():
    text = build_customer_requirements({
        "name": "山田太郎",
        "phone": "090-0000-0000",
        "email": None,
        "property_name": "サンプルマンション",
    })
    assert text.splitlines() == [
        "【お客様名】山田太郎",
        "【電話番号】090-0000-0000",
        "【問合せ物件】サンプルマンション",
    ]


def test_customer_requirements_empty():
    assert build_customer_requirements({}) == ""
