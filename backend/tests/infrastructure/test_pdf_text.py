"""PDF Text — one text entry per page; unreadable bytes rejected."""

import pytest

from fango.core.errors import ExternalSearchError
from fango.infrastructure.pdf_text import extract_pdf_pages

from tests.services.fake_oracles import blank_pdf


def test_one_entry_per_page():
    texts = extract_pdf_pages(blank_pdf(3))
    assert len(texts) == 3
    assert all(t.strip() == "" for t in texts)


def test_garbage_bytes_rejected():
    with pytest.raises(ExternalSearchError) as exc_info:
        extract_pdf_pages(b"not a pdf at all")
    assert exc_info.value.reason == "malformed_pdf"


def test_empty_bytes_rejected():
    with pytest.raises(ExternalSearchError):
        extract_pdf_pages(b"")
