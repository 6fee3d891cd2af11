"""PDF Text — per-page text extraction for PDFs fetched by the service itself.

Invariants:
    - Output has exactly one entry per PDF page, in page order
    - A page whose text cannot be extracted yields "" (stored as the failure sentinel)
    - Unreadable documents raise ExternalSearchError("malformed_pdf")
"""

import logging
from io import BytesIO

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from fango.core.errors import ExternalSearchError

logger = logging.getLogger(__name__)


def extract_pdf_pages(data: bytes) -> list[str]:
    try:
        reader = PdfReader(BytesIO(data))
        pages = list(reader.pages)
    except (PdfReadError, ValueError) as e:
        raise ExternalSearchError("malformed_pdf", str(e))

    texts = []
    for i, page in enumerate(pages):
        try:
            texts.append(page.extract_text() or "")
        except (PdfReadError, ValueError, KeyError) as e:
            logger.warning(f"Text extraction failed on page {i + 1}: {e!r}")
            texts.append("")
    return texts
