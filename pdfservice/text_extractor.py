"""
Text Extractor

Pulls plain text, page count, metadata and page geometry out of a PDF
with PyMuPDF. No OCR: image-only documents come back with empty text.

This is a SYNCHRONOUS module designed to be called via run_in_threadpool.
"""

# Standard library
import logging
from typing import Tuple

# Third-party
import fitz  # PyMuPDF

# Local application
from pdfservice.models import ExtractedText, PageGeometry, SourceDocument

# Configure logging
logger = logging.getLogger(__name__)

_METADATA_KEYS = ("title", "author")


class DocumentReadError(RuntimeError):
    """Raised when the uploaded bytes are not a readable PDF."""


def extract_text(data: bytes) -> Tuple[ExtractedText, SourceDocument]:
    """
    Extracts text and page geometry from PDF bytes.

    Page texts are joined with a newline in page order.

    Args:
        data: PDF file content.

    Returns:
        (ExtractedText, SourceDocument) for the document.

    Raises:
        DocumentReadError: If the PDF cannot be opened or parsed.
    """
    if not data:
        raise DocumentReadError("Document is empty")

    logger.info("Starting PDF parsing, buffer size: %d", len(data))

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:  # noqa: BLE001
        raise DocumentReadError(f"Failed to read PDF: {exc}") from exc

    try:
        if doc.needs_pass:
            raise DocumentReadError("PDF is password protected")

        page_texts = []
        geometries = []
        for page in doc:
            page_texts.append(page.get_text("text"))
            geometries.append(PageGeometry(width=page.rect.width, height=page.rect.height))

        if not geometries:
            raise DocumentReadError("PDF has no pages")

        raw_metadata = doc.metadata or {}
        metadata = {
            key: raw_metadata[key] for key in _METADATA_KEYS if raw_metadata.get(key)
        }
    except DocumentReadError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise DocumentReadError(f"Failed to read PDF: {exc}") from exc
    finally:
        doc.close()

    text = "\n".join(page_texts)
    logger.info("PDF parsed. Pages: %d, Text length: %d", len(geometries), len(text))

    extracted = ExtractedText(text=text, page_count=len(geometries), metadata=metadata)
    source = SourceDocument(data=data, pages=tuple(geometries))
    return extracted, source


def has_extractable_text(extracted: ExtractedText) -> bool:
    """Whether the document yielded any non-whitespace text."""
    return bool(extracted.text and extracted.text.strip())
