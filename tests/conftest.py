"""
Pytest Configuration and Shared Fixtures

Provides fake providers, font metrics and sample PDFs for unit and API tests.
"""

# Standard library
import os
import sys
from typing import Callable, List, Optional, Sequence, Tuple

# Tests must never reach DeepL or the font CDN
os.environ.setdefault("TEST_MODE", "true")

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Third-party
import fitz  # PyMuPDF  # noqa: E402
import pytest  # noqa: E402

from core.providers import FakeTranslationClient  # noqa: E402
from pdfservice.models import PageGeometry  # noqa: E402

A4 = (595.0, 842.0)
LETTER = (612.0, 792.0)


# ============================================================================
# Fake Fixtures
# ============================================================================

class MonospaceFont:
    """Font metrics stub: every character is half the font size wide."""

    def __init__(self, char_width_factor: float = 0.5) -> None:
        self.char_width_factor = char_width_factor

    def text_length(self, text: str, fontsize: float = 11) -> float:
        return len(text) * fontsize * self.char_width_factor


@pytest.fixture
def monospace_font() -> MonospaceFont:
    """Deterministic font metrics for layout tests."""
    return MonospaceFont()


@pytest.fixture
def fake_translation_client() -> FakeTranslationClient:
    """Identity translator that records every call."""
    return FakeTranslationClient(detected_source_language="EN")


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    """A real TrueType font shipped with PyMuPDF (Droid Sans Fallback)."""
    return fitz.Font("cjk").buffer


@pytest.fixture
def a4_pages() -> Callable[[int], Tuple[PageGeometry, ...]]:
    """Builds n A4 page geometries."""

    def _build(count: int) -> Tuple[PageGeometry, ...]:
        return tuple(PageGeometry(width=A4[0], height=A4[1]) for _ in range(count))

    return _build


# ============================================================================
# Sample PDFs
# ============================================================================

def build_pdf(
    page_texts: Sequence[str],
    page_sizes: Optional[Sequence[Tuple[float, float]]] = None,
    title: Optional[str] = None,
) -> bytes:
    """Creates a PDF with one page per entry, each carrying its text (or nothing)."""
    doc = fitz.open()
    try:
        for index, text in enumerate(page_texts):
            width, height = page_sizes[index] if page_sizes else A4
            page = doc.new_page(width=width, height=height)
            if text:
                page.insert_text(fitz.Point(72, 72), text, fontsize=11)
        if title:
            doc.set_metadata({"title": title})
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory fixture around build_pdf."""
    return build_pdf


@pytest.fixture
def sample_pdf() -> bytes:
    """Two-page text PDF."""
    return build_pdf(["Hello world", "Second page"])


@pytest.fixture
def scanned_pdf() -> bytes:
    """A PDF without a text layer."""
    return build_pdf(["", ""])


def page_texts(pdf_bytes: bytes) -> List[str]:
    """Text of each page of a PDF."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [page.get_text("text") for page in doc]
    finally:
        doc.close()
