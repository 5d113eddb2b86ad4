"""
Document Translation Data Model

Value objects passed between the extractor, the chunking translator,
the reflow engine and the PDF renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class PageGeometry:
    """Physical size of one page in PDF points."""

    width: float
    height: float


@dataclass(frozen=True)
class SourceDocument:
    """Uploaded PDF bytes plus the geometry of each original page, in order."""

    data: bytes
    pages: tuple[PageGeometry, ...]

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass(frozen=True)
class ExtractedText:
    """Plain text pulled out of a document."""

    text: str
    page_count: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def character_count(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class TranslationChunk:
    """Positional slice of the source text; `index` is the reassembly key."""

    index: int
    text: str


@dataclass(frozen=True)
class TranslationResult:
    """Translated text and the source language reported for the whole job."""

    translated_text: str
    detected_source_language: Optional[str] = None


@dataclass
class RenderCursor:
    """Where the next line goes. Lives for a single reflow call only."""

    page_index: int
    y: float


@dataclass(frozen=True)
class TextLine:
    """One line of text placed with its baseline at (x, y), bottom-left origin."""

    text: str
    x: float
    y: float


@dataclass(frozen=True)
class PageLayout:
    """
    Description of one output page.

    Every page is painted with an opaque background before its lines are drawn.
    `source_index` points at the original page being replaced, or is None for
    pages appended to hold overflow.
    """

    geometry: PageGeometry
    source_index: Optional[int]
    lines: tuple[TextLine, ...] = ()

    @property
    def is_appended(self) -> bool:
        return self.source_index is None


@dataclass(frozen=True)
class RenderedDocument:
    """Ordered page descriptions produced by the reflow engine."""

    pages: tuple[PageLayout, ...]
    original_page_count: int

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def appended_page_count(self) -> int:
        return sum(1 for page in self.pages if page.is_appended)

    @property
    def line_count(self) -> int:
        return sum(len(page.lines) for page in self.pages)
