"""
Document Reflow Engine

Lays translated text out over the geometry of the original pages.

The engine is pure: it measures text through a font object and returns page
descriptions (RenderedDocument). Drawing them into a PDF is the job of
pdfservice.pdf_renderer.

Coordinates use a bottom-left origin, so the cursor starts at
`height - margin` and moves down by decreasing y.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from pdfservice.models import (
    PageGeometry,
    PageLayout,
    RenderCursor,
    RenderedDocument,
    TextLine,
)

logger = logging.getLogger(__name__)

BLANK_LINE_ADVANCE = 0.5
PARAGRAPH_SPACING = 0.3


class FontMetrics(Protocol):
    """Anything that can measure a string, e.g. fitz.Font."""

    def text_length(self, text: str, fontsize: float = 11) -> float:
        ...


@dataclass(frozen=True)
class ReflowSettings:
    """Fixed typographic parameters for the reflowed document."""

    font_size: float = 11.0
    line_height_factor: float = 1.6
    margin: float = 50.0

    @property
    def line_height(self) -> float:
        return self.font_size * self.line_height_factor


class _PageBuilder:
    """Mutable state for one reflow call: the pages emitted so far and the cursor."""

    def __init__(self, original_pages: Sequence[PageGeometry], settings: ReflowSettings) -> None:
        self._original_pages = original_pages
        self._settings = settings
        self._pages: List[tuple[PageGeometry, Optional[int], List[TextLine]]] = []
        self.cursor = RenderCursor(page_index=-1, y=0.0)

    def prepare_page(self) -> PageGeometry:
        """Start the next page and move the cursor to its top margin."""
        next_index = len(self._pages)
        if next_index < len(self._original_pages):
            geometry = self._original_pages[next_index]
            source_index: Optional[int] = next_index
        else:
            geometry = self._original_pages[0]
            source_index = None

        self._pages.append((geometry, source_index, []))
        self.cursor = RenderCursor(
            page_index=next_index,
            y=geometry.height - self._settings.margin,
        )
        return geometry

    def draw_line(self, text: str) -> None:
        """Place a line at the cursor, breaking to a new page first if it would not fit."""
        settings = self._settings
        if self.cursor.y < settings.margin + settings.line_height:
            self.prepare_page()

        _, _, lines = self._pages[self.cursor.page_index]
        lines.append(TextLine(text=text, x=settings.margin, y=self.cursor.y))
        self.cursor.y -= settings.line_height

    def advance(self, distance: float) -> None:
        self.cursor.y -= distance

    def build(self) -> RenderedDocument:
        # Original pages the text never reached are still blanked.
        while len(self._pages) < len(self._original_pages):
            index = len(self._pages)
            self._pages.append((self._original_pages[index], index, []))

        return RenderedDocument(
            pages=tuple(
                PageLayout(geometry=geometry, source_index=source_index, lines=tuple(lines))
                for geometry, source_index, lines in self._pages
            ),
            original_page_count=len(self._original_pages),
        )


def wrap_paragraph(
    paragraph: str,
    font: FontMetrics,
    font_size: float,
    max_width: float,
) -> List[str]:
    """
    Greedily wraps one paragraph into lines narrower than `max_width`.

    Words are separated by whitespace and rejoined with single spaces. A word
    wider than `max_width` ends up alone on its own line without being split.

    Args:
        paragraph: Paragraph text without newlines.
        font: Font used for measurement.
        font_size: Font size in points.
        max_width: Available line width in points.

    Returns:
        Lines in reading order; empty for a blank paragraph.
    """
    lines: List[str] = []
    current = ""
    for word in paragraph.split():
        candidate = f"{current} {word}" if current else word
        if font.text_length(candidate, fontsize=font_size) < max_width:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def reflow(
    original_pages: Sequence[PageGeometry],
    translated_text: str,
    font: FontMetrics,
    settings: Optional[ReflowSettings] = None,
) -> RenderedDocument:
    """
    Lays translated text out into pages.

    Paragraphs come from splitting on newlines and keep their order. Blank
    paragraphs move the cursor down half a line without checking for overflow.
    Before each line is drawn, a new page is started if the cursor is below
    `margin + line_height`. Pages past the original count clone the first
    original page's geometry.

    Args:
        original_pages: Geometry of the source pages, in order.
        translated_text: Full translated text.
        font: Font used to measure line widths.
        settings: Typographic parameters; defaults to ReflowSettings().

    Returns:
        RenderedDocument with at least as many pages as the original.

    Raises:
        ValueError: If original_pages is empty.
    """
    if not original_pages:
        raise ValueError("Cannot reflow onto a document with no pages")

    settings = settings or ReflowSettings()
    builder = _PageBuilder(original_pages, settings)

    first = builder.prepare_page()
    max_width = first.width - settings.margin * 2

    paragraphs = translated_text.split("\n")
    logger.debug("Reflowing %d paragraphs", len(paragraphs))

    for paragraph in paragraphs:
        if not paragraph.strip():
            builder.advance(settings.line_height * BLANK_LINE_ADVANCE)
            continue

        for line in wrap_paragraph(paragraph, font, settings.font_size, max_width):
            builder.draw_line(line)
        builder.advance(settings.line_height * PARAGRAPH_SPACING)

    document = builder.build()
    logger.info(
        "Reflow complete: %d pages (original: %d, appended: %d)",
        document.page_count,
        document.original_page_count,
        document.appended_page_count,
    )
    return document
