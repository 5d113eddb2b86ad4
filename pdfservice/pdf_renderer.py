"""
PDF Renderer

Draws a RenderedDocument into a copy of the original PDF with PyMuPDF.

This is a SYNCHRONOUS module designed to be called via run_in_threadpool
in async contexts, as PDF generation is CPU-bound.
"""

# Standard library
import logging

# Third-party
import fitz  # PyMuPDF

# Local application
from pdfservice.models import RenderedDocument
from pdfservice.reflow_engine import ReflowSettings

# Configure logging
logger = logging.getLogger(__name__)

FONT_NAME = "F-translated"
BACKGROUND_COLOR = (1, 1, 1)
TEXT_COLOR = (0, 0, 0)


class RenderingError(RuntimeError):
    """Raised when the translated PDF cannot be produced."""


def load_font(font_bytes: bytes) -> fitz.Font:
    """
    Builds a PyMuPDF font object used to measure line widths.

    Raises:
        RenderingError: If the bytes are not a usable font.
    """
    try:
        return fitz.Font(fontbuffer=font_bytes)
    except Exception as exc:  # noqa: BLE001
        raise RenderingError(f"Failed to load font: {exc}") from exc


def _clear_original_content(page: fitz.Page) -> None:
    """Removes annotations, text, images and vector graphics from a reused page."""
    annot = page.first_annot
    while annot:
        annot = page.delete_annot(annot)

    page.add_redact_annot(page.rect, fill=BACKGROUND_COLOR)
    page.apply_redactions(
        images=fitz.PDF_REDACT_IMAGE_REMOVE,
        graphics=fitz.PDF_REDACT_LINE_ART_REMOVE_IF_TOUCHED,
    )


def render_pdf(
    source_bytes: bytes,
    layout: RenderedDocument,
    font_bytes: bytes,
    settings: ReflowSettings,
) -> bytes:
    """
    Applies page layouts to the source PDF and returns the new PDF bytes.

    Original pages named by `source_index` have their text, images and
    drawings redacted away and are then painted with an opaque background.
    Appended pages are created with the layout's geometry. The
    caller's bytes are never modified.

    Args:
        source_bytes: Original PDF.
        layout: Output of reflow_engine.reflow.
        font_bytes: TrueType font to embed.
        settings: Same settings the layout was computed with.

    Returns:
        The translated PDF.

    Raises:
        RenderingError: If any page cannot be written.
    """
    try:
        doc = fitz.open(stream=source_bytes, filetype="pdf")
    except Exception as exc:  # noqa: BLE001
        raise RenderingError(f"Failed to open source PDF: {exc}") from exc

    try:
        original_count = doc.page_count
        logger.info(
            "Rendering %d pages onto %d-page original", layout.page_count, original_count
        )

        for page_layout in layout.pages:
            if page_layout.source_index is not None:
                if page_layout.source_index >= original_count:
                    raise RenderingError(
                        f"Layout refers to page {page_layout.source_index} "
                        f"but the source has {original_count}"
                    )
                page = doc[page_layout.source_index]
                _clear_original_content(page)
            else:
                page = doc.new_page(
                    width=page_layout.geometry.width,
                    height=page_layout.geometry.height,
                )

            page.draw_rect(
                page.rect,
                color=None,
                fill=BACKGROUND_COLOR,
                fill_opacity=1.0,
                overlay=True,
            )

            if not page_layout.lines:
                continue

            page.insert_font(fontname=FONT_NAME, fontbuffer=font_bytes)
            height = page.rect.height
            for line in page_layout.lines:
                # Layout y is measured from the bottom edge
                page.insert_text(
                    fitz.Point(line.x, height - line.y),
                    line.text,
                    fontsize=settings.font_size,
                    fontname=FONT_NAME,
                    color=TEXT_COLOR,
                )

        pdf_bytes = doc.tobytes(garbage=3, deflate=True)
        logger.info("Translated PDF rendered: %d pages", doc.page_count)
        return pdf_bytes

    except RenderingError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.error("PDF rendering failed: %s", exc, exc_info=True)
        raise RenderingError(f"Failed to create translated PDF: {exc}") from exc
    finally:
        doc.close()
