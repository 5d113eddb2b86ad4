"""Service layer for the document translation pipeline."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from core.errors import AppError, ErrorCode
from core.providers import (
    TranslationClient,
    TranslationServiceError,
    TranslationTimeoutError,
)
from pdfservice.font_provisioner import (
    FontProvisioner,
    FontUnavailableError,
    get_font_provisioner,
)
from pdfservice.models import ExtractedText, SourceDocument, TranslationResult
from pdfservice.pdf_renderer import RenderingError, load_font, render_pdf
from pdfservice.reflow_engine import ReflowSettings, reflow
from pdfservice.text_extractor import DocumentReadError, extract_text, has_extractable_text
from pdfservice.translation_chunker import translate_chunked

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("pdf", "json")

_NO_TEXT_MESSAGE = (
    "No text could be extracted from the PDF. It is probably an image-based "
    "(scanned) document. Please use a PDF with a text layer."
)


@dataclass
class PipelineOutput:
    """Everything the router needs to answer and audit one document job."""

    extracted: ExtractedText
    translation: TranslationResult
    source_language: str
    pdf_bytes: Optional[bytes] = None


def build_download_filename(original_filename: Optional[str]) -> str:
    """Derives the attachment filename for a translated PDF."""
    filename = os.path.basename(original_filename) if original_filename else ""
    return f"translated_{filename or 'document.pdf'}"


def resolve_source_language(
    translation: TranslationResult, declared: Optional[str]
) -> str:
    """Detected language wins, then the declared one, then 'auto'."""
    return translation.detected_source_language or declared or "auto"


async def _translate(
    text: str,
    target_lang: str,
    source_lang: Optional[str],
    client: Optional[TranslationClient],
) -> TranslationResult:
    """Runs the chunking translator and maps its failures to AppError."""
    try:
        return await translate_chunked(text, target_lang, source_lang, client=client)
    except TranslationTimeoutError as exc:
        logger.error("Translation timed out: %s", exc, exc_info=True)
        raise AppError(
            code=ErrorCode.TRANSLATION_TIMEOUT,
            message=str(exc),
        ) from exc
    except TranslationServiceError as exc:
        logger.error("Translation failed: %s", exc, exc_info=True)
        raise AppError(
            code=ErrorCode.TRANSLATION_FAILED,
            message=str(exc),
        ) from exc


async def _render_translated_pdf(
    source: SourceDocument,
    translated_text: str,
    font_provisioner: FontProvisioner,
    settings: ReflowSettings,
) -> bytes:
    """Reflows translated text over the source geometry and renders the PDF."""
    try:
        font_bytes = await font_provisioner.ensure_font()
        font = await run_in_threadpool(load_font, font_bytes)
        layout = await run_in_threadpool(
            reflow, source.pages, translated_text, font, settings
        )
        return await run_in_threadpool(
            render_pdf, source.data, layout, font_bytes, settings
        )
    except (FontUnavailableError, RenderingError) as exc:
        logger.error("Translated PDF creation failed: %s", exc, exc_info=True)
        raise AppError(
            code=ErrorCode.RENDERING_ERROR,
            message=f"Failed to create translated PDF: {exc}",
        ) from exc


async def run_translation_pipeline(
    *,
    data: bytes,
    target_lang: str,
    source_lang: Optional[str] = None,
    output_format: str = "pdf",
    client: Optional[TranslationClient] = None,
    font_provisioner: Optional[FontProvisioner] = None,
    settings: Optional[ReflowSettings] = None,
) -> PipelineOutput:
    """
    Runs extract -> validate -> translate -> (reflow + render) for one PDF.

    The whole extracted text is translated in one job, not page by page.
    Any failure aborts the job; nothing partial is returned.

    Args:
        data: Uploaded PDF bytes.
        target_lang: Target language code.
        source_lang: Declared source language, or None to auto-detect.
        output_format: "pdf" renders a translated document, "json" skips rendering.
        client: Translation client override.
        font_provisioner: Font provisioner override.
        settings: Reflow settings override.

    Returns:
        PipelineOutput with pdf_bytes set in "pdf" mode.

    Raises:
        AppError: For every user-facing failure.
    """
    if output_format not in OUTPUT_FORMATS:
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message=f"Unsupported output format: {output_format}",
        )
    if not target_lang:
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="Target language is required",
        )

    start_time = time.perf_counter()

    try:
        extracted, source = await run_in_threadpool(extract_text, data)
    except DocumentReadError as exc:
        logger.error("PDF parsing error: %s", exc, exc_info=True)
        raise AppError(
            code=ErrorCode.DOCUMENT_READ_ERROR,
            message=f"Failed to read PDF: {exc}",
        ) from exc
    t1 = time.perf_counter()
    logger.info("Extraction completed in %.2fs", t1 - start_time)

    if not has_extractable_text(extracted):
        logger.error("Empty text extracted from PDF")
        raise AppError(
            code=ErrorCode.NO_EXTRACTABLE_TEXT,
            message=_NO_TEXT_MESSAGE,
        )

    translation = await _translate(extracted.text, target_lang, source_lang, client)
    t2 = time.perf_counter()
    logger.info(
        "Translation completed in %.2fs. Translated text length: %d",
        t2 - t1,
        len(translation.translated_text),
    )

    output = PipelineOutput(
        extracted=extracted,
        translation=translation,
        source_language=resolve_source_language(translation, source_lang),
    )
    if output_format == "json":
        return output

    output.pdf_bytes = await _render_translated_pdf(
        source,
        translation.translated_text,
        font_provisioner or get_font_provisioner(),
        settings or ReflowSettings(),
    )
    logger.info("PDF generated in %.2fs", time.perf_counter() - t2)
    return output


async def translate_plain_text(
    *,
    text: str,
    target_lang: str,
    source_lang: Optional[str] = None,
    client: Optional[TranslationClient] = None,
) -> TranslationResult:
    """Translates free text through the same chunking translator."""
    if not text or not text.strip():
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="No text provided",
        )
    if not target_lang:
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="Target language is required",
        )
    return await _translate(text, target_lang, source_lang, client)
