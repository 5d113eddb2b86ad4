"""
PDF Translation Router

Provides API endpoints for document translation, plain text translation
and the supported language list.
"""

# Standard library
import logging
import os
import time
from typing import Optional, Union
from urllib.parse import quote

# Third-party
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import Response

# Local application
from audit.service import record_translation
from core import config
from core.errors import AppError, ErrorCode
from core.providers import TranslationError, get_translation_client
from pdfservice.schemas import (
    DocumentTranslationResponse,
    TextTranslationRequest,
    TextTranslationResponse,
)
from pdfservice.service import (
    build_download_filename,
    run_translation_pipeline,
    translate_plain_text,
)

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


def get_client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For entry, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def _content_disposition(filename: str) -> str:
    """Attachment header that survives non-ASCII file names."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "translated.pdf"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def _payload_too_large() -> AppError:
    return AppError(
        code=ErrorCode.PAYLOAD_TOO_LARGE,
        message=f"File exceeds the {config.MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit",
    )


def _validate_pdf_upload(file: Optional[UploadFile]) -> UploadFile:
    """
    Validates that a PDF file was uploaded.

    Args:
        file: The uploaded file object, if any.

    Returns:
        The same file.

    Raises:
        AppError: 400 if no file was sent or it is not a PDF.
    """
    if file is None or not file.filename:
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="No file uploaded",
        )

    _, ext = os.path.splitext(file.filename)
    if file.content_type != "application/pdf" and ext.lower() != ".pdf":
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="Only PDF files can be uploaded",
        )
    return file


@router.post(
    "/translate",
    response_model=None,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def translate_document(
    request: Request,
    file: Optional[UploadFile] = File(default=None),
    target_lang: Optional[str] = Form(default=None, alias="targetLang"),
    source_lang: Optional[str] = Form(default=None, alias="sourceLang"),
    output_format: str = Form(default="pdf", alias="format"),
) -> Union[Response, DocumentTranslationResponse]:
    """
    Translates an uploaded PDF.

    Pipeline:
    1. Validate upload and parameters
    2. Extract text (PyMuPDF, threadpool)
    3. Translate the full text through the chunking translator (DeepL)
    4. Reflow the translation over the original page geometry and render
    5. Record the job in the audit log

    Args:
        request: Incoming request (client address).
        file: The uploaded PDF.
        target_lang: Target language code.
        source_lang: Source language code, auto-detected when omitted.
        output_format: "pdf" for a translated document, "json" for text only.

    Returns:
        The translated PDF as an attachment, or a DocumentTranslationResponse.

    Raises:
        AppError: For invalid input and any pipeline failure.
    """
    start_time = time.perf_counter()
    logger.info("New translation request received")

    upload = _validate_pdf_upload(file)
    try:
        # Reject by declared size before buffering the body
        if upload.size is not None and upload.size > config.MAX_UPLOAD_BYTES:
            raise _payload_too_large()
        data = await upload.read()
    finally:
        await upload.close()

    logger.info("File: %s - Size: %.2f KB", upload.filename, len(data) / 1024)

    if len(data) > config.MAX_UPLOAD_BYTES:
        raise _payload_too_large()
    if not target_lang:
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="Target language is required",
        )

    client_ip = get_client_ip(request)
    logger.info("Translation: %s -> %s (client %s)", source_lang or "auto", target_lang, client_ip)

    output = await run_translation_pipeline(
        data=data,
        target_lang=target_lang,
        source_lang=source_lang or None,
        output_format=output_format,
    )

    await record_translation(
        ip=client_ip,
        source_language=output.source_language,
        target_language=target_lang,
        page_count=output.extracted.page_count,
        character_count=output.extracted.character_count,
        file_name=upload.filename,
    )

    elapsed = time.perf_counter() - start_time
    logger.info("Translation completed in %.2fs (%s format)", elapsed, output_format)

    if output.pdf_bytes is None:
        return DocumentTranslationResponse(
            original_text=output.extracted.text,
            translated_text=output.translation.translated_text,
            source_language=output.source_language,
            target_language=target_lang,
            page_count=output.extracted.page_count,
            character_count=output.extracted.character_count,
        )

    return Response(
        content=output.pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": _content_disposition(
                build_download_filename(upload.filename)
            ),
            "Content-Length": str(len(output.pdf_bytes)),
        },
    )


@router.post("/translate-text", response_model=TextTranslationResponse)
async def translate_text_endpoint(
    body: TextTranslationRequest,
) -> TextTranslationResponse:
    """
    Translates a short piece of plain text.

    Args:
        body: Text, target language and optional source language.

    Returns:
        TextTranslationResponse with the translation.

    Raises:
        AppError: 400 for empty or oversized text, 502/504 for service failures.
    """
    if len(body.text) > config.MAX_TEXT_CHARS:
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message=f"Text is too long (maximum {config.MAX_TEXT_CHARS} characters)",
        )

    logger.info(
        "Text translation: %d chars, %s -> %s",
        len(body.text),
        body.source_lang or "auto",
        body.target_lang,
    )
    result = await translate_plain_text(
        text=body.text,
        target_lang=body.target_lang,
        source_lang=body.source_lang or None,
    )
    return TextTranslationResponse(
        translated_text=result.translated_text,
        detected_source_lang=result.detected_source_language,
        character_count=len(body.text),
    )


@router.get("/languages")
async def list_languages() -> list[dict]:
    """Returns the target languages supported by the translation service."""
    try:
        return await get_translation_client().list_languages("target")
    except TranslationError as exc:
        logger.error("Error fetching languages: %s", exc, exc_info=True)
        raise AppError(
            code=ErrorCode.TRANSLATION_FAILED,
            message="Failed to fetch the language list",
        ) from exc
