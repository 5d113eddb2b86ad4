"""
Translation Chunker Module

Splits long text into positional chunks below the translation service's
per-request character ceiling, translates them one at a time in index order,
and joins the results back together.
"""

# Standard library
import logging
from typing import Iterable, List, Optional

# Local application
from core import config
from core.providers import TranslationClient, get_translation_client
from pdfservice.models import TranslationChunk, TranslationResult

# Configure logging
logger = logging.getLogger(__name__)


def split_into_chunks(text: str, limit: int) -> List[TranslationChunk]:
    """
    Splits text into consecutive slices of at most `limit` characters.

    Splitting is purely positional; sentence and paragraph boundaries are
    ignored so that concatenating the chunks in index order gives back the
    exact input.

    Args:
        text: Text to split.
        limit: Maximum characters per chunk.

    Returns:
        Chunks indexed from zero in source order. Text no longer than
        `limit` yields exactly one chunk.

    Raises:
        ValueError: If limit is not positive.
    """
    if limit <= 0:
        raise ValueError(f"Chunk limit must be positive, got {limit}")

    if len(text) <= limit:
        return [TranslationChunk(index=0, text=text)]

    return [
        TranslationChunk(index=index, text=text[start:start + limit])
        for index, start in enumerate(range(0, len(text), limit))
    ]


def reassemble(results: Iterable[tuple[int, str]]) -> str:
    """
    Joins translated chunk texts in index order with no separator.

    Args:
        results: (index, translated_text) pairs in any order.

    Returns:
        The concatenated translation.
    """
    return "".join(text for _, text in sorted(results, key=lambda item: item[0]))


async def translate_chunked(
    text: str,
    target_lang: str,
    source_lang: Optional[str] = None,
    *,
    client: Optional[TranslationClient] = None,
    limit: Optional[int] = None,
    pin_source_language: Optional[bool] = None,
) -> TranslationResult:
    """
    Translates text of any length through a size-limited translation client.

    Chunks are sent strictly one after another in index order; the next
    request is not issued until the previous one has returned. The first
    failure aborts the job and its exception propagates unchanged, so
    already-translated chunks are discarded.

    The detected source language is taken from the first chunk only. When no
    source language was declared and pinning is enabled, the first chunk's
    detected language is sent as the source language of every later chunk.

    Args:
        text: Text to translate. Must not be empty.
        target_lang: Target language code (e.g. "JA", "EN-US").
        source_lang: Declared source language, or None to auto-detect.
        client: Translation client; defaults to the registry's client.
        limit: Per-request character ceiling; defaults to MAX_CHUNK_CHARS.
        pin_source_language: Overrides CHUNK_PIN_SOURCE_LANG.

    Returns:
        TranslationResult for the whole text.

    Raises:
        ValueError: If text or target_lang is empty.
        TranslationError: If any chunk fails.
    """
    if not text:
        raise ValueError("Text to translate must not be empty")
    if not target_lang:
        raise ValueError("Target language must not be empty")

    client = client or get_translation_client()
    if limit is None:
        limit = config.MAX_CHUNK_CHARS
    if limit <= 0:
        raise ValueError(f"Chunk limit must be positive, got {limit}")
    if pin_source_language is None:
        pin_source_language = config.CHUNK_PIN_SOURCE_LANG

    logger.info(
        "Starting translation. Text length: %d, Target: %s", len(text), target_lang
    )

    if len(text) <= limit:
        return await client.translate(text, target_lang, source_lang)

    chunks = split_into_chunks(text, limit)
    logger.info("Text too long, split into %d chunks of <= %d chars", len(chunks), limit)

    translated: List[tuple[int, str]] = []
    detected_language: Optional[str] = None
    chunk_source_lang = source_lang

    for chunk in chunks:
        logger.info("Translating chunk %d/%d", chunk.index + 1, len(chunks))
        result = await client.translate(chunk.text, target_lang, chunk_source_lang)
        translated.append((chunk.index, result.translated_text))

        if chunk.index == 0:
            detected_language = result.detected_source_language
            if not source_lang and pin_source_language and detected_language:
                chunk_source_lang = detected_language

    return TranslationResult(
        translated_text=reassemble(translated),
        detected_source_language=detected_language,
    )
