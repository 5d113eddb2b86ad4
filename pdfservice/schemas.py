"""Schemas for translation endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the web client uses."""

    model_config = ConfigDict(populate_by_name=True)


class DocumentTranslationResponse(_CamelModel):
    """Structured result of a document translation (format=json)."""

    success: bool = True
    original_text: str = Field(..., alias="originalText")
    translated_text: str = Field(..., alias="translatedText")
    source_language: str = Field(..., alias="sourceLanguage")
    target_language: str = Field(..., alias="targetLanguage")
    page_count: int = Field(..., alias="pageCount")
    character_count: int = Field(..., alias="characterCount")


class TextTranslationRequest(_CamelModel):
    """Request body for plain text translation."""

    text: str = Field(..., description="Text to translate")
    target_lang: str = Field(..., alias="targetLang", description="Target language code")
    source_lang: str | None = Field(
        default=None, alias="sourceLang", description="Source language code, auto-detect if omitted"
    )


class TextTranslationResponse(_CamelModel):
    """Response for plain text translation."""

    success: bool = True
    translated_text: str = Field(..., alias="translatedText")
    detected_source_lang: str | None = Field(default=None, alias="detectedSourceLang")
    character_count: int = Field(..., alias="characterCount")
