"""Schemas for translation audit records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuditRecord(BaseModel):
    """One completed document translation."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    ip: str | None = None
    source_language: str = Field(..., alias="sourceLanguage")
    target_language: str = Field(..., alias="targetLanguage")
    page_count: int = Field(..., alias="pageCount")
    character_count: int = Field(..., alias="characterCount")
    file_name: str | None = Field(default=None, alias="fileName")


class AuditLogResponse(BaseModel):
    """Response model for the admin log listing."""

    logs: list[dict] = Field(default_factory=list)
    message: str | None = None
