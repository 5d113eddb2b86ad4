"""Service layer for translation audit logging."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from audit.repository import append_record, is_valid_day, list_records, log_dir_exists
from audit.schemas import AuditLogResponse, AuditRecord
from core.errors import AppError, ErrorCode

logger = logging.getLogger(__name__)


async def record_translation(
    *,
    ip: str | None,
    source_language: str,
    target_language: str,
    page_count: int,
    character_count: int,
    file_name: str | None,
) -> None:
    """Best-effort audit write. Failures are logged and never raised."""
    record = AuditRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        ip=ip,
        source_language=source_language,
        target_language=target_language,
        page_count=page_count,
        character_count=character_count,
        file_name=file_name,
    )
    try:
        await append_record(record.model_dump(by_alias=True))
    except (OSError, ValueError) as exc:
        logger.error("Error logging translation: %s", exc, exc_info=True)
        return

    logger.info(
        "Translation logged: %s (%d pages, %d chars) - IP: %s",
        file_name,
        page_count,
        character_count,
        ip,
    )


async def get_audit_logs(*, day: str | None = None) -> AuditLogResponse:
    """Returns audit records for one day or for all days."""
    if day is not None and not is_valid_day(day):
        raise AppError(
            code=ErrorCode.BAD_REQUEST,
            message="Date must use the YYYY-MM-DD format",
        )

    if not log_dir_exists():
        return AuditLogResponse(logs=[], message="No log files found")

    try:
        records = await list_records(day=day)
    except (OSError, ValueError) as exc:
        logger.error("Error reading logs: %s", exc, exc_info=True)
        raise AppError(
            code=ErrorCode.INTERNAL_ERROR,
            message="Failed to read logs",
        ) from exc

    if day is not None and not records:
        return AuditLogResponse(logs=[], message="No logs for the requested date")
    return AuditLogResponse(logs=records)
