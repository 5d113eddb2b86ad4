"""
Audit Log Router

Admin-only access to the per-day translation audit records.
"""

# Standard library
import logging
from typing import Optional

# Third-party
from fastapi import APIRouter, Depends, Query

# Local application
from audit.schemas import AuditLogResponse
from audit.service import get_audit_logs
from core.auth import require_admin

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/logs", response_model=AuditLogResponse, response_model_exclude_none=True)
async def list_logs(
    date: Optional[str] = Query(default=None, description="Day as YYYY-MM-DD"),
    _: None = Depends(require_admin),
) -> AuditLogResponse:
    """
    Returns translation audit records.

    Args:
        date: Restrict to one day; all days when omitted.

    Returns:
        AuditLogResponse with the matching records.
    """
    logger.info("Audit log request (date=%s)", date or "all")
    return await get_audit_logs(day=date)
