"""
Centralized Authentication Module

Provides the admin check used by operator-only routes.
"""

# Standard library
import logging
import secrets

# Third-party
from fastapi import HTTPException, Query

# Local application
from core import config

# Configure logging
logger = logging.getLogger(__name__)


async def require_admin(password: str = Query(default="")) -> None:
    """
    Validates the admin password passed as a query parameter.

    Access is always refused when ADMIN_PASSWORD is not configured.

    Args:
        password: Password from the `password` query parameter.

    Raises:
        HTTPException: 403 if the password is missing or wrong.
    """
    expected = config.ADMIN_PASSWORD
    if not expected:
        logger.warning("Admin route requested but ADMIN_PASSWORD is not set")
        raise HTTPException(status_code=403, detail="Authentication failed")

    if not password or not secrets.compare_digest(password, expected):
        raise HTTPException(status_code=403, detail="Authentication failed")
