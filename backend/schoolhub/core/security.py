"""
Admin access guard.

Admin endpoints require the shared ``X-Admin-Token`` header. Issuing and
rotating the token is handled outside this service.
"""

import secrets

from fastapi import Header, HTTPException, status

from schoolhub.core.config import get_settings
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)


async def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if not x_admin_token or not secrets.compare_digest(x_admin_token, settings.ADMIN_TOKEN):
        logger.warning("admin_auth_failed", token_present=bool(x_admin_token))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized as an admin",
        )
