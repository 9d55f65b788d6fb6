import logging
import secrets

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import config

logger = logging.getLogger(__name__)

security = HTTPBearer()


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    if not a or not b:
        return False
    return secrets.compare_digest(a.encode(), b.encode())


async def require_admin(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Back-office access: the bearer token must match ADMIN_API_TOKEN"""
    if not config.ADMIN_API_TOKEN:
        logger.error("❌ ADMIN_API_TOKEN not configured")
        raise HTTPException(status_code=500, detail="Admin access not configured")

    if not constant_time_compare(credentials.credentials, config.ADMIN_API_TOKEN):
        logger.warning("🚫 Rejected admin request with invalid token")
        raise HTTPException(status_code=401, detail="Invalid admin token")

    return "admin"
