"""Optional API key guard for the kernel endpoints."""

import secrets

import structlog
from fastapi import Header, HTTPException

from habitkernel.config import settings

logger = structlog.get_logger()


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip()
    return None


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
) -> str:
    """Accept the key from X-API-Key, else from Authorization: Bearer.

    No KERNEL_API_KEY configured = open access. Otherwise a mismatch is a 401.
    """
    expected = settings.kernel_api_key
    if expected is None:
        return ""

    key = x_api_key if x_api_key is not None else _bearer_token(authorization)
    if key is None or not secrets.compare_digest(key, expected):
        logger.warning("api_key_rejected", has_key=key is not None)
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return key
