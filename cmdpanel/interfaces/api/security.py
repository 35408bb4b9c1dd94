# cmdpanel/interfaces/api/security.py
"""API security: authentication and rate limiting.

The key may be sent in the X-API-Key header or, for browser EventSource
clients that cannot set headers, in the ``key`` query parameter.
"""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, APIKeyQuery
from slowapi import Limiter
from slowapi.util import get_remote_address

from cmdpanel.config import settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_query = APIKeyQuery(name="key", auto_error=False)

limiter = Limiter(key_func=get_remote_address)


def verify_api_key(
    header_key: Annotated[str | None, Depends(api_key_header)],
    query_key: Annotated[str | None, Depends(api_key_query)],
) -> str:
    """Verify the panel API key.

    Args:
        header_key: Key from the X-API-Key header.
        query_key: Key from the ``key`` query parameter.

    Returns:
        Validated API key.

    Raises:
        HTTPException: 401 if key missing, 403 if key invalid.
    """
    if not settings.api_auth_key:
        # Auth disabled if no key configured
        return "auth_disabled"

    api_key = header_key or query_key
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Include X-API-Key header or key parameter.",
        )

    if not secrets.compare_digest(api_key, settings.api_auth_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key.",
        )

    return api_key


def get_rate_limit_string() -> str:
    """Rate limit for panel endpoints in slowapi's "N/minute" format."""
    return f"{settings.api_rate_limit}/minute"
