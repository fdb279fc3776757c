"""Middleware: optional Bearer API key check."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def _key_matches(presented: str, expected: str) -> bool:
    return secrets.compare_digest(presented.encode(), expected.encode())


async def verify_api_key(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> None:
    """Reject the request unless it carries the configured key.

    With FACEGRID_API_KEY unset every request passes; otherwise the request
    needs 'Authorization: Bearer <key>'.
    """
    expected = request.app.state.settings.api_key
    if expected is None:
        return

    if credentials is not None and _key_matches(credentials.credentials, expected):
        return

    logger.info("Rejected %s %s: invalid or missing API key", request.method, request.url.path)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
        headers={"WWW-Authenticate": "Bearer"},
    )
