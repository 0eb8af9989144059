from __future__ import annotations

import hmac
import logging

from fastapi import Request, status
from fastapi.responses import ORJSONResponse

from kraftokase_mcp.errors import error_envelope

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/products", "/collections", "/sync")


def extract_api_key(*, x_api_key: str | None, authorization: str | None) -> str | None:
    if x_api_key:
        return x_api_key
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):] or None
    return None


def api_key_matches(supplied: str | None, expected: str | None) -> bool:
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def is_protected_path(path: str) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES)


async def enforce_api_key(request: Request, call_next):
    """HTTP middleware gating the protected prefixes.

    Runs before routing, so an unauthenticated caller gets the same 401 no
    matter the method, the route or the body.
    """
    if not is_protected_path(request.url.path):
        return await call_next(request)

    supplied = extract_api_key(
        x_api_key=request.headers.get("X-API-Key"),
        authorization=request.headers.get("Authorization"),
    )
    if api_key_matches(supplied, request.app.state.settings.MCP_API_KEY):
        return await call_next(request)

    logger.warning(
        "Unauthorized access attempt ip=%s user_agent=%s path=%s",
        request.client.host if request.client else None,
        request.headers.get("user-agent"),
        request.url.path,
    )
    return ORJSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_envelope(error="Unauthorized", message="Invalid or missing API key"),
    )
