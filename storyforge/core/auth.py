"""
API key authentication helpers.

When ``API_KEY`` is set every non-public request must carry it in the
``X-API-Key`` header. Without it the API is open.
"""

from __future__ import annotations

import hmac
import os

from fastapi import Request

API_KEY_HEADER = "X-API-Key"

PUBLIC_PATHS_EXACT = {
    "/",
    "/health",
    "/openapi.json",
    "/docs",
    "/redoc",
}

PUBLIC_PATH_PREFIXES = (
    "/docs/",
    "/redoc/",
)


def _configured_key() -> str:
    return os.getenv("API_KEY", "").strip()


def is_auth_enabled() -> bool:
    return bool(_configured_key())


def is_public_path(path: str) -> bool:
    if path in PUBLIC_PATHS_EXACT:
        return True
    return any(path.startswith(prefix) for prefix in PUBLIC_PATH_PREFIXES)


def is_request_authenticated(request: Request) -> bool:
    expected = _configured_key()
    if not expected:
        return True
    provided = request.headers.get(API_KEY_HEADER, "")
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
