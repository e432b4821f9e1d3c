from __future__ import annotations

import re
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from ..preferences.models import RecipePreferences

SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}

MAX_STRING_LENGTH = 10_000

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_ANGLE_BRACKETS_RE = re.compile(r"[<>]")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length is over ``max_bytes``."""

    def __init__(
        self,
        app: ASGIApp,
        max_bytes: int,
        path_prefix: str = "/api/",
    ) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes
        self.path_prefix = path_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(self.path_prefix):
            content_length = request.headers.get("content-length")
            if content_length and content_length.isdigit():
                if int(content_length) > self.max_bytes:
                    return JSONResponse({"error": "Request too large"}, status_code=413)
        return await call_next(request)


# ── Input sanitisation ───────────────────────────────────────────────────


def sanitize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return _ANGLE_BRACKETS_RE.sub("", value.strip())[:MAX_STRING_LENGTH]


def is_valid_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


def sanitize_preferences(prefs: RecipePreferences) -> RecipePreferences:
    """Copy of ``prefs`` with free-form text cleaned and blank list items dropped."""
    updates: dict[str, Any] = {}
    for field in ("protein", "cuisine", "cooking_method", "additional_notes"):
        value = getattr(prefs, field)
        if value is not None:
            updates[field] = sanitize_string(value) or None
    for field in ("vegetables", "fruits"):
        cleaned = [sanitize_string(v) for v in getattr(prefs, field)]
        updates[field] = [v for v in cleaned if v]
    return prefs.model_copy(update=updates)
