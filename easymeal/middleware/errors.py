from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from ..llm.groq_client import LLMUnavailableError, RecipeGenerationError

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("easymeal.requests")

PRODUCTION_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn exceptions that escape the routes into ``{"error": ...}`` responses."""

    def __init__(self, app: ASGIApp, production: bool = False) -> None:
        super().__init__(app)
        self.production = production

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled exception on %s %s",
                request.method,
                request.url.path,
                exc_info=True,
            )
            if self.production:
                body = {"error": PRODUCTION_ERROR_MESSAGE}
            else:
                body = {"error": str(exc) or type(exc).__name__, "type": type(exc).__name__}
            return JSONResponse(body, status_code=500)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One JSON line per request: method, path, status and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        request_logger.info(
            json.dumps({
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration": duration_ms,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
        )
        return response


async def recipe_generation_error_handler(
    request: Request, exc: RecipeGenerationError
) -> JSONResponse:
    status_code = 503 if isinstance(exc, LLMUnavailableError) else 502
    return JSONResponse({"error": str(exc)}, status_code=status_code)
