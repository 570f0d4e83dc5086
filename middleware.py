"""
HTTP middleware: the /api/bo path alias and request logging.
"""

import time
from typing import Callable, Set

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from logging_config import generate_request_id, get_logger, set_request_id

logger = get_logger("http")

API_PREFIX = "/api"
ALIAS_PREFIX = "/api/bo"

SKIP_LOGGING_PATHS: Set[str] = {"/favicon.ico", "/docs", "/redoc", "/openapi.json"}


def alias_path(path: str) -> str:
    """``/api/bo/x`` -> ``/api/x``; anything else unchanged."""
    if path == ALIAS_PREFIX or path.startswith(ALIAS_PREFIX + "/"):
        return API_PREFIX + path[len(ALIAS_PREFIX):]
    return path


class ApiAliasMiddleware:
    """Serves every ``/api/...`` route under ``/api/bo/...`` as well.

    The hosting rewrite forwards the back office under /api/bo; rewriting the
    path here keeps a single route table.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket"):
            path = scope.get("path", "")
            rewritten = alias_path(path)
            if rewritten != path:
                scope = dict(scope)
                scope["path"] = rewritten
                scope["raw_path"] = rewritten.encode("utf-8")
        await self.app(scope, receive, send)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request id correlation plus one log line per request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id
            if path not in SKIP_LOGGING_PATHS:
                status_code = response.status_code
                if status_code >= 500:
                    log = logger.error
                elif status_code >= 400:
                    log = logger.warning
                else:
                    log = logger.info
                log("%s %s - %d (%.2fms)", request.method, path, status_code, duration_ms)
            return response
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error("%s %s - exception (%.2fms)", request.method, path, duration_ms, exc_info=True)
            raise
        finally:
            set_request_id("")
