"""CORS plus the per-request access log."""

import logging
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from tms_backend.core.config import settings

logger = logging.getLogger("tms")

REQUEST_ID_HEADER = "X-Request-Id"
ANONYMOUS = "-"


def caller_of(request: Request) -> tuple[str, str]:
    """``(user id, role name)`` the access gate admitted, or anonymous markers."""
    user = getattr(request.state, "user", None)
    if user is None:
        return ANONYMOUS, ANONYMOUS
    return user.userId, user.roleName


def route_template(request: Request) -> str:
    route: Optional[object] = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request: id, route template, status, time and caller.

    The route template and caller are read after the handler ran, because
    routing and the access gate fill them in on the shared request scope.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        user_id, role_name = caller_of(request)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s %s -> %d in %.1fms user=%s role=%s",
            request_id,
            request.method,
            route_template(request),
            response.status_code,
            elapsed_ms,
            user_id,
            role_name,
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(AccessLogMiddleware)
