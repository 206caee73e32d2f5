"""
Student Portal - HTTP Middleware

Each ``/api`` request gets a correlation id and one completion log line that
names the student behind the session cookie, and the admin when the session
is impersonated.
"""

import time
from typing import Any, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portal.core.logging_config import (
    logger,
    bind_request_context,
    reset_request_context,
    generate_request_id,
)
from portal.modules.auth.session import read_session
from portal.schemas.session import Session

LOGGED_PATH_PREFIX = "/api"


def identity_extra(session: Optional[Session]) -> Dict[str, Any]:
    """Log fields describing who made the request"""
    if session is None:
        return {"student_id": None}
    extra: Dict[str, Any] = {"student_id": session.student_id}
    if session.is_impersonating and session.original_admin is not None:
        extra["impersonated_by"] = session.original_admin.student_id
    return extra


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds the request id and session student to the logging context, times
    the request, and echoes ``X-Request-ID``/``X-Response-Time`` back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        session = read_session(request)
        tokens = bind_request_context(request_id, session.student_id if session else "")

        path = request.url.path
        logged = path.startswith(LOGGED_PATH_PREFIX)
        extra = {"http_method": request.method, "http_path": path, **identity_extra(session)}
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {path} raised {type(exc).__name__}",
                extra={"event_type": "http_request_error", "error_type": type(exc).__name__, **extra},
            )
            raise
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            if logged:
                status_code = response.status_code
                level = "error" if status_code >= 500 else "warning" if status_code >= 400 else "info"
                getattr(logger, level)(
                    f"{request.method} {path} {status_code} ({duration_ms:.2f}ms)",
                    extra={
                        "event_type": "http_request_complete",
                        "http_status": status_code,
                        "duration_ms": duration_ms,
                        **extra,
                    },
                )
                logger.log_performance(f"{request.method} {path}", duration_ms)
            return response
        finally:
            reset_request_context(tokens)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "identity_extra",
]
