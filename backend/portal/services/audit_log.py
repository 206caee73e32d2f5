"""
Request audit trail.

``AuditedRoute`` wraps each write-verb endpoint of a router and appends one
``api_logs`` row per call: who, what, how long, the outcome, and a redacted
copy of the JSON body. The row is written even when the endpoint raises, and
a failure to write it is logged but never fails the request.

Admin routers use ``PrivilegedAuditedRoute``, which records reads as well.
"""

import json
import time
from typing import Any, Callable, Optional

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException

from portal.core.database import AsyncSessionLocal
from portal.core.exceptions import PortalError
from portal.core.logging_config import logger
from portal.models.api_log import ApiLog
from portal.modules.auth.session import read_session

AUDITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
PRIVILEGED_AUDITED_METHODS = AUDITED_METHODS | {"GET", "HEAD"}
REDACTED_FIELDS = {"password", "code", "otp"}
REDACTION_MARKER = "[REDACTED]"


def redact_body(raw: bytes) -> Optional[Any]:
    """Parsed JSON body with secrets masked; None when empty or not JSON"""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None
    if isinstance(data, dict):
        return {
            key: (REDACTION_MARKER if key in REDACTED_FIELDS else value)
            for key, value in data.items()
        }
    return data


def client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, if the request came through a proxy"""
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return None
    return forwarded.split(",")[0].strip() or None


class AuditLogWriter:
    """Persists audit rows on a session of its own"""

    def __init__(self, session_factory: Optional[Callable] = None):
        self.session_factory = session_factory or AsyncSessionLocal

    async def write(self, **fields) -> None:
        try:
            async with self.session_factory() as db:
                db.add(ApiLog(**fields))
                await db.commit()
        except Exception as e:
            logger.log_error_with_context(e, "audit_log.write", http_path=fields.get("path"))


audit_log_writer = AuditLogWriter()


class AuditedRoute(APIRoute):
    """Route class that records every write-verb call in ``api_logs``"""

    audited_methods = AUDITED_METHODS

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def audited_route_handler(request: Request) -> Response:
            if request.method not in self.audited_methods:
                return await original_route_handler(request)

            start_time = time.perf_counter()
            session = read_session(request)
            request_body = redact_body(await request.body())
            status_code = 500
            error_message = None

            try:
                response = await original_route_handler(request)
                status_code = response.status_code
                return response
            except PortalError as exc:
                status_code = exc.status_code
                error_message = exc.message
                raise
            except RequestValidationError:
                status_code = 400
                error_message = "Invalid request body"
                raise
            except HTTPException as exc:
                status_code = exc.status_code
                error_message = str(exc.detail)
                raise
            except Exception as exc:
                error_message = str(exc) or type(exc).__name__
                raise
            finally:
                await audit_log_writer.write(
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=int((time.perf_counter() - start_time) * 1000),
                    user_id=session.student_id if session else None,
                    ip_address=client_ip(request),
                    user_agent=request.headers.get("user-agent"),
                    error_message=error_message,
                    request_body=request_body,
                )

        return audited_route_handler


class PrivilegedAuditedRoute(AuditedRoute):
    """Records reads too; used on routes that expose other students' data"""

    audited_methods = PRIVILEGED_AUDITED_METHODS
