"""
Session cookie codec.

The whole authenticated identity lives in one signed cookie; nothing is
stored server side. Reading never raises: a missing, tampered, malformed or
expired cookie is simply "no session".
"""

import time
from typing import Optional

from fastapi import Request, Response
from pydantic import ValidationError as PydanticValidationError

from portal.core.config import settings
from portal.core.security import encode_session_token, decode_session_token
from portal.models.student import Student
from portal.schemas.session import Session, OriginalAdmin


def now_ms() -> int:
    return int(time.time() * 1000)


def build_session(
    student: Student,
    is_admin: Optional[bool] = None,
    original_admin: Optional[OriginalAdmin] = None,
    ttl_seconds: Optional[int] = None,
) -> Session:
    """Fresh session for ``student``.

    Passing ``original_admin`` produces an impersonated session, which is
    never privileged itself.
    """
    ttl = ttl_seconds if ttl_seconds is not None else settings.SESSION_TTL_SECONDS
    impersonating = original_admin is not None
    return Session(
        student_id=student.id,
        phone=student.phone,
        name=student.name,
        is_admin=False if impersonating else bool(student.is_admin if is_admin is None else is_admin),
        is_impersonating=impersonating,
        original_admin=original_admin,
        expires_at=now_ms() + ttl * 1000,
    )


def read_session(request: Request) -> Optional[Session]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    payload = decode_session_token(token)
    if payload is None:
        return None

    try:
        session = Session.model_validate(payload)
    except PydanticValidationError:
        return None

    if not session.student_id or session.expires_at <= now_ms():
        return None
    return session


def write_session(response: Response, session: Session, ttl_seconds: Optional[int] = None) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=encode_session_token(session.to_payload()),
        max_age=ttl_seconds if ttl_seconds is not None else settings.SESSION_TTL_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production(),
    )


def clear_session(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production(),
    )
