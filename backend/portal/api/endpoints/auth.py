from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from portal.core.database import get_db
from portal.core.exceptions import ValidationError
from portal.core.logging_config import logger
from portal.core.rate_limiter import otp_rate_limit
from portal.modules.auth import build_session, write_session, clear_session, get_session
from portal.schemas.auth import (
    SendOTPRequest,
    SendOTPResponse,
    VerifyOTPRequest,
    LoginResponse,
    StudentSummary,
    SessionResponse,
    SuccessResponse,
)
from portal.schemas.session import Session
from portal.services.audit_log import AuditedRoute
from portal.services.otp_service import otp_service, normalize_phone
from portal.services.sms_service import sms_service

router = APIRouter(route_class=AuditedRoute)

OTP_SENT_MESSAGE = "If this phone is registered, an OTP will be sent"


@router.post("/send-otp", response_model=SendOTPResponse)
@otp_rate_limit()
async def send_otp(
    request: Request,
    payload: SendOTPRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """
    Issue a login code.

    The body is identical for registered and unregistered phones. The SMS is
    sent after the response path finishes and its outcome is only logged.
    """
    if not payload.phone:
        raise ValidationError("Phone number is required", field="phone")

    phone = normalize_phone(payload.phone)

    await otp_service.record_attempt(db, phone)
    code = await otp_service.issue(db, phone)
    if code is not None:
        background_tasks.add_task(sms_service.send_otp, phone, code)

    return SendOTPResponse(message=OTP_SENT_MESSAGE, phone=phone)


@router.post("/verify-otp", response_model=LoginResponse)
async def verify_otp(
    payload: VerifyOTPRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Exchange a valid code for a 7-day session cookie"""
    if not payload.phone or not payload.code:
        raise ValidationError("Phone and code are required")

    phone = normalize_phone(payload.phone)
    student = await otp_service.verify(db, phone, payload.code.strip())

    write_session(response, build_session(student))

    return LoginResponse(
        message="Login successful",
        student=StudentSummary(id=student.id, name=student.name),
    )


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response, session: Optional[Session] = Depends(get_session)):
    clear_session(response)
    if session:
        logger.log_auth_event("logout", True, phone=session.phone)
    return SuccessResponse()


@router.get("/session", response_model=SessionResponse)
async def current_session(session: Optional[Session] = Depends(get_session)):
    """Identity behind the cookie, used for the impersonation banner"""
    return SessionResponse(session=session)
