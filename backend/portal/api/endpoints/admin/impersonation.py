"""
Admin impersonation: act as a student, then return to the admin identity.
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.core.exceptions import ValidationError, StudentNotFoundError, UnauthorizedError
from portal.core.logging_config import logger
from portal.models.student import Student
from portal.modules.auth import build_session, write_session, clear_session, read_session, require_admin
from portal.schemas.auth import ImpersonateRequest, ImpersonateResponse, StopImpersonateResponse, StudentSummary
from portal.schemas.session import Session, OriginalAdmin
from portal.services.audit_log import PrivilegedAuditedRoute

router = APIRouter(route_class=PrivilegedAuditedRoute)


@router.post("/impersonate", response_model=ImpersonateResponse)
async def start_impersonation(
    payload: ImpersonateRequest,
    response: Response,
    admin_session: Session = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Replace the admin's cookie with an unprivileged session for the target student"""
    if not payload.studentId:
        raise ValidationError("Student ID is required", field="studentId")

    result = await db.execute(select(Student).where(Student.id == payload.studentId))
    target = result.scalar_one_or_none()
    if not target:
        raise StudentNotFoundError(payload.studentId)

    original_admin = OriginalAdmin(
        student_id=admin_session.student_id,
        phone=admin_session.phone,
        name=admin_session.name,
    )
    write_session(response, build_session(target, original_admin=original_admin))

    logger.log_auth_event(
        "impersonate_start", True,
        phone=admin_session.phone,
        admin_id=admin_session.student_id,
        target_id=target.id,
    )
    return ImpersonateResponse(
        message=f"Now impersonating {target.name}",
        student=StudentSummary(id=target.id, name=target.name, phone=target.phone),
    )


@router.post("/stop-impersonate", response_model=StopImpersonateResponse)
async def stop_impersonation(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Restore the original admin session.

    The original admin is re-read from the database; if the account is gone
    or no longer an admin the cookie is cleared and the caller must log in again.
    """
    session = read_session(request)
    if session is None:
        raise UnauthorizedError()

    if not session.is_impersonating or session.original_admin is None:
        raise ValidationError("Not currently impersonating anyone")

    admin_id = session.original_admin.student_id
    result = await db.execute(select(Student).where(Student.id == admin_id))
    admin = result.scalar_one_or_none()

    if not admin or not admin.is_admin:
        logger.log_auth_event("impersonate_stop", False, phone=session.original_admin.phone,
                              reason="original admin no longer valid", admin_id=admin_id)
        revoked = JSONResponse(
            status_code=401,
            content={"error": "Original admin session is no longer valid", "code": "UNAUTHORIZED"},
        )
        clear_session(revoked)
        return revoked

    write_session(response, build_session(admin, is_admin=True))

    logger.log_auth_event("impersonate_stop", True, phone=admin.phone, admin_id=admin.id,
                          target_id=session.student_id)
    return StopImpersonateResponse(
        message=f"Returned to admin account: {admin.name}",
        admin=StudentSummary(id=admin.id, name=admin.name, phone=admin.phone),
    )
