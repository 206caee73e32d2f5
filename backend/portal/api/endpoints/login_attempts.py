"""
Admin view of phones that have asked for a login code.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from portal.core.database import get_db
from portal.models.auth import LoginAttempt
from portal.modules.auth import require_admin
from portal.schemas.admin import LoginAttemptResponse, LoginAttemptsResponse
from portal.schemas.session import Session
from portal.services.audit_log import PrivilegedAuditedRoute

router = APIRouter(route_class=PrivilegedAuditedRoute)


@router.get("", response_model=LoginAttemptsResponse)
async def list_login_attempts(
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    result = await db.execute(select(LoginAttempt).order_by(LoginAttempt.last_attempt_at.desc()))

    attempts = []
    for attempt in result.scalars().all():
        attempts.append(LoginAttemptResponse(
            id=attempt.id,
            phone=attempt.phone,
            attempt_count=attempt.attempt_count,
            first_attempt_at=attempt.first_attempt_at,
            last_attempt_at=attempt.last_attempt_at,
            is_registered=attempt.student is not None,
            student=attempt.student,
        ))

    registered = sum(1 for a in attempts if a.is_registered)
    return LoginAttemptsResponse(
        attempts=attempts,
        total=len(attempts),
        registered_count=registered,
        unregistered_count=len(attempts) - registered,
    )
