from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.core.exceptions import UnauthorizedError, ForbiddenError
from portal.core.logging_config import logger
from portal.models.student import Student
from portal.modules.auth.session import read_session
from portal.schemas.session import Session


@dataclass
class Privilege:
    is_admin: bool
    session: Optional[Session]

    @property
    def can_administer(self) -> bool:
        """Admin rights usable right now; an impersonated session never has them"""
        return self.is_admin and self.session is not None and not self.session.is_impersonating


async def verify_privilege(session: Optional[Session], db: AsyncSession) -> Privilege:
    """
    The only place admin rights are granted.

    The cookie's ``isAdmin`` claim is never trusted on its own: the persisted
    ``students.is_admin`` flag of the claimed admin (the original admin while
    impersonating) is re-read on every call.
    """
    if session is None:
        return Privilege(is_admin=False, session=None)

    claims_admin = session.is_admin or (session.is_impersonating and session.original_admin is not None)
    if not claims_admin:
        return Privilege(is_admin=False, session=session)

    if session.is_impersonating and session.original_admin is not None:
        check_id = session.original_admin.student_id
    else:
        check_id = session.student_id

    result = await db.execute(select(Student.is_admin).where(Student.id == check_id))
    persisted = result.scalar_one_or_none()

    if not persisted:
        logger.log_auth_event("verify_privilege", False, reason="admin flag not set", student_id=check_id)
        return Privilege(is_admin=False, session=session)
    return Privilege(is_admin=True, session=session)


async def get_session(request: Request) -> Optional[Session]:
    """Current session, or None"""
    return read_session(request)


async def require_session(session: Optional[Session] = Depends(get_session)) -> Session:
    if session is None:
        raise UnauthorizedError()
    return session


async def get_privilege(
    session: Optional[Session] = Depends(get_session),
    db: AsyncSession = Depends(get_db),
) -> Privilege:
    return await verify_privilege(session, db)


async def require_admin(privilege: Privilege = Depends(get_privilege)) -> Session:
    """401 without a session, 403 unless a verified, non-impersonating admin"""
    if privilege.session is None:
        raise UnauthorizedError()
    if not privilege.can_administer:
        raise ForbiddenError()
    return privilege.session
