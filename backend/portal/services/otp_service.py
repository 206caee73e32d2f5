"""
One-time code issuance and verification.

Issuance never reveals whether a phone is registered: callers get the same
outcome either way and only registered phones receive a code.
"""

import re
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.exceptions import ValidationError, InvalidOrExpiredCodeError, StudentNotFoundError
from portal.core.logging_config import logger
from portal.core.security import generate_otp_code
from portal.models.auth import OTPCode, LoginAttempt
from portal.models.student import Student

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """Strip everything but digits; reject numbers shorter than PHONE_MIN_DIGITS"""
    cleaned = _NON_DIGITS.sub("", phone or "")
    if len(cleaned) < settings.PHONE_MIN_DIGITS:
        raise ValidationError("Invalid phone number format", field="phone")
    return cleaned


class OTPService:

    def __init__(self, ttl_minutes: Optional[int] = None):
        self.ttl = timedelta(minutes=ttl_minutes or settings.OTP_TTL_MINUTES)

    async def record_attempt(self, db: AsyncSession, phone: str) -> None:
        """Upsert the login-attempt row for ``phone``. Observability only."""
        now = datetime.utcnow()
        try:
            result = await db.execute(select(LoginAttempt).where(LoginAttempt.phone == phone))
            attempt = result.scalar_one_or_none()
            if attempt:
                attempt.attempt_count = (attempt.attempt_count or 0) + 1
                attempt.last_attempt_at = now
            else:
                db.add(LoginAttempt(phone=phone, attempt_count=1, first_attempt_at=now, last_attempt_at=now))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.log_error_with_context(e, "otp.record_attempt", phone=phone)

    async def issue(self, db: AsyncSession, phone: str) -> Optional[str]:
        """
        Create a fresh code for a registered phone.

        Returns the code, or None when the phone is unknown or the code could
        not be stored. Earlier unused codes for the phone are marked used in
        the same transaction as the insert.
        """
        result = await db.execute(select(Student.id).where(Student.phone == phone))
        if result.scalar_one_or_none() is None:
            logger.log_auth_event("otp_issue", False, phone=phone, reason="unregistered phone")
            return None

        code = generate_otp_code()
        try:
            await db.execute(
                update(OTPCode)
                .where(OTPCode.phone == phone, OTPCode.used.is_(False))
                .values(used=True)
            )
            db.add(OTPCode(phone=phone, code=code, expires_at=datetime.utcnow() + self.ttl, used=False))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.log_error_with_context(e, "otp.issue", phone=phone)
            return None

        logger.log_auth_event("otp_issue", True, phone=phone)
        return code

    async def verify(self, db: AsyncSession, phone: str, code: str) -> Student:
        """
        Consume a code and return its student.

        Raises InvalidOrExpiredCodeError when no unused, unexpired code
        matches, and StudentNotFoundError when the phone has no student.
        """
        now = datetime.utcnow()
        result = await db.execute(
            select(OTPCode)
            .where(
                OTPCode.phone == phone,
                OTPCode.code == code,
                OTPCode.used.is_(False),
                OTPCode.expires_at >= now,
            )
            .order_by(OTPCode.created_at.desc())
            .limit(1)
        )
        otp = result.scalar_one_or_none()
        if otp is None:
            logger.log_auth_event("otp_verify", False, phone=phone, reason="invalid or expired code")
            raise InvalidOrExpiredCodeError()

        # Consuming one code retires every other outstanding code for the phone
        await db.execute(
            update(OTPCode)
            .where(OTPCode.phone == phone, OTPCode.used.is_(False))
            .values(used=True)
        )
        await db.commit()

        result = await db.execute(select(Student).where(Student.phone == phone))
        student = result.scalar_one_or_none()
        if student is None:
            logger.log_auth_event("otp_verify", False, phone=phone, reason="student not found")
            raise StudentNotFoundError()

        logger.log_auth_event("otp_verify", True, phone=phone, student_id=student.id)
        return student


otp_service = OTPService()
