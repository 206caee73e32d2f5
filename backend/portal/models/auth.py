"""
Login Models - one-time codes and per-phone login attempt tracking
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer
from sqlalchemy.orm import relationship
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class OTPCode(Base):
    """One-time login code sent by SMS"""
    __tablename__ = "otp_codes"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    phone = Column(String(32), nullable=False, index=True)
    code = Column(String(12), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<OTPCode {self.phone} used={self.used}>"


class LoginAttempt(Base):
    """One row per normalized phone that ever requested a code"""
    __tablename__ = "login_attempts"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    phone = Column(String(32), unique=True, index=True, nullable=False)
    attempt_count = Column(Integer, default=1, nullable=False)
    first_attempt_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_attempt_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Phone is not a foreign key: unregistered numbers are tracked too
    student = relationship(
        "Student",
        primaryjoin="foreign(LoginAttempt.phone) == Student.phone",
        uselist=False,
        viewonly=True,
        lazy="selectin",
    )

    def __repr__(self):
        return f"<LoginAttempt {self.phone} x{self.attempt_count}>"
