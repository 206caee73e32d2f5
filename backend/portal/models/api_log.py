from sqlalchemy import Column, String, DateTime, Text, Integer, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class ApiLog(Base):
    """Append-only audit row written for every audited request"""
    __tablename__ = "api_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Request
    method = Column(String(10), nullable=False)
    path = Column(String(500), nullable=False)
    request_body = Column(JSON, nullable=True)  # password/code/otp redacted

    # Outcome
    status_code = Column(Integer, nullable=False)
    duration_ms = Column(Integer, nullable=False)
    error_message = Column(Text, nullable=True)

    # Requester
    user_id = Column(GUID, nullable=True, index=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    student = relationship(
        "Student",
        primaryjoin="foreign(ApiLog.user_id) == Student.id",
        uselist=False,
        viewonly=True,
        lazy="selectin",
    )

    def __repr__(self):
        return f"<ApiLog {self.method} {self.path} {self.status_code}>"
