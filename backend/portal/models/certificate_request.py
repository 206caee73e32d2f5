from sqlalchemy import Column, String, DateTime, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class CertificateStatus(str, enum.Enum):
    PENDING = "pending"
    REJECTED = "rejected"
    SENT = "sent"
    DELIVERED = "delivered"


# A student may hold only one request in these states
ACTIVE_CERTIFICATE_STATUSES = (CertificateStatus.PENDING.value, CertificateStatus.SENT.value)


class CertificateRequest(Base):
    """Request to have a paper certificate delivered to an address"""
    __tablename__ = "certificate_requests"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    # Delivery
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    additional_info = Column(Text, nullable=True)

    # Workflow
    status = Column(String(20), default=CertificateStatus.PENDING.value, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    estimated_arrival = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", lazy="selectin")

    def __repr__(self):
        return f"<CertificateRequest {self.student_id} {self.status}>"
