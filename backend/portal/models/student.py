from sqlalchemy import Column, String, Boolean, DateTime, Integer
from sqlalchemy.orm import relationship
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class Student(Base):
    """A registered subject, identified by phone number"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    phone = Column(String(32), unique=True, index=True, nullable=False)
    personal_id = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(String(50), nullable=True)
    group_name = Column(String(100), nullable=True)
    coins = Column(Integer, default=0, nullable=False)

    is_admin = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    student_courses = relationship("StudentCourse", back_populates="student", cascade="all, delete-orphan", lazy="selectin")

    @property
    def courses(self):
        return [sc.course for sc in self.student_courses if sc.course is not None]

    def __repr__(self):
        return f"<Student {self.phone}>"
