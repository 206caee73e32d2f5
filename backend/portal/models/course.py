from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class Course(Base):
    """Course a student can be enrolled in; gates job and task visibility"""
    __tablename__ = "courses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Course {self.name}>"


class StudentCourse(Base):
    """Enrollment of a student in a course"""
    __tablename__ = "student_courses"
    __table_args__ = (UniqueConstraint("student_id", "course_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(GUID, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    student = relationship("Student", back_populates="student_courses")
    course = relationship("Course", lazy="selectin")
