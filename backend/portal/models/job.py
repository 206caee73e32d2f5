"""
Job Models - postings, their course/skill gating, and student applications
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class Job(Base):
    """Job posting"""
    __tablename__ = "jobs"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    title = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    type = Column(String(50), nullable=True)
    salary = Column(String(100), nullable=True)
    open_positions = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)

    # Contact
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(32), nullable=True)
    apply_url = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    job_courses = relationship("JobCourse", cascade="all, delete-orphan", lazy="selectin")
    skill_requirements = relationship("JobSkillRequirement", cascade="all, delete-orphan", lazy="selectin")

    @property
    def courses(self):
        return [jc.course for jc in self.job_courses if jc.course is not None]

    def __repr__(self):
        return f"<Job {self.title} @ {self.company}>"


class JobCourse(Base):
    """Restricts a job to students of a course"""
    __tablename__ = "job_courses"
    __table_args__ = (UniqueConstraint("job_id", "course_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    job_id = Column(GUID, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(GUID, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)

    course = relationship("Course", lazy="selectin")


class JobSkillRequirement(Base):
    """Minimum proficiency a student needs to apply"""
    __tablename__ = "job_skill_requirements"
    __table_args__ = (UniqueConstraint("job_id", "skill_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    job_id = Column(GUID, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id = Column(GUID, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)
    required_level = Column(Integer, default=1, nullable=False)

    skill = relationship("Skill", lazy="selectin")


class JobApplication(Base):
    """A student's application to a job (one per student and job)"""
    __tablename__ = "job_applications"
    __table_args__ = (UniqueConstraint("student_id", "job_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(GUID, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
