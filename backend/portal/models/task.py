"""
Task Models - assignments, their skill rewards, and the student work lifecycle
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class TaskApplicationStatus(str, enum.Enum):
    """in_progress/paused/done are set by the student, approved/rejected by an admin"""
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    DONE = "done"
    APPROVED = "approved"
    REJECTED = "rejected"


STUDENT_STATUSES = {
    TaskApplicationStatus.IN_PROGRESS.value,
    TaskApplicationStatus.PAUSED.value,
    TaskApplicationStatus.DONE.value,
}
REVIEW_STATUSES = {
    TaskApplicationStatus.APPROVED.value,
    TaskApplicationStatus.REJECTED.value,
}


class Task(Base):
    """Task students can take on for skill rewards"""
    __tablename__ = "tasks"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    task_courses = relationship("TaskCourse", cascade="all, delete-orphan", lazy="selectin")
    skill_rewards = relationship("TaskSkillReward", cascade="all, delete-orphan", lazy="selectin")

    @property
    def courses(self):
        return [tc.course for tc in self.task_courses if tc.course is not None]

    def is_past_deadline(self, now: datetime = None) -> bool:
        return self.deadline is not None and self.deadline < (now or datetime.utcnow())

    def __repr__(self):
        return f"<Task {self.title}>"


class TaskCourse(Base):
    """Restricts a task to students of a course"""
    __tablename__ = "task_courses"
    __table_args__ = (UniqueConstraint("task_id", "course_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    task_id = Column(GUID, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(GUID, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)

    course = relationship("Course", lazy="selectin")


class TaskSkillReward(Base):
    """Proficiency levels granted when a task application is approved"""
    __tablename__ = "task_skill_rewards"
    __table_args__ = (UniqueConstraint("task_id", "skill_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    task_id = Column(GUID, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id = Column(GUID, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)
    level_reward = Column(Integer, default=1, nullable=False)

    skill = relationship("Skill", lazy="selectin")


class TaskApplication(Base):
    """A student's work on a task"""
    __tablename__ = "task_applications"
    __table_args__ = (UniqueConstraint("student_id", "task_id"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(GUID, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), default=TaskApplicationStatus.IN_PROGRESS.value, nullable=False)
    submission = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", lazy="selectin")
    task = relationship("Task", lazy="selectin")

    @property
    def is_reviewed(self) -> bool:
        return self.status in REVIEW_STATUSES
