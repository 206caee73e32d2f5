# Re-export all models so Base.metadata sees every table
from portal.models.student import Student
from portal.models.auth import OTPCode, LoginAttempt
from portal.models.api_log import ApiLog
from portal.models.course import Course, StudentCourse
from portal.models.skill import Skill, StudentSkill
from portal.models.job import Job, JobCourse, JobSkillRequirement, JobApplication
from portal.models.task import (
    Task,
    TaskCourse,
    TaskSkillReward,
    TaskApplication,
    TaskApplicationStatus,
)
from portal.models.certificate_request import CertificateRequest, CertificateStatus
from portal.models.learning import Technology, Topic

__all__ = [
    # Students
    "Student",
    "StudentCourse",
    "StudentSkill",
    # Login
    "OTPCode",
    "LoginAttempt",
    # Audit
    "ApiLog",
    # Catalog
    "Course",
    "Skill",
    "Technology",
    "Topic",
    # Jobs
    "Job",
    "JobCourse",
    "JobSkillRequirement",
    "JobApplication",
    # Tasks
    "Task",
    "TaskCourse",
    "TaskSkillReward",
    "TaskApplication",
    "TaskApplicationStatus",
    # Certificates
    "CertificateRequest",
    "CertificateStatus",
]
