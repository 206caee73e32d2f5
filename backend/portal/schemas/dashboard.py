from pydantic import BaseModel, ConfigDict
from typing import Optional, List

from portal.schemas.catalog import CourseResponse, SkillBrief
from portal.schemas.certificate import CertificateRequestResponse
from portal.schemas.job import JobResponse
from portal.schemas.task import TaskResponse, TaskApplicationResponse


class DashboardStudent(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    group_name: Optional[str] = None
    coins: int = 0
    courses: List[CourseResponse] = []

    model_config = ConfigDict(from_attributes=True)


class DashboardSkill(BaseModel):
    skill_id: str
    proficiency_level: int
    skill: Optional[SkillBrief] = None

    model_config = ConfigDict(from_attributes=True)


class DashboardResponse(BaseModel):
    student: DashboardStudent
    jobs: List[JobResponse]
    tasks: List[TaskResponse]
    skills: List[DashboardSkill]
    applications: List[TaskApplicationResponse]
    certificate_request: Optional[CertificateRequestResponse] = None
