from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime

from portal.schemas.catalog import CourseResponse, SkillBrief


class SkillRequirementIn(BaseModel):
    skill_id: str
    required_level: Optional[int] = None


class JobCreate(BaseModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    salary: Optional[str] = None
    open_positions: Optional[int] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    apply_url: Optional[str] = None
    course_ids: Optional[List[str]] = None
    skill_requirements: Optional[List[SkillRequirementIn]] = None


class JobUpdate(JobCreate):
    is_active: Optional[bool] = None


class SkillRequirementResponse(BaseModel):
    skill_id: str
    required_level: int
    skill: Optional[SkillBrief] = None

    model_config = ConfigDict(from_attributes=True)


class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    location: Optional[str] = None
    type: Optional[str] = None
    salary: Optional[str] = None
    open_positions: Optional[int] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    apply_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    courses: List[CourseResponse] = []
    skill_requirements: List[SkillRequirementResponse] = []

    model_config = ConfigDict(from_attributes=True)


class JobListResponse(BaseModel):
    jobs: List[JobResponse]


class JobEnvelope(BaseModel):
    job: JobResponse


class JobApplicationResponse(BaseModel):
    id: str
    student_id: str
    job_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentSkillLevel(BaseModel):
    skill_id: str
    proficiency_level: int

    model_config = ConfigDict(from_attributes=True)


class JobApplyResponse(BaseModel):
    success: bool = True
    application: JobApplicationResponse


class JobApplicationStatusResponse(BaseModel):
    applied: bool
    application: Optional[JobApplicationResponse] = None
    studentSkills: List[StudentSkillLevel] = []
