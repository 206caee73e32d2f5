from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from portal.schemas.common import to_naive_utc
from portal.schemas.catalog import CourseResponse, SkillBrief
from portal.schemas.student import StudentBrief


class SkillRewardIn(BaseModel):
    skill_id: str
    level_reward: Optional[int] = None


class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    course_ids: Optional[List[str]] = None
    skill_rewards: Optional[List[SkillRewardIn]] = None

    normalize_deadline = field_validator("deadline")(to_naive_utc)


class TaskUpdate(TaskCreate):
    is_active: Optional[bool] = None


class SkillRewardResponse(BaseModel):
    skill_id: str
    level_reward: int
    skill: Optional[SkillBrief] = None

    model_config = ConfigDict(from_attributes=True)


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    courses: List[CourseResponse] = []
    skill_rewards: List[SkillRewardResponse] = []

    model_config = ConfigDict(from_attributes=True)


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]


class TaskEnvelope(BaseModel):
    task: TaskResponse


class TaskApplicationUpdate(BaseModel):
    status: Optional[str] = None
    submission: Optional[str] = None


class TaskApplicationResponse(BaseModel):
    id: str
    student_id: str
    task_id: str
    status: str
    submission: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TaskApplicationEnvelope(BaseModel):
    success: bool = True
    application: TaskApplicationResponse


class TaskApplicationStatusResponse(BaseModel):
    applied: bool
    application: Optional[TaskApplicationResponse] = None


class TaskBrief(BaseModel):
    id: str
    title: str
    deadline: Optional[datetime] = None
    skill_rewards: List[SkillRewardResponse] = []

    model_config = ConfigDict(from_attributes=True)


class TaskApplicationDetail(TaskApplicationResponse):
    student: Optional[StudentBrief] = None
    task: Optional[TaskBrief] = None


class TaskApplicationListResponse(BaseModel):
    applications: List[TaskApplicationDetail]


class TaskApplicationReview(BaseModel):
    status: Optional[str] = None
