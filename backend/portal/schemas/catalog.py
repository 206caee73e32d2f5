"""Courses, skills, technologies and topics"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class CourseResponse(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CourseListResponse(BaseModel):
    courses: List[CourseResponse]


class SkillBrief(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SkillCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None


class SkillResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SkillListResponse(BaseModel):
    skills: List[SkillResponse]


class SkillEnvelope(BaseModel):
    skill: SkillResponse


class TopicBrief(BaseModel):
    id: str
    title: str
    order_index: int
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class TechnologyBrief(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None
    course: Optional[CourseResponse] = None

    model_config = ConfigDict(from_attributes=True)


class TechnologyCreate(BaseModel):
    course_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None


class TopicCreate(BaseModel):
    technology_id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None


class TechnologyResponse(BaseModel):
    id: str
    course_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    order_index: int
    is_active: bool
    course: Optional[CourseResponse] = None
    topics: List[TopicBrief] = Field(default_factory=list, validation_alias="active_topics")

    # ORM objects fill ``topics`` from ``active_topics``; dumped responses round-trip by name
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TechnologyListResponse(BaseModel):
    technologies: List[TechnologyResponse]


class TechnologyEnvelope(BaseModel):
    technology: TechnologyResponse


class TopicResponse(BaseModel):
    id: str
    technology_id: str
    title: str
    content: Optional[str] = None
    order_index: int
    is_active: bool
    technology: Optional[TechnologyBrief] = None

    model_config = ConfigDict(from_attributes=True)


class TopicListResponse(BaseModel):
    topics: List[TopicResponse]


class TopicEnvelope(BaseModel):
    topic: TopicResponse
