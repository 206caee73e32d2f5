from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime


class StudentCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    personal_id: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    group_name: Optional[str] = None
    coins: Optional[int] = None
    is_admin: Optional[bool] = None


class StudentUpdate(StudentCreate):
    id: Optional[str] = None


class StudentResponse(BaseModel):
    id: str
    name: str
    phone: str
    personal_id: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    group_name: Optional[str] = None
    coins: int = 0
    is_admin: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentBrief(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    group_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StudentListResponse(BaseModel):
    students: List[StudentResponse]


class StudentEnvelope(BaseModel):
    student: StudentResponse
