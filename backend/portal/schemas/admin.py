from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Any
from datetime import datetime

from portal.schemas.student import StudentBrief


class ApiLogResponse(BaseModel):
    id: str
    timestamp: datetime
    method: str
    path: str
    status_code: int
    duration_ms: int
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    error_message: Optional[str] = None
    request_body: Optional[Any] = None
    student: Optional[StudentBrief] = None

    model_config = ConfigDict(from_attributes=True)


class ApiLogsResponse(BaseModel):
    logs: List[ApiLogResponse]
    total: int
    limit: int
    offset: int


class LoginAttemptResponse(BaseModel):
    id: str
    phone: str
    attempt_count: int
    first_attempt_at: datetime
    last_attempt_at: datetime
    is_registered: bool
    student: Optional[StudentBrief] = None


class LoginAttemptsResponse(BaseModel):
    attempts: List[LoginAttemptResponse]
    total: int
    registered_count: int
    unregistered_count: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
