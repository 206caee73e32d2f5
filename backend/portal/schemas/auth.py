from pydantic import BaseModel
from typing import Optional

from portal.schemas.session import Session


class SendOTPRequest(BaseModel):
    phone: Optional[str] = None


class SendOTPResponse(BaseModel):
    success: bool = True
    message: str
    phone: str


class VerifyOTPRequest(BaseModel):
    phone: Optional[str] = None
    code: Optional[str] = None


class StudentSummary(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    student: StudentSummary


class SessionResponse(BaseModel):
    session: Optional[Session] = None


class ImpersonateRequest(BaseModel):
    studentId: Optional[str] = None


class ImpersonateResponse(BaseModel):
    success: bool = True
    message: str
    student: StudentSummary


class StopImpersonateResponse(BaseModel):
    success: bool = True
    message: str
    admin: StudentSummary


class SuccessResponse(BaseModel):
    success: bool = True
