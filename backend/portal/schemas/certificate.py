from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from portal.schemas.common import to_naive_utc
from portal.schemas.student import StudentBrief


class CertificateRequestCreate(BaseModel):
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    additional_info: Optional[str] = None


class CertificateRequestReview(BaseModel):
    status: Optional[str] = None
    rejection_reason: Optional[str] = None
    estimated_arrival: Optional[datetime] = None

    normalize_estimated_arrival = field_validator("estimated_arrival")(to_naive_utc)


class CertificateRequestResponse(BaseModel):
    id: str
    student_id: str
    address: str
    latitude: float
    longitude: float
    additional_info: Optional[str] = None
    status: str
    rejection_reason: Optional[str] = None
    estimated_arrival: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CertificateRequestDetail(CertificateRequestResponse):
    student: Optional[StudentBrief] = None


class CertificateRequestEnvelope(BaseModel):
    request: Optional[CertificateRequestResponse] = None


class CertificateRequestListResponse(BaseModel):
    requests: List[CertificateRequestDetail]
