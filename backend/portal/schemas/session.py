from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class OriginalAdmin(BaseModel):
    """Identity an impersonating admin returns to"""
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(..., alias="studentId")
    phone: str
    name: str


class Session(BaseModel):
    """Authenticated identity carried in the session cookie.

    Field aliases are the camelCase keys stored in the cookie payload.
    ``expires_at`` is an absolute epoch timestamp in milliseconds.
    """
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(..., alias="studentId")
    phone: str
    name: str
    is_admin: bool = Field(False, alias="isAdmin")
    is_impersonating: bool = Field(False, alias="isImpersonating")
    original_admin: Optional[OriginalAdmin] = Field(None, alias="originalAdmin")
    expires_at: int = Field(..., alias="expiresAt")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
