from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime


class InvitationCreate(BaseModel):
    email: EmailStr
    role_id: Optional[int] = None
    personal_message: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class InvitationResponse(BaseModel):
    """Invitation as shown to club admins; the token is never exposed"""
    id: int
    club_id: int
    invited_by: Optional[str] = None
    email: str
    role_id: Optional[int] = None
    status: str
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvitationSentResponse(BaseModel):
    message: str
    invitation: InvitationResponse
    email_queued: bool


class InvitationDetails(BaseModel):
    """Public view used by the registration form"""
    email: str
    first_name: str = ""
    last_name: str = ""
    club_id: int
    club_name: str
    role_id: Optional[int] = None
    role_name: str
    expires_at: datetime
    is_existing_user: bool


class InvitationAcceptResponse(BaseModel):
    message: str
    club_id: int
    membership_id: int
