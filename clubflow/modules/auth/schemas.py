from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ClubAccess(BaseModel):
    """A club the signed-in user can switch to"""
    club_id: int
    club_name: Optional[str] = None
    role: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_at: Optional[int] = None
    user_id: str
    email: str
    clubs: List[ClubAccess] = []


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    preferred_language: str = "de"
    invitation_token: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    requires_confirmation: bool = False
    club_id: Optional[int] = None
