from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    preferred_language: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    preferred_language: Optional[str] = None
    is_active: bool = True
    is_super_admin: bool = False
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MembershipStatus(BaseModel):
    membership_id: int
    club_id: int
    club_name: Optional[str] = None
    status: str
    role: Optional[str] = None


class MembershipStatusResponse(BaseModel):
    has_active_membership: bool
    has_pending_membership: bool
    memberships: List[MembershipStatus]
