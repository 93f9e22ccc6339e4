from pydantic import BaseModel, EmailStr, field_validator, model_validator
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime


CLUB_UPDATABLE_FIELDS = (
    "name", "short_name", "description", "address", "phone", "email",
    "website", "logo_url", "founded_year", "member_count", "primary_color",
    "secondary_color", "accent_color", "settings",
)


class ClubCreate(BaseModel):
    name: str
    short_name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    founded_year: Optional[int] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Club name must not be empty")
        return value.strip()


class ClubUpdate(BaseModel):
    name: Optional[str] = None
    short_name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    founded_year: Optional[int] = None
    member_count: Optional[int] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def empty_strings_to_none(cls, data):
        if isinstance(data, dict):
            return {k: (None if v == "" else v) for k, v in data.items()}
        return data


class ClubResponse(BaseModel):
    id: int
    name: str
    short_name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    founded_year: Optional[int] = None
    member_count: Optional[int] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserClubResponse(ClubResponse):
    role: str
    status: str


class PublicClubResponse(BaseModel):
    id: int
    name: str
    short_name: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None


class MembershipResponse(BaseModel):
    id: int
    user_id: str
    club_id: int
    role_id: Optional[int] = None
    status: str
    joined_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JoinResponse(BaseModel):
    success: bool = True
    message: str
    membership_id: int
    status: str


class MembershipDecision(BaseModel):
    action: Literal["approve", "reject"]
    role_id: Optional[int] = None


class MembershipDecisionResponse(BaseModel):
    success: bool = True
    message: str
    action: Literal["approved", "rejected"]
    membership: Optional[MembershipResponse] = None


class MembershipRoleChange(BaseModel):
    role_id: Optional[int] = None
    role: Optional[str] = None

    @model_validator(mode="after")
    def role_given(self):
        if self.role_id is None and not self.role:
            raise ValueError("Either role (name) or role_id must be provided")
        return self


class MembershipStatusChange(BaseModel):
    status: Literal["active", "inactive", "suspended"]


class ClubUserResponse(BaseModel):
    membership_id: int
    user_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role_id: Optional[int] = None
    role: Optional[str] = None
    status: str
    joined_at: Optional[datetime] = None


class UserMembershipResponse(BaseModel):
    is_member: bool
    status: Optional[str] = None
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    joined_at: Optional[datetime] = None


class PermissionFlags(BaseModel):
    can_view: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_create: bool = False
    can_manage_teams: bool = False
    can_manage_members: bool = False
    can_manage_finances: bool = False
    can_manage_bookings: bool = False
    is_read_only: bool = True
    role: Optional[str] = None
    permissions: List[str] = []


class ActivityLogResponse(BaseModel):
    id: int
    club_id: int
    user_id: Optional[str] = None
    action: str
    target_user_id: Optional[str] = None
    target_resource: Optional[str] = None
    target_resource_id: Optional[int] = None
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
