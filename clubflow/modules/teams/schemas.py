from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal, List
from datetime import date, datetime


class TeamCreate(BaseModel):
    name: str
    category: Optional[str] = None
    age_group: Optional[str] = None
    gender: Optional[Literal["male", "female", "mixed"]] = None
    description: Optional[str] = None
    max_members: Optional[int] = Field(default=None, ge=1)
    status: Literal["active", "inactive"] = "active"
    season: Optional[str] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    age_group: Optional[str] = None
    gender: Optional[Literal["male", "female", "mixed"]] = None
    description: Optional[str] = None
    max_members: Optional[int] = Field(default=None, ge=1)
    status: Optional[Literal["active", "inactive"]] = None
    season: Optional[str] = None


class TeamResponse(BaseModel):
    id: int
    club_id: int
    name: str
    category: Optional[str] = None
    age_group: Optional[str] = None
    gender: Optional[str] = None
    description: Optional[str] = None
    max_members: Optional[int] = None
    status: str
    season: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamMembershipCreate(BaseModel):
    member_id: int
    role: str = "player"
    position: Optional[str] = None
    jersey_number: Optional[int] = Field(default=None, ge=0)


class TeamMembershipResponse(BaseModel):
    id: int
    team_id: int
    member_id: int
    role: str
    position: Optional[str] = None
    jersey_number: Optional[int] = None
    status: str = "active"
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlayerCreate(BaseModel):
    first_name: str
    last_name: str
    jersey_number: Optional[int] = Field(default=None, ge=0)
    position: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    profile_image_url: Optional[str] = None
    height: Optional[int] = None
    weight: Optional[int] = None
    preferred_foot: Optional[Literal["left", "right", "both"]] = None
    status: Literal["active", "injured", "suspended", "inactive"] = "active"
    contract_start: Optional[date] = None
    contract_end: Optional[date] = None
    notes: Optional[str] = None


class PlayerUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    jersey_number: Optional[int] = Field(default=None, ge=0)
    position: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    profile_image_url: Optional[str] = None
    height: Optional[int] = None
    weight: Optional[int] = None
    preferred_foot: Optional[Literal["left", "right", "both"]] = None
    status: Optional[Literal["active", "injured", "suspended", "inactive"]] = None
    contract_start: Optional[date] = None
    contract_end: Optional[date] = None
    notes: Optional[str] = None


class PlayerResponse(BaseModel):
    id: int
    club_id: int
    first_name: str
    last_name: str
    jersey_number: Optional[int] = None
    position: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    profile_image_url: Optional[str] = None
    height: Optional[int] = None
    weight: Optional[int] = None
    preferred_foot: Optional[str] = None
    status: str
    contract_start: Optional[date] = None
    contract_end: Optional[date] = None
    notes: Optional[str] = None
    team_ids: List[int] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlayerAssignment(BaseModel):
    season: Optional[str] = None


class PlayerAssignmentResponse(BaseModel):
    id: int
    player_id: int
    team_id: int
    season: str
    is_active: bool = True
    joined_at: Optional[datetime] = None
