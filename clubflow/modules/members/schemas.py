from pydantic import BaseModel, EmailStr
from typing import Optional, Literal, Dict, Any
from datetime import date, datetime

MemberStatus = Literal["active", "inactive", "suspended"]


class MemberCreate(BaseModel):
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    membership_number: Optional[str] = None
    status: MemberStatus = "active"
    join_date: Optional[date] = None
    notes: Optional[str] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    pays_membership_fee: bool = True


class MemberUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    membership_number: Optional[str] = None
    status: Optional[MemberStatus] = None
    join_date: Optional[date] = None
    notes: Optional[str] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    pays_membership_fee: Optional[bool] = None


class MemberResponse(BaseModel):
    id: int
    club_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    membership_number: Optional[str] = None
    status: str
    join_date: Optional[date] = None
    notes: Optional[str] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    pays_membership_fee: Optional[bool] = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
