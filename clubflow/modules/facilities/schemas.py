from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

FacilityStatus = Literal["available", "maintenance", "unavailable"]


class FacilityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    max_concurrent_bookings: int = Field(1, ge=1)
    status: FacilityStatus = "available"


class FacilityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    max_concurrent_bookings: Optional[int] = Field(None, ge=1)
    status: Optional[FacilityStatus] = None


class FacilityResponse(BaseModel):
    id: int
    club_id: int
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    location: Optional[str] = None
    max_concurrent_bookings: Optional[int] = 1
    status: str = "available"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
