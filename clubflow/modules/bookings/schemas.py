from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, List, Any, Dict
from datetime import date, datetime

BookingType = Literal["training", "match", "event", "meeting", "booking"]
BookingStatus = Literal["confirmed", "pending", "cancelled"]
RecurringPattern = Literal["daily", "weekly", "monthly"]


class BookingBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    team_id: Optional[int] = None
    member_id: Optional[int] = None
    location: Optional[str] = None
    is_public: bool = True
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    participants: Optional[Any] = None
    cost: Optional[str] = None
    status: BookingStatus = "confirmed"
    notes: Optional[str] = None


class BookingCreate(BookingBase):
    facility_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    type: BookingType = "booking"
    recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_until: Optional[date] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.recurring and (not self.recurring_pattern or not self.recurring_until):
            raise ValueError("recurring bookings need recurring_pattern and recurring_until")
        return self


class BookingUpdate(BaseModel):
    facility_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    team_id: Optional[int] = None
    member_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    type: Optional[BookingType] = None
    location: Optional[str] = None
    is_public: Optional[bool] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    participants: Optional[Any] = None
    cost: Optional[str] = None
    status: Optional[BookingStatus] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BookingResponse(BaseModel):
    id: int
    club_id: int
    facility_id: Optional[int] = None
    team_id: Optional[int] = None
    member_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    type: str
    location: Optional[str] = None
    is_public: Optional[bool] = True
    recurring: Optional[bool] = False
    recurring_pattern: Optional[str] = None
    recurring_until: Optional[date] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    participants: Optional[Any] = None
    cost: Optional[str] = None
    status: str = "confirmed"
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingCreateResponse(BaseModel):
    message: str
    bookings: List[BookingResponse]
    count: int
    skipped: int = 0
    main_booking: BookingResponse


class AvailabilityRequest(BaseModel):
    facility_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    exclude_booking_id: Optional[int] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityResponse(BaseModel):
    available: bool
    max_concurrent: Optional[int] = None
    current_bookings: int
    conflicting_bookings: List[Dict[str, Any]] = []
