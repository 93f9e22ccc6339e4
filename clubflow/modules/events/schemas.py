from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal, Any
from datetime import datetime

from clubflow.modules.bookings.schemas import BookingResponse

EventType = Literal["training", "match", "event", "meeting"]
EventStatus = Literal["confirmed", "pending", "cancelled"]


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    type: EventType = "event"
    location: Optional[str] = None
    is_public: bool = True
    team_id: Optional[int] = None
    member_id: Optional[int] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    participants: Optional[Any] = None
    cost: Optional[str] = None
    status: EventStatus = "confirmed"
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    type: Optional[EventType] = None
    location: Optional[str] = None
    is_public: Optional[bool] = None
    team_id: Optional[int] = None
    member_id: Optional[int] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    participants: Optional[Any] = None
    cost: Optional[str] = None
    status: Optional[EventStatus] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventResponse(BookingResponse):
    pass
