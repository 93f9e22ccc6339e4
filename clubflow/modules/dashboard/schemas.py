from pydantic import BaseModel
from typing import List

from clubflow.modules.bookings.schemas import BookingResponse
from clubflow.modules.communication.schemas import AnnouncementResponse


class DashboardStats(BaseModel):
    club_id: int
    total_members: int
    active_members: int
    total_teams: int
    active_teams: int
    total_facilities: int
    todays_bookings: int
    upcoming_events: List[BookingResponse]
    monthly_income: float
    monthly_expenses: float
    monthly_balance: float
    pending_payments: int
    pending_membership_requests: int
    recent_announcements: List[AnnouncementResponse]
