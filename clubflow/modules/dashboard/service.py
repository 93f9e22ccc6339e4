import logging
from datetime import timedelta
from supabase import Client
from fastapi import HTTPException
from typing import Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import cache_key
from clubflow.core.timeutils import parse_timestamp, utcnow
from clubflow.modules.bookings.schemas import BookingResponse
from clubflow.modules.communication.service import CommunicationService
from clubflow.modules.dashboard.schemas import DashboardStats

logger = logging.getLogger(__name__)

UPCOMING_EVENTS = 5
RECENT_ANNOUNCEMENTS = 3


class DashboardService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def _rows(self, table: str, columns: str, club_id: int) -> list:
        return self.supabase.table(table).select(columns).eq("club_id", club_id).execute().data or []

    def _compute(self, club_id: int) -> DashboardStats:
        now = utcnow()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        day_end = day_start + timedelta(days=1)
        month_start = now.date().replace(day=1)

        members = self._rows("members", "id, status", club_id)
        teams = self._rows("teams", "id, status", club_id)
        facilities = self._rows("facilities", "id", club_id)

        bookings = self.supabase.table("bookings")\
            .select("*")\
            .eq("club_id", club_id)\
            .neq("status", "cancelled")\
            .gte("end_time", day_start.isoformat())\
            .order("start_time")\
            .execute().data or []
        todays = [
            b for b in bookings
            if b.get("facility_id") is not None and parse_timestamp(b["start_time"]) < day_end
        ]
        upcoming = [
            BookingResponse(**b) for b in bookings
            if b.get("facility_id") is None and parse_timestamp(b["start_time"]) >= now
        ][:UPCOMING_EVENTS]

        finances = self.supabase.table("finances")\
            .select("type, amount, status, date")\
            .eq("club_id", club_id)\
            .gte("date", month_start.isoformat())\
            .execute().data or []
        paid = [f for f in finances if f.get("status") == "paid"]
        income = sum(float(f["amount"]) for f in paid if f.get("type") == "income")
        expenses = sum(float(f["amount"]) for f in paid if f.get("type") == "expense")

        pending_requests = self.supabase.table("club_memberships")\
            .select("id")\
            .eq("club_id", club_id)\
            .eq("status", "inactive")\
            .execute().data or []

        announcements = CommunicationService(self.supabase, self.cache).list_announcements(club_id)

        return DashboardStats(
            club_id=club_id,
            total_members=len(members),
            active_members=sum(1 for m in members if m.get("status") == "active"),
            total_teams=len(teams),
            active_teams=sum(1 for t in teams if t.get("status", "active") == "active"),
            total_facilities=len(facilities),
            todays_bookings=len(todays),
            upcoming_events=upcoming,
            monthly_income=round(income, 2),
            monthly_expenses=round(expenses, 2),
            monthly_balance=round(income - expenses, 2),
            pending_payments=sum(1 for f in finances if f.get("status") in ("pending", "overdue")),
            pending_membership_requests=len(pending_requests),
            recent_announcements=announcements[:RECENT_ANNOUNCEMENTS],
        )

    def get_stats(self, club_id: int) -> DashboardStats:
        """Dashboard figures, cached until a member, team, finance or booking change"""
        try:
            return self.cache.get_or_set(cache_key(club_id, "dashboard"), lambda: self._compute(club_id))
        except Exception as e:
            logger.error(f"Error building dashboard for club {club_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
