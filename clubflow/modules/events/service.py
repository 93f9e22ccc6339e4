import logging
from supabase import Client
from fastapi import HTTPException
from typing import List, Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_cross_entity_data
from clubflow.core.timeutils import parse_timestamp, utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.events.schemas import EventCreate, EventUpdate, EventResponse

logger = logging.getLogger(__name__)


class EventService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def _invalidate(self, club_id: int) -> None:
        invalidate_cross_entity_data(self.cache, club_id, ["events", "bookings"])

    def list_events(self, club_id: int, public_only: bool = False) -> List[EventResponse]:
        try:
            query = self.supabase.table("bookings")\
                .select("*")\
                .eq("club_id", club_id)\
                .is_("facility_id", "null")
            if public_only:
                query = query.eq("is_public", True)
            result = query.order("start_time", desc=True).execute()
            return [EventResponse(**e) for e in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_row(self, club_id: int, event_id: int) -> dict:
        event = first_row(
            self.supabase.table("bookings")
            .select("*")
            .eq("id", event_id)
            .eq("club_id", club_id)
            .is_("facility_id", "null")
            .limit(1)
            .execute()
        )
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event

    def get_event(self, club_id: int, event_id: int) -> EventResponse:
        try:
            return EventResponse(**self._get_row(club_id, event_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_event(self, club_id: int, event_data: EventCreate) -> EventResponse:
        try:
            row = event_data.model_dump(mode="json", exclude_none=True)
            row.update({"club_id": club_id, "facility_id": None})
            row.setdefault("description", "")
            result = self.supabase.table("bookings").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create event")
            self._invalidate(club_id)
            logger.info(f"Event {result.data[0]['id']} created in club {club_id}")
            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_event(self, club_id: int, event_id: int, event_data: EventUpdate) -> EventResponse:
        try:
            current = self._get_row(club_id, event_id)
            update_data = event_data.model_dump(mode="json", exclude_unset=True)
            start = parse_timestamp(update_data.get("start_time", current["start_time"]))
            end = parse_timestamp(update_data.get("end_time", current["end_time"]))
            if end <= start:
                raise HTTPException(status_code=400, detail="end_time must be after start_time")
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("bookings")\
                .update(update_data)\
                .eq("id", event_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Event not found")
            self._invalidate(club_id)
            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_event(self, club_id: int, event_id: int) -> bool:
        try:
            self._get_row(club_id, event_id)
            self.supabase.table("bookings").delete().eq("id", event_id).eq("club_id", club_id).execute()
            self._invalidate(club_id)
            logger.info(f"Event {event_id} deleted from club {club_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def join_event(self, club_id: int, event_id: int, user_id: str) -> EventResponse:
        """Add the user to the event's participant list"""
        try:
            event = self._get_row(club_id, event_id)
            if event.get("status") == "cancelled":
                raise HTTPException(status_code=400, detail="Event is cancelled")
            participants = event.get("participants")
            if not isinstance(participants, list):
                participants = []
            if user_id in participants:
                raise HTTPException(status_code=400, detail="Already joined this event")
            result = self.supabase.table("bookings")\
                .update({"participants": participants + [user_id], "updated_at": utcnow().isoformat()})\
                .eq("id", event_id)\
                .eq("club_id", club_id)\
                .execute()
            self._invalidate(club_id)
            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_calendar(self, club_id: int) -> List[EventResponse]:
        """Bookings and events of the club, newest start first"""
        try:
            result = self.supabase.table("bookings")\
                .select("*")\
                .eq("club_id", club_id)\
                .order("start_time", desc=True)\
                .execute()
            return [EventResponse(**item) for item in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
