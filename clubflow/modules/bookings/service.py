import logging
from datetime import datetime
from supabase import Client
from fastapi import HTTPException
from typing import Any, Dict, List, Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_cross_entity_data
from clubflow.core.timeutils import parse_timestamp, utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.bookings.availability import evaluate_availability, expand_occurrences
from clubflow.modules.bookings.schemas import (
    BookingCreate, BookingUpdate, BookingResponse, BookingCreateResponse, AvailabilityResponse,
)

logger = logging.getLogger(__name__)

RECURRENCE_FIELDS = ("recurring", "recurring_pattern", "recurring_until")


class BookingService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def _invalidate(self, club_id: int) -> None:
        invalidate_cross_entity_data(self.cache, club_id, ["bookings", "events"])

    def _max_concurrent(self, club_id: int, facility_id: int) -> int:
        facility = first_row(
            self.supabase.table("facilities")
            .select("id, max_concurrent_bookings")
            .eq("id", facility_id)
            .eq("club_id", club_id)
            .limit(1)
            .execute()
        )
        if not facility:
            raise HTTPException(status_code=404, detail="Facility not found")
        return facility.get("max_concurrent_bookings") or 1

    def _availability(
        self,
        club_id: int,
        facility_id: Optional[int],
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        if facility_id is None:
            return {"available": True, "max_concurrent": None, "current_bookings": 0, "conflicting_bookings": []}
        max_concurrent = self._max_concurrent(club_id, facility_id)
        result = self.supabase.table("bookings")\
            .select("*")\
            .eq("facility_id", facility_id)\
            .neq("status", "cancelled")\
            .lt("start_time", end.isoformat())\
            .gt("end_time", start.isoformat())\
            .execute()
        availability = evaluate_availability(result.data or [], start, end, max_concurrent, exclude_booking_id)
        logger.debug(
            f"Availability facility={facility_id} {start.isoformat()}-{end.isoformat()} "
            f"exclude={exclude_booking_id}: {availability['current_bookings']}/{max_concurrent}"
        )
        return availability

    def check_availability(
        self,
        club_id: int,
        facility_id: Optional[int],
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> AvailabilityResponse:
        try:
            availability = self._availability(
                club_id, facility_id, parse_timestamp(start_time), parse_timestamp(end_time), exclude_booking_id
            )
            return AvailabilityResponse(**availability)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_bookings(
        self,
        club_id: int,
        facility_id: Optional[int] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[BookingResponse]:
        try:
            query = self.supabase.table("bookings").select("*").eq("club_id", club_id)
            if facility_id is not None:
                query = query.eq("facility_id", facility_id)
            if status:
                query = query.eq("status", status)
            if start:
                query = query.gte("end_time", parse_timestamp(start).isoformat())
            if end:
                query = query.lte("start_time", parse_timestamp(end).isoformat())
            result = query.order("start_time").execute()
            return [BookingResponse(**b) for b in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_row(self, club_id: int, booking_id: int) -> dict:
        booking = first_row(
            self.supabase.table("bookings")
            .select("*")
            .eq("id", booking_id)
            .eq("club_id", club_id)
            .limit(1)
            .execute()
        )
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def get_booking(self, club_id: int, booking_id: int) -> BookingResponse:
        try:
            return BookingResponse(**self._get_row(club_id, booking_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _insert(self, row: dict) -> dict:
        result = self.supabase.table("bookings").insert(row).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create booking")
        return result.data[0]

    def create_booking(self, club_id: int, booking_data: BookingCreate) -> BookingCreateResponse:
        """
        Create a booking, or a series of bookings when it recurs.

        A single booking on a fully booked facility is rejected with 400.
        For a series, occurrences that collide are skipped and only the
        first stored occurrence keeps the recurrence fields.
        """
        try:
            start = parse_timestamp(booking_data.start_time)
            end = parse_timestamp(booking_data.end_time)
            base = booking_data.model_dump(mode="json", exclude_none=True)
            base["club_id"] = club_id

            if not booking_data.recurring:
                availability = self._availability(club_id, booking_data.facility_id, start, end)
                if not availability["available"]:
                    raise HTTPException(
                        status_code=400,
                        detail={
                            "message": "Facility is fully booked for the requested time",
                            "max_concurrent": availability["max_concurrent"],
                            "current_bookings": availability["current_bookings"],
                            "conflicting_bookings": availability["conflicting_bookings"],
                        },
                    )
                booking = BookingResponse(**self._insert(base))
                self._invalidate(club_id)
                logger.info(f"Booking {booking.id} created in club {club_id}")
                return BookingCreateResponse(
                    message="Booking created",
                    bookings=[booking],
                    count=1,
                    main_booking=booking,
                )

            occurrences = expand_occurrences(
                start, end, booking_data.recurring_pattern, booking_data.recurring_until
            )
            created: List[BookingResponse] = []
            skipped = 0
            for occ_start, occ_end in occurrences:
                availability = self._availability(club_id, booking_data.facility_id, occ_start, occ_end)
                if not availability["available"]:
                    skipped += 1
                    continue
                row = dict(base, start_time=occ_start.isoformat(), end_time=occ_end.isoformat())
                if created:
                    for field in RECURRENCE_FIELDS:
                        row.pop(field, None)
                    row["recurring"] = False
                created.append(BookingResponse(**self._insert(row)))

            if not created:
                raise HTTPException(
                    status_code=400,
                    detail={
                        "message": "No occurrence of the recurring booking is available",
                        "conflicting_bookings": [],
                    },
                )
            self._invalidate(club_id)
            logger.info(
                f"Recurring booking series created in club {club_id}: "
                f"{len(created)} created, {skipped} skipped"
            )
            return BookingCreateResponse(
                message=f"{len(created)} recurring bookings created",
                bookings=created,
                count=len(created),
                skipped=skipped,
                main_booking=created[0],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_booking(self, club_id: int, booking_id: int, booking_data: BookingUpdate) -> BookingResponse:
        """Update a booking; moving it or reviving a cancelled one re-checks availability"""
        try:
            current = self._get_row(club_id, booking_id)
            update_data = booking_data.model_dump(mode="json", exclude_unset=True)

            new_status = update_data.get("status") or current.get("status")
            moved = bool({"facility_id", "start_time", "end_time"} & update_data.keys())
            revived = current.get("status") == "cancelled" and new_status != "cancelled"
            if moved or revived:
                facility_id = update_data.get("facility_id", current.get("facility_id"))
                start = parse_timestamp(update_data.get("start_time", current["start_time"]))
                end = parse_timestamp(update_data.get("end_time", current["end_time"]))
                if end <= start:
                    raise HTTPException(status_code=400, detail="end_time must be after start_time")
                availability = self._availability(club_id, facility_id, start, end, exclude_booking_id=booking_id)
                if not availability["available"]:
                    raise HTTPException(
                        status_code=400,
                        detail={
                            "message": "Facility is fully booked for the requested time",
                            "max_concurrent": availability["max_concurrent"],
                            "current_bookings": availability["current_bookings"],
                            "conflicting_bookings": availability["conflicting_bookings"],
                        },
                    )

            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("bookings")\
                .update(update_data)\
                .eq("id", booking_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Booking not found")
            self._invalidate(club_id)
            return BookingResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_booking(self, club_id: int, booking_id: int) -> bool:
        try:
            self._get_row(club_id, booking_id)
            self.supabase.table("bookings")\
                .delete()\
                .eq("id", booking_id)\
                .eq("club_id", club_id)\
                .execute()
            self._invalidate(club_id)
            logger.info(f"Booking {booking_id} deleted from club {club_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
