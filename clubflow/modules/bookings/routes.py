from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.bookings.schemas import (
    BookingCreate, BookingUpdate, BookingResponse, BookingCreateResponse,
    AvailabilityRequest, AvailabilityResponse,
)
from clubflow.modules.bookings.service import BookingService
from clubflow.core.dependencies import require_club_permission, require_feature
from supabase import Client
from typing import List, Optional, Dict
from datetime import datetime

router = APIRouter(prefix="/clubs/{club_id}/bookings", tags=["bookings"])


def get_booking_service(supabase: Client = Depends(get_supabase)) -> BookingService:
    return BookingService(supabase)


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    club_id: int,
    facility_id: Optional[int] = None,
    status: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    user_data: Dict = Depends(require_club_permission("bookings:read")),
    service: BookingService = Depends(get_booking_service)
):
    return service.list_bookings(club_id, facility_id=facility_id, status=status, start=start, end=end)


@router.post(
    "",
    response_model=BookingCreateResponse,
    status_code=201,
    dependencies=[Depends(require_feature("facilityBooking"))],
)
async def create_booking(
    club_id: int,
    booking_data: BookingCreate,
    user_data: Dict = Depends(require_club_permission("bookings:create")),
    service: BookingService = Depends(get_booking_service)
):
    """Create a booking or a recurring series (400 when the facility is fully booked)"""
    return service.create_booking(club_id, booking_data)


@router.post("/check-availability", response_model=AvailabilityResponse)
async def check_availability(
    club_id: int,
    data: AvailabilityRequest,
    user_data: Dict = Depends(require_club_permission("bookings:read")),
    service: BookingService = Depends(get_booking_service)
):
    return service.check_availability(
        club_id, data.facility_id, data.start_time, data.end_time, data.exclude_booking_id
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    club_id: int,
    booking_id: int,
    user_data: Dict = Depends(require_club_permission("bookings:read")),
    service: BookingService = Depends(get_booking_service)
):
    return service.get_booking(club_id, booking_id)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    club_id: int,
    booking_id: int,
    booking_data: BookingUpdate,
    user_data: Dict = Depends(require_club_permission("bookings:update")),
    service: BookingService = Depends(get_booking_service)
):
    return service.update_booking(club_id, booking_id, booking_data)


@router.delete("/{booking_id}", status_code=204)
async def delete_booking(
    club_id: int,
    booking_id: int,
    user_data: Dict = Depends(require_club_permission("bookings:delete")),
    service: BookingService = Depends(get_booking_service)
):
    service.delete_booking(club_id, booking_id)
    return None
