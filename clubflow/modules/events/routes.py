from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.events.schemas import EventCreate, EventUpdate, EventResponse
from clubflow.modules.events.service import EventService
from clubflow.core.dependencies import require_club_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/clubs/{club_id}", tags=["events"])


def get_event_service(supabase: Client = Depends(get_supabase)) -> EventService:
    return EventService(supabase)


@router.get("/events", response_model=List[EventResponse])
async def list_events(
    club_id: int,
    public_only: bool = False,
    user_data: Dict = Depends(require_club_permission("events:read")),
    service: EventService = Depends(get_event_service)
):
    return service.list_events(club_id, public_only=public_only)


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(
    club_id: int,
    event_data: EventCreate,
    user_data: Dict = Depends(require_club_permission("events:create")),
    service: EventService = Depends(get_event_service)
):
    return service.create_event(club_id, event_data)


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(
    club_id: int,
    event_id: int,
    user_data: Dict = Depends(require_club_permission("events:read")),
    service: EventService = Depends(get_event_service)
):
    return service.get_event(club_id, event_id)


@router.patch("/events/{event_id}", response_model=EventResponse)
async def update_event(
    club_id: int,
    event_id: int,
    event_data: EventUpdate,
    user_data: Dict = Depends(require_club_permission("events:update")),
    service: EventService = Depends(get_event_service)
):
    return service.update_event(club_id, event_id, event_data)


@router.delete("/events/{event_id}", status_code=204)
async def delete_event(
    club_id: int,
    event_id: int,
    user_data: Dict = Depends(require_club_permission("events:delete")),
    service: EventService = Depends(get_event_service)
):
    service.delete_event(club_id, event_id)
    return None


@router.post("/events/{event_id}/join", response_model=EventResponse)
async def join_event(
    club_id: int,
    event_id: int,
    user_data: Dict = Depends(require_club_permission("events:join")),
    service: EventService = Depends(get_event_service)
):
    return service.join_event(club_id, event_id, user_data["id"])


@router.get("/calendar", response_model=List[EventResponse])
async def get_calendar(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("events:read")),
    service: EventService = Depends(get_event_service)
):
    """All bookings and events of the club, newest first"""
    return service.list_calendar(club_id)
