from fastapi import APIRouter, Depends, Query
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.communication.schemas import (
    AnnouncementCreate, AnnouncementUpdate, AnnouncementResponse, PinRequest,
    NotificationCreate, NotificationResponse, NotificationCount, ReadAllResponse,
    MessageCreate, MessageReply, MessageResponse, CommunicationStats,
)
from clubflow.modules.communication.service import CommunicationService
from clubflow.core.dependencies import require_club_member, require_club_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/clubs/{club_id}", tags=["communication"])


def get_communication_service(supabase: Client = Depends(get_supabase)) -> CommunicationService:
    return CommunicationService(supabase)


# Announcements
@router.get("/announcements", response_model=List[AnnouncementResponse])
async def list_announcements(
    club_id: int,
    include_unpublished: bool = False,
    user_data: Dict = Depends(require_club_permission("communication:read")),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.list_announcements(club_id, include_unpublished=include_unpublished)


@router.post("/announcements", response_model=AnnouncementResponse, status_code=201)
async def create_announcement(
    club_id: int,
    data: AnnouncementCreate,
    user_data: Dict = Depends(require_club_permission("communication:create")),
    service: CommunicationService = Depends(get_communication_service)
):
    """Create an announcement; published ones notify the club's members"""
    return service.create_announcement(club_id, user_data["id"], data)


@router.get("/announcements/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    club_id: int,
    announcement_id: int,
    user_data: Dict = Depends(require_club_permission("communication:read")),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.get_announcement(club_id, announcement_id)


@router.patch("/announcements/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    club_id: int,
    announcement_id: int,
    data: AnnouncementUpdate,
    user_data: Dict = Depends(require_club_permission("communication:update")),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.update_announcement(club_id, announcement_id, data)


@router.delete("/announcements/{announcement_id}", status_code=204)
async def delete_announcement(
    club_id: int,
    announcement_id: int,
    user_data: Dict = Depends(require_club_permission("communication:delete")),
    service: CommunicationService = Depends(get_communication_service)
):
    service.delete_announcement(club_id, announcement_id)
    return None


@router.post("/announcements/{announcement_id}/publish", response_model=AnnouncementResponse)
async def publish_announcement(
    club_id: int,
    announcement_id: int,
    user_data: Dict = Depends(require_club_permission("communication:publish")),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.publish_announcement(club_id, announcement_id, user_data["id"])


@router.post("/announcements/{announcement_id}/pin", response_model=AnnouncementResponse)
async def pin_announcement(
    club_id: int,
    announcement_id: int,
    data: Optional[PinRequest] = None,
    user_data: Dict = Depends(require_club_permission("communication:update")),
    service: CommunicationService = Depends(get_communication_service)
):
    is_pinned = data.is_pinned if data else True
    return service.pin_announcement(club_id, announcement_id, is_pinned)


# Notifications
@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    club_id: int,
    status: Optional[str] = None,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.list_notifications(club_id, user_data["id"], status=status)


@router.get("/notifications/count", response_model=NotificationCount)
async def count_notifications(
    club_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return NotificationCount(count=service.count_unread_notifications(club_id, user_data["id"]))


@router.post("/notifications", response_model=NotificationResponse, status_code=201)
async def create_notification(
    club_id: int,
    data: NotificationCreate,
    user_data: Dict = Depends(require_club_permission("communication:create")),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.create_notification(club_id, data)


@router.post("/notifications/read-all", response_model=ReadAllResponse)
async def mark_all_notifications_read(
    club_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return ReadAllResponse(updated=service.mark_all_notifications_read(club_id, user_data["id"]))


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    club_id: int,
    notification_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.mark_notification_read(club_id, user_data["id"], notification_id)


@router.delete("/notifications/{notification_id}", status_code=204)
async def delete_notification(
    club_id: int,
    notification_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    service.delete_notification(club_id, user_data["id"], notification_id)
    return None


# Messages
@router.get("/messages", response_model=List[MessageResponse])
async def list_messages(
    club_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.list_messages(club_id, user_data["id"])


@router.post("/messages", response_model=MessageResponse, status_code=201)
async def create_message(
    club_id: int,
    data: MessageCreate,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.create_message(club_id, user_data["id"], data)


@router.get("/messages/{message_id}", response_model=MessageResponse)
async def get_message(
    club_id: int,
    message_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.get_message(club_id, user_data["id"], message_id)


@router.post("/messages/{message_id}/reply", response_model=MessageResponse, status_code=201)
async def reply_to_message(
    club_id: int,
    message_id: int,
    data: MessageReply,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.reply_to_message(club_id, user_data["id"], message_id, data)


@router.post("/messages/{message_id}/read", status_code=204)
async def mark_message_read(
    club_id: int,
    message_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    service.mark_message_read(club_id, user_data["id"], message_id)
    return None


@router.delete("/messages/{message_id}", status_code=204)
async def delete_message(
    club_id: int,
    message_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    service.delete_message(club_id, user_data["id"], message_id)
    return None


# Stats and search
@router.get("/communication-stats", response_model=CommunicationStats)
async def get_communication_stats(
    club_id: int,
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.get_communication_stats(club_id, user_data["id"])


@router.get("/search/messages", response_model=List[MessageResponse])
async def search_messages(
    club_id: int,
    q: str = Query(..., min_length=1),
    user_data: Dict = Depends(require_club_member),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.search_messages(club_id, user_data["id"], q)


@router.get("/search/announcements", response_model=List[AnnouncementResponse])
async def search_announcements(
    club_id: int,
    q: str = Query(..., min_length=1),
    user_data: Dict = Depends(require_club_permission("communication:read")),
    service: CommunicationService = Depends(get_communication_service)
):
    return service.search_announcements(club_id, q)
