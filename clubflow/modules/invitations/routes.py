from fastapi import APIRouter, BackgroundTasks, Depends, Request
from clubflow.database.supabase_client import get_supabase
from clubflow.modules.invitations.schemas import (
    InvitationCreate, InvitationResponse, InvitationSentResponse,
    InvitationDetails, InvitationAcceptResponse,
)
from clubflow.modules.invitations.service import InvitationService
from clubflow.modules.clubs.service import ClubService, display_name
from clubflow.core.dependencies import get_current_user_id, require_club_permission
from clubflow.core.email import send_invitation_email
from clubflow.core.timeutils import parse_timestamp
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["invitations"])


def get_invitation_service(supabase: Client = Depends(get_supabase)) -> InvitationService:
    return InvitationService(supabase)


@router.post("/clubs/{club_id}/invitations", response_model=InvitationSentResponse, status_code=201)
async def send_invitation(
    club_id: int,
    data: InvitationCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(require_club_permission("memberships:invite")),
    service: InvitationService = Depends(get_invitation_service),
    supabase: Client = Depends(get_supabase)
):
    """Invite someone by email; the email goes out after the response"""
    invitation, token, role_name = service.create_invitation(club_id, data, user_data["id"], request)
    clubs = ClubService(supabase)
    club = clubs.get_club(club_id)
    background_tasks.add_task(
        send_invitation_email,
        invitation.email,
        club.name,
        display_name(clubs.get_profile(user_data["id"])),
        role_name,
        token,
        parse_timestamp(invitation.expires_at),
        data.personal_message,
    )
    return InvitationSentResponse(
        message="Einladung erfolgreich versendet",
        invitation=invitation,
        email_queued=True,
    )


@router.get("/clubs/{club_id}/invitations", response_model=List[InvitationResponse])
async def list_invitations(
    club_id: int,
    user_data: Dict = Depends(require_club_permission("memberships:invite")),
    service: InvitationService = Depends(get_invitation_service)
):
    return service.list_invitations(club_id)


@router.get("/invitations/{token}", response_model=InvitationDetails)
async def get_invitation(
    token: str,
    service: InvitationService = Depends(get_invitation_service)
):
    """Invitation details for the registration form (no authentication)"""
    return service.get_invitation_details(token)


@router.post("/invitations/{token}/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    token: str,
    user_data: Dict = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
):
    """Accept an invitation as an already registered user"""
    membership = service.accept_invitation(token, user_data["id"], user_data.get("email") or "")
    return InvitationAcceptResponse(
        message="Invitation accepted",
        club_id=membership["club_id"],
        membership_id=membership["id"],
    )
