from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from clubflow.database.supabase_client import get_supabase, first_row
from clubflow.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from clubflow.modules.auth.service import AuthService
from clubflow.modules.invitations.service import InvitationService
from clubflow.core.dependencies import get_auth_service, get_current_user_id, is_super_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
):
    """Create an account. With an invitation token the new user joins the inviting club right away."""
    invitations = InvitationService(supabase)
    if register_data.invitation_token:
        invitations.validate_invitation(register_data.invitation_token, register_data.email)
    response = service.register(register_data)
    if register_data.invitation_token:
        membership = invitations.accept_invitation(
            register_data.invitation_token, response.user_id, response.email
        )
        response.club_id = membership["club_id"]
    return response


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.login(login_data)


@router.post("/logout")
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    service.logout(token)
    return {"message": "Logged out"}


@router.get("/me")
async def get_me(
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase),
):
    """Signed-in user with profile, super-user flag and the clubs available in the club switcher"""
    profile = supabase.table("user_profiles")\
        .select("*")\
        .eq("id", current_user["id"])\
        .limit(1)\
        .execute()
    return {
        **current_user,
        "profile": first_row(profile),
        "is_super_user": is_super_user(current_user, supabase),
        "clubs": [c.model_dump() for c in service.list_club_access(current_user["id"])],
    }
