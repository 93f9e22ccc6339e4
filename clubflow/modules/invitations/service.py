import logging
import secrets
from datetime import timedelta
from supabase import Client
from fastapi import HTTPException, Request
from typing import List, Optional, Tuple

from clubflow.config import settings
from clubflow.config.permissions_config import DEFAULT_ROLE
from clubflow.core.activity import log_activity
from clubflow.core.dependencies import get_role, get_role_by_name
from clubflow.core.timeutils import parse_timestamp, utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.invitations.schemas import (
    InvitationCreate, InvitationResponse, InvitationDetails,
)

logger = logging.getLogger(__name__)


class InvitationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _find_by_token(self, token: str) -> dict:
        invitation = first_row(
            self.supabase.table("email_invitations")
            .select("*")
            .eq("token", token)
            .limit(1)
            .execute()
        )
        if not invitation:
            raise HTTPException(status_code=404, detail="Invalid or expired invitation link")
        return invitation

    def _check_usable(self, invitation: dict) -> None:
        if invitation["status"] == "accepted":
            raise HTTPException(status_code=400, detail="This invitation has already been used")
        expires_at = parse_timestamp(invitation["expires_at"])
        if invitation["status"] == "expired" or (expires_at and expires_at < utcnow()):
            raise HTTPException(status_code=410, detail="This invitation has expired")

    def validate_invitation(self, token: str, email: str) -> dict:
        """Usable invitation issued for ``email``; raises 404, 410, 400 or 403 otherwise"""
        invitation = self._find_by_token(token)
        self._check_usable(invitation)
        if invitation["email"].lower() != (email or "").lower():
            raise HTTPException(status_code=403, detail="This invitation was issued for a different email address")
        return invitation

    def create_invitation(
        self,
        club_id: int,
        data: InvitationCreate,
        inviter_id: str,
        request: Optional[Request] = None,
    ) -> Tuple[InvitationResponse, str, str]:
        """Store a pending invitation. Returns (invitation, token, role name); the caller sends the email."""
        try:
            email = data.email
            existing_user = first_row(
                self.supabase.table("user_profiles")
                .select("id")
                .eq("email", email)
                .limit(1)
                .execute()
            )
            if existing_user:
                membership = first_row(
                    self.supabase.table("club_memberships")
                    .select("id")
                    .eq("user_id", existing_user["id"])
                    .eq("club_id", club_id)
                    .limit(1)
                    .execute()
                )
                if membership:
                    raise HTTPException(status_code=400, detail="User is already a member of this club")

            pending = self.supabase.table("email_invitations")\
                .select("id")\
                .eq("club_id", club_id)\
                .eq("email", email)\
                .eq("status", "pending")\
                .execute()
            if pending.data:
                raise HTTPException(status_code=400, detail="Invitation already sent to this email")

            if data.role_id is not None:
                role = get_role(data.role_id, self.supabase)
                if not role:
                    raise HTTPException(status_code=400, detail=f"Role with ID '{data.role_id}' not found")
            else:
                role = get_role_by_name(DEFAULT_ROLE, self.supabase)

            token = secrets.token_hex(32)
            expires_at = utcnow() + timedelta(days=settings.invitation_ttl_days)
            result = self.supabase.table("email_invitations").insert({
                "club_id": club_id,
                "invited_by": inviter_id,
                "email": email,
                "role_id": role["id"] if role else None,
                "personal_message": data.personal_message,
                "token": token,
                "status": "pending",
                "expires_at": expires_at.isoformat(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create invitation")
            invitation = result.data[0]
            role_name = role["name"] if role else DEFAULT_ROLE

            log_activity(
                self.supabase, club_id, inviter_id, "user_invited",
                f"{email} wurde als {role.get('display_name') if role else role_name} eingeladen",
                target_resource="invitation", target_resource_id=invitation["id"],
                metadata={"email": email, "role": role_name}, request=request,
            )
            logger.info(f"Invitation {invitation['id']} created for club {club_id} by {inviter_id}")
            return InvitationResponse(**invitation), token, role_name
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_invitations(self, club_id: int) -> List[InvitationResponse]:
        try:
            result = self.supabase.table("email_invitations")\
                .select("*")\
                .eq("club_id", club_id)\
                .order("created_at", desc=True)\
                .execute()
            return [InvitationResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_invitation_details(self, token: str) -> InvitationDetails:
        """Public details for the registration form"""
        try:
            invitation = self._find_by_token(token)
            self._check_usable(invitation)
            club = first_row(
                self.supabase.table("clubs").select("id, name").eq("id", invitation["club_id"]).limit(1).execute()
            )
            role = get_role(invitation.get("role_id"), self.supabase)
            user = first_row(
                self.supabase.table("user_profiles")
                .select("id, first_name, last_name")
                .eq("email", invitation["email"])
                .limit(1)
                .execute()
            )
            return InvitationDetails(
                email=invitation["email"],
                first_name=(user or {}).get("first_name") or "",
                last_name=(user or {}).get("last_name") or "",
                club_id=invitation["club_id"],
                club_name=club["name"] if club else "Unbekannter Verein",
                role_id=invitation.get("role_id"),
                role_name=(role or {}).get("display_name") or "Mitglied",
                expires_at=invitation["expires_at"],
                is_existing_user=user is not None,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def accept_invitation(self, token: str, user_id: str, email: str) -> dict:
        """Turn an invitation into an active membership with the invited role"""
        try:
            invitation = self.validate_invitation(token, email)

            club_id = invitation["club_id"]
            now = utcnow().isoformat()
            existing = first_row(
                self.supabase.table("club_memberships")
                .select("*")
                .eq("user_id", user_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if existing and existing["status"] == "active":
                raise HTTPException(status_code=400, detail="You are already an active member of this club")
            if existing:
                result = self.supabase.table("club_memberships")\
                    .update({"status": "active", "role_id": invitation.get("role_id"), "joined_at": now})\
                    .eq("id", existing["id"])\
                    .execute()
            else:
                result = self.supabase.table("club_memberships").insert({
                    "user_id": user_id,
                    "club_id": club_id,
                    "role_id": invitation.get("role_id"),
                    "status": "active",
                    "joined_at": now,
                }).execute()
            membership = result.data[0]

            self.supabase.table("email_invitations")\
                .update({"status": "accepted", "accepted_at": now})\
                .eq("id", invitation["id"])\
                .execute()
            log_activity(
                self.supabase, club_id, user_id, "invitation_accepted",
                f"{email} hat die Einladung angenommen",
                target_resource="membership", target_resource_id=membership["id"],
            )
            logger.info(f"Invitation {invitation['id']} accepted by {user_id}")
            return membership
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def expire_invitations(self) -> int:
        """Mark pending invitations past their expiry as expired. Returns the number updated."""
        result = self.supabase.table("email_invitations")\
            .update({"status": "expired"})\
            .eq("status", "pending")\
            .lt("expires_at", utcnow().isoformat())\
            .execute()
        count = len(result.data or [])
        if count:
            logger.info(f"Expired {count} invitation(s)")
        return count
