import logging
from supabase import Client
from clubflow.modules.users.schemas import (
    UserUpdate, UserResponse, MembershipStatus, MembershipStatusResponse
)
from typing import List, Optional
from fastapi import HTTPException
from clubflow.core.timeutils import utcnow

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_by_email(self, email: str) -> Optional[UserResponse]:
        """Get user profile by email"""
        try:
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .eq("email", email.lower())\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return UserResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Error looking up user by email: {e}")
            return None

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        try:
            update_data = user_data.model_dump(exclude_none=True)
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("user_profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def shares_club(self, current_user_id: str, target_user_id: str) -> bool:
        """True if target is self or both hold active memberships in a common club"""
        if current_user_id == target_user_id:
            return True
        mine = self.supabase.table("club_memberships")\
            .select("club_id")\
            .eq("user_id", current_user_id)\
            .eq("status", "active")\
            .execute()
        club_ids = [m["club_id"] for m in mine.data or []]
        if not club_ids:
            return False
        theirs = self.supabase.table("club_memberships")\
            .select("id")\
            .eq("user_id", target_user_id)\
            .in_("club_id", club_ids)\
            .limit(1)\
            .execute()
        return bool(theirs.data)

    def get_membership_status(self, user_id: str) -> MembershipStatusResponse:
        """All memberships of the user across clubs, for onboarding and pending screens"""
        try:
            memberships_result = self.supabase.table("club_memberships")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute()
            memberships = memberships_result.data or []

            club_names = {}
            role_names = {}
            club_ids = list({m["club_id"] for m in memberships})
            if club_ids:
                clubs = self.supabase.table("clubs").select("id, name").in_("id", club_ids).execute()
                club_names = {c["id"]: c["name"] for c in clubs.data or []}
            role_ids = list({m["role_id"] for m in memberships if m.get("role_id") is not None})
            if role_ids:
                roles = self.supabase.table("roles").select("id, name").in_("id", role_ids).execute()
                role_names = {r["id"]: r["name"] for r in roles.data or []}

            items = [
                MembershipStatus(
                    membership_id=m["id"],
                    club_id=m["club_id"],
                    club_name=club_names.get(m["club_id"]),
                    status=m["status"],
                    role=role_names.get(m.get("role_id")),
                )
                for m in memberships
            ]
            return MembershipStatusResponse(
                has_active_membership=any(m.status == "active" for m in items),
                has_pending_membership=any(m.status == "inactive" for m in items),
                memberships=items,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_super_admins(self) -> List[UserResponse]:
        try:
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .eq("is_super_admin", True)\
                .order("email")\
                .execute()
            return [UserResponse(**user) for user in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
