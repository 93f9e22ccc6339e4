import logging
from supabase import Client
from fastapi import HTTPException, Request
from typing import List, Optional

from clubflow.config.permissions_config import ADMIN_ROLES, DEFAULT_ROLE
from clubflow.core.activity import log_activity
from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_cross_entity_data
from clubflow.core.dependencies import get_role, get_role_by_name
from clubflow.core.timeutils import utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.clubs.schemas import (
    ClubCreate, ClubUpdate, ClubResponse, UserClubResponse, PublicClubResponse,
    MembershipResponse, JoinResponse, MembershipDecision, MembershipDecisionResponse,
    MembershipRoleChange, ClubUserResponse, UserMembershipResponse, PermissionFlags,
    ActivityLogResponse, CLUB_UPDATABLE_FIELDS,
)

logger = logging.getLogger(__name__)

MANAGED_RESOURCES = ("members", "teams", "facilities", "bookings", "events", "finances", "communication")


def compute_permission_flags(permissions: List[str], is_member: bool, role: Optional[str] = None) -> PermissionFlags:
    """Boolean permission object the client uses to enable or hide actions"""
    if not is_member:
        return PermissionFlags()
    granted = set(permissions)

    def any_action(action: str) -> bool:
        return any(f"{resource}:{action}" in granted for resource in MANAGED_RESOURCES)

    can_create = any_action("create")
    can_edit = any_action("update")
    can_delete = any_action("delete")
    return PermissionFlags(
        can_view=True,
        can_edit=can_edit,
        can_delete=can_delete,
        can_create=can_create,
        can_manage_teams="teams:update" in granted,
        can_manage_members="members:update" in granted,
        can_manage_finances="finances:update" in granted,
        can_manage_bookings="bookings:update" in granted,
        is_read_only=not (can_create or can_edit or can_delete),
        role=role,
        permissions=sorted(granted),
    )


def display_name(profile: Optional[dict]) -> str:
    if not profile:
        return "Unbekannt"
    name = " ".join(p for p in (profile.get("first_name"), profile.get("last_name")) if p)
    return name or profile.get("email") or "Unbekannt"


class ClubService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def get_profile(self, user_id: str) -> Optional[dict]:
        result = self.supabase.table("user_profiles")\
            .select("id, email, first_name, last_name")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return first_row(result)

    def _get_membership(self, club_id: int, membership_id: int) -> dict:
        membership = first_row(
            self.supabase.table("club_memberships")
            .select("*")
            .eq("id", membership_id)
            .eq("club_id", club_id)
            .limit(1)
            .execute()
        )
        if not membership:
            raise HTTPException(status_code=404, detail="Membership not found in this club")
        return membership

    def list_public_clubs(self) -> List[PublicClubResponse]:
        """Clubs shown on the join screen"""
        try:
            result = self.supabase.table("clubs")\
                .select("id, name, short_name, description, logo_url, primary_color")\
                .order("name")\
                .execute()
            return [PublicClubResponse(**club) for club in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_club(self, club_id: int) -> ClubResponse:
        try:
            club = first_row(
                self.supabase.table("clubs").select("*").eq("id", club_id).limit(1).execute()
            )
            if not club:
                raise HTTPException(status_code=404, detail="Club not found")
            return ClubResponse(**club)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_clubs(self, user_id: str) -> List[UserClubResponse]:
        """Clubs where the user holds an active membership, with their role name"""
        try:
            memberships = self.supabase.table("club_memberships")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("status", "active")\
                .execute()
            if not memberships.data:
                return []
            by_club = {m["club_id"]: m for m in memberships.data}
            clubs = self.supabase.table("clubs")\
                .select("*")\
                .in_("id", list(by_club))\
                .order("name")\
                .execute()
            role_cache: dict = {}
            result = []
            for club in clubs.data or []:
                membership = by_club[club["id"]]
                role = get_role(membership.get("role_id"), self.supabase, role_cache)
                result.append(UserClubResponse(
                    **club,
                    role=role["name"] if role else DEFAULT_ROLE,
                    status=membership["status"],
                ))
            missing = set(by_club) - {c["id"] for c in clubs.data or []}
            if missing:
                logger.warning(f"Memberships of {user_id} point at missing clubs: {sorted(missing)}")
            return result
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_club(self, club_data: ClubCreate, user_id: str) -> ClubResponse:
        """Create a club; the creator becomes its active club-administrator"""
        try:
            admin_role = get_role_by_name("club-administrator", self.supabase)
            if not admin_role:
                raise HTTPException(status_code=500, detail="Role 'club-administrator' is not seeded")

            result = self.supabase.table("clubs")\
                .insert(club_data.model_dump(exclude_none=True))\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create club")
            club = result.data[0]

            self.supabase.table("club_memberships").insert({
                "user_id": user_id,
                "club_id": club["id"],
                "role_id": admin_role["id"],
                "status": "active",
                "joined_at": utcnow().isoformat(),
            }).execute()
            logger.info(f"Club {club['id']} created by {user_id}")
            return ClubResponse(**club)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_club(self, club_id: int, club_data: ClubUpdate, user_id: str, request: Optional[Request] = None) -> ClubResponse:
        """Update club settings; only allowed fields are written, empty strings become null"""
        try:
            submitted = club_data.model_dump(exclude_unset=True)
            update_data = {k: v for k, v in submitted.items() if k in CLUB_UPDATABLE_FIELDS}
            if not update_data:
                return self.get_club(club_id)
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("clubs")\
                .update(update_data)\
                .eq("id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Club not found")

            fields = sorted(k for k in update_data if k != "updated_at")
            log_activity(
                self.supabase, club_id, user_id, "club_updated",
                f"{display_name(self.get_profile(user_id))} hat die Vereinseinstellungen aktualisiert",
                target_resource="club", target_resource_id=club_id,
                metadata={"updated_fields": fields}, request=request,
            )
            logger.info(f"Club {club_id} updated by {user_id}: {fields}")
            return ClubResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def request_join(self, club_id: int, user_id: str, request: Optional[Request] = None) -> JoinResponse:
        """Create an inactive membership awaiting admin approval"""
        try:
            club = self.get_club(club_id)
            existing = first_row(
                self.supabase.table("club_memberships")
                .select("*")
                .eq("user_id", user_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if existing:
                if existing["status"] == "active":
                    raise HTTPException(status_code=400, detail="You are already an active member of this club")
                if existing["status"] == "inactive":
                    raise HTTPException(status_code=400, detail="Your membership request is pending admin approval")
                raise HTTPException(status_code=400, detail="Your membership in this club is suspended")

            member_role = get_role_by_name(DEFAULT_ROLE, self.supabase)
            result = self.supabase.table("club_memberships").insert({
                "user_id": user_id,
                "club_id": club_id,
                "role_id": member_role["id"] if member_role else None,
                "status": "inactive",
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create membership request")
            membership = result.data[0]
            invalidate_cross_entity_data(self.cache, club_id, ["memberships", "dashboard"])

            log_activity(
                self.supabase, club_id, user_id, "membership_requested",
                f"{display_name(self.get_profile(user_id))} hat eine Mitgliedschaft im Verein {club.name} beantragt",
                target_resource="membership", target_resource_id=membership["id"],
                metadata={"role": DEFAULT_ROLE, "status": "inactive"}, request=request,
            )
            logger.info(f"Membership request {membership['id']} created for {user_id} in club {club_id}")
            return JoinResponse(
                message="Membership request submitted successfully - awaiting admin approval",
                membership_id=membership["id"],
                status="inactive",
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _club_users(self, club_id: int, status: Optional[str] = None) -> List[ClubUserResponse]:
        query = self.supabase.table("club_memberships").select("*").eq("club_id", club_id)
        if status:
            query = query.eq("status", status)
        memberships = query.order("created_at", desc=True).execute().data or []
        if not memberships:
            return []
        user_ids = list({m["user_id"] for m in memberships})
        profiles = self.supabase.table("user_profiles")\
            .select("id, email, first_name, last_name")\
            .in_("id", user_ids)\
            .execute()
        by_id = {p["id"]: p for p in profiles.data or []}
        role_cache: dict = {}
        users = []
        for m in memberships:
            profile = by_id.get(m["user_id"], {})
            role = get_role(m.get("role_id"), self.supabase, role_cache)
            users.append(ClubUserResponse(
                membership_id=m["id"],
                user_id=m["user_id"],
                email=profile.get("email"),
                first_name=profile.get("first_name"),
                last_name=profile.get("last_name"),
                role_id=m.get("role_id"),
                role=role["name"] if role else None,
                status=m["status"],
                joined_at=m.get("joined_at"),
            ))
        return users

    def list_pending_memberships(self, club_id: int) -> List[ClubUserResponse]:
        try:
            return self._club_users(club_id, status="inactive")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_club_users(self, club_id: int) -> List[ClubUserResponse]:
        try:
            return self._club_users(club_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def decide_membership(
        self,
        club_id: int,
        membership_id: int,
        decision: MembershipDecision,
        admin_id: str,
        request: Optional[Request] = None,
    ) -> MembershipDecisionResponse:
        """Approve (activate, optionally with a new role) or reject (delete) a join request"""
        try:
            membership = self._get_membership(club_id, membership_id)
            if membership["status"] != "inactive":
                raise HTTPException(status_code=400, detail="Only inactive memberships can be approved or rejected")

            admin_name = display_name(self.get_profile(admin_id))
            target_name = display_name(self.get_profile(membership["user_id"]))

            if decision.action == "reject":
                log_activity(
                    self.supabase, club_id, admin_id, "membership_rejected",
                    f"{admin_name} hat die Mitgliedschaftsanfrage von {target_name} abgelehnt",
                    target_user_id=membership["user_id"], target_resource="membership",
                    target_resource_id=membership_id,
                    metadata={"previous_status": "inactive", "action": "rejected"}, request=request,
                )
                self.supabase.table("club_memberships").delete().eq("id", membership_id).execute()
                invalidate_cross_entity_data(self.cache, club_id, ["memberships", "dashboard"])
                logger.info(f"Membership {membership_id} in club {club_id} rejected by {admin_id}")
                return MembershipDecisionResponse(
                    message="Membership request rejected and removed", action="rejected"
                )

            update_data = {"status": "active", "joined_at": utcnow().isoformat()}
            if decision.role_id is not None:
                if not get_role(decision.role_id, self.supabase):
                    raise HTTPException(status_code=400, detail=f"Role with ID '{decision.role_id}' not found")
                update_data["role_id"] = decision.role_id
            result = self.supabase.table("club_memberships")\
                .update(update_data)\
                .eq("id", membership_id)\
                .execute()
            updated = result.data[0]

            log_activity(
                self.supabase, club_id, admin_id, "membership_approved",
                f"{admin_name} hat die Mitgliedschaft von {target_name} genehmigt",
                target_user_id=membership["user_id"], target_resource="membership",
                target_resource_id=membership_id,
                metadata={"previous_status": "inactive", "new_status": "active", "role_id": updated.get("role_id")},
                request=request,
            )
            invalidate_cross_entity_data(self.cache, club_id, ["memberships", "dashboard"])
            logger.info(f"Membership {membership_id} in club {club_id} approved by {admin_id}")
            return MembershipDecisionResponse(
                message="Membership request approved",
                action="approved",
                membership=MembershipResponse(**updated),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def change_role(
        self,
        club_id: int,
        membership_id: int,
        change: MembershipRoleChange,
        admin_id: str,
        request: Optional[Request] = None,
    ) -> MembershipResponse:
        try:
            membership = self._get_membership(club_id, membership_id)
            if change.role_id is not None:
                role = get_role(change.role_id, self.supabase)
                if not role:
                    raise HTTPException(status_code=400, detail=f"Role with ID '{change.role_id}' not found")
            else:
                role = get_role_by_name(change.role, self.supabase)
                if not role:
                    raise HTTPException(status_code=400, detail=f"Role '{change.role}' not found")

            if membership["user_id"] == admin_id and role["name"] not in ADMIN_ROLES:
                raise HTTPException(status_code=400, detail="You cannot remove your own administrator role")

            result = self.supabase.table("club_memberships")\
                .update({"role_id": role["id"], "updated_at": utcnow().isoformat()})\
                .eq("id", membership_id)\
                .execute()
            log_activity(
                self.supabase, club_id, admin_id, "role_changed",
                f"{display_name(self.get_profile(admin_id))} hat die Rolle von "
                f"{display_name(self.get_profile(membership['user_id']))} zu {role.get('display_name') or role['name']} geändert",
                target_user_id=membership["user_id"], target_resource="membership",
                target_resource_id=membership_id,
                metadata={"old_role_id": membership.get("role_id"), "new_role_id": role["id"], "new_role_name": role["name"]},
                request=request,
            )
            invalidate_cross_entity_data(self.cache, club_id, ["memberships", "dashboard"])
            logger.info(f"Membership {membership_id} in club {club_id} changed to role {role['name']}")
            return MembershipResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def change_status(
        self,
        club_id: int,
        membership_id: int,
        new_status: str,
        admin_id: str,
        request: Optional[Request] = None,
    ) -> MembershipResponse:
        try:
            membership = self._get_membership(club_id, membership_id)
            if membership["user_id"] == admin_id and new_status != "active":
                raise HTTPException(status_code=400, detail="You cannot deactivate your own membership")
            result = self.supabase.table("club_memberships")\
                .update({"status": new_status, "updated_at": utcnow().isoformat()})\
                .eq("id", membership_id)\
                .execute()
            log_activity(
                self.supabase, club_id, admin_id, "membership_status_changed",
                f"{display_name(self.get_profile(admin_id))} hat den Status der Mitgliedschaft von "
                f"{display_name(self.get_profile(membership['user_id']))} auf {new_status} gesetzt",
                target_user_id=membership["user_id"], target_resource="membership",
                target_resource_id=membership_id,
                metadata={"old_status": membership["status"], "new_status": new_status},
                request=request,
            )
            invalidate_cross_entity_data(self.cache, club_id, ["memberships", "dashboard"])
            return MembershipResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_membership(self, club_id: int, membership_id: int, admin_id: str, request: Optional[Request] = None) -> bool:
        try:
            membership = self._get_membership(club_id, membership_id)
            if membership["user_id"] == admin_id:
                raise HTTPException(status_code=400, detail="You cannot remove yourself from the club")
            self.supabase.table("club_memberships").delete().eq("id", membership_id).execute()
            log_activity(
                self.supabase, club_id, admin_id, "membership_removed",
                f"{display_name(self.get_profile(admin_id))} hat "
                f"{display_name(self.get_profile(membership['user_id']))} aus dem Verein entfernt",
                target_user_id=membership["user_id"], target_resource="membership",
                target_resource_id=membership_id, request=request,
            )
            invalidate_cross_entity_data(self.cache, club_id, ["memberships", "dashboard"])
            logger.info(f"Membership {membership_id} removed from club {club_id} by {admin_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_membership(self, club_id: int, user_id: str) -> UserMembershipResponse:
        """Membership of the caller in the club, in any status"""
        try:
            membership = first_row(
                self.supabase.table("club_memberships")
                .select("*")
                .eq("user_id", user_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not membership:
                return UserMembershipResponse(is_member=False)
            role = get_role(membership.get("role_id"), self.supabase)
            return UserMembershipResponse(
                is_member=membership["status"] == "active",
                status=membership["status"],
                role_id=membership.get("role_id"),
                role_name=role["name"] if role else None,
                joined_at=membership.get("joined_at"),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_activity_logs(self, club_id: int, limit: int = 50, offset: int = 0) -> List[ActivityLogResponse]:
        try:
            result = self.supabase.table("activity_logs")\
                .select("*")\
                .eq("club_id", club_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ActivityLogResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
