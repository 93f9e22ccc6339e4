import logging
from supabase import Client
from fastapi import HTTPException
from typing import List, Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_entity_data, invalidate_cross_entity_data
from clubflow.core.timeutils import utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.members.schemas import MemberCreate, MemberUpdate, MemberResponse
from clubflow.modules.subscriptions.manager import load_subscription_manager

logger = logging.getLogger(__name__)


class MemberService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def _ensure_member_capacity(self, club_id: int) -> None:
        manager = load_subscription_manager(club_id, self.supabase)
        if not manager.can_add_members():
            raise HTTPException(
                status_code=403,
                detail={
                    "error": "Member limit of your plan reached",
                    "current_plan": manager.current_plan(),
                    "member_limit": manager.member_limit(),
                    "upgrade_url": "/subscription",
                },
            )

    def list_members(
        self,
        club_id: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 500,
        offset: int = 0,
    ) -> List[MemberResponse]:
        try:
            query = self.supabase.table("members").select("*").eq("club_id", club_id)
            if status:
                query = query.eq("status", status)
            result = query.order("last_name").limit(limit).offset(offset).execute()
            members = [MemberResponse(**m) for m in result.data or []]
            if search:
                needle = search.lower()
                members = [
                    m for m in members
                    if needle in f"{m.first_name} {m.last_name} {m.email or ''} {m.membership_number or ''}".lower()
                ]
            return members
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_member(self, club_id: int, member_id: int) -> MemberResponse:
        try:
            member = first_row(
                self.supabase.table("members")
                .select("*")
                .eq("id", member_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not member:
                raise HTTPException(status_code=404, detail="Member not found")
            return MemberResponse(**member)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_member(self, club_id: int, member_data: MemberCreate) -> MemberResponse:
        """Add a member to the roster; active members are limited by the club's plan"""
        try:
            if member_data.status == "active":
                self._ensure_member_capacity(club_id)
            row = member_data.model_dump(mode="json", exclude_none=True)
            row["club_id"] = club_id
            result = self.supabase.table("members").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create member")
            invalidate_entity_data(self.cache, club_id, "members")
            logger.info(f"Member {result.data[0]['id']} created in club {club_id}")
            return MemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_member(self, club_id: int, member_id: int, member_data: MemberUpdate) -> MemberResponse:
        try:
            current = self.get_member(club_id, member_id)
            update_data = member_data.model_dump(mode="json", exclude_unset=True)
            if update_data.get("status") == "active" and current.status != "active":
                self._ensure_member_capacity(club_id)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("members")\
                .update(update_data)\
                .eq("id", member_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Member not found")
            invalidate_entity_data(self.cache, club_id, "members")
            return MemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_member(self, club_id: int, member_id: int) -> bool:
        """Delete a member together with their team memberships"""
        try:
            self.get_member(club_id, member_id)
            self.supabase.table("team_memberships")\
                .delete()\
                .eq("member_id", member_id)\
                .execute()
            result = self.supabase.table("members")\
                .delete()\
                .eq("id", member_id)\
                .eq("club_id", club_id)\
                .execute()
            invalidate_cross_entity_data(self.cache, club_id, ["members", "teams"])
            logger.info(f"Member {member_id} deleted from club {club_id}")
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
