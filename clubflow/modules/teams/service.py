import logging
from datetime import date
from supabase import Client
from fastapi import HTTPException
from typing import List, Optional

from clubflow.core.cache import MemoryCache, get_cache
from clubflow.core.cache_invalidation import invalidate_entity_data, invalidate_cross_entity_data
from clubflow.core.timeutils import utcnow
from clubflow.database.supabase_client import first_row
from clubflow.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamMembershipCreate, TeamMembershipResponse,
    PlayerCreate, PlayerUpdate, PlayerResponse, PlayerAssignmentResponse,
)

logger = logging.getLogger(__name__)


def current_season(today: Optional[date] = None) -> str:
    """Season label such as "2025/26"; seasons start in July."""
    today = today or date.today()
    start = today.year if today.month >= 7 else today.year - 1
    return f"{start}/{(start + 1) % 100:02d}"


class TeamService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def list_teams(self, club_id: int, status: Optional[str] = None) -> List[TeamResponse]:
        try:
            query = self.supabase.table("teams").select("*").eq("club_id", club_id)
            if status:
                query = query.eq("status", status)
            result = query.order("name").execute()
            return [TeamResponse(**t) for t in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_team(self, club_id: int, team_id: int) -> TeamResponse:
        try:
            team = first_row(
                self.supabase.table("teams")
                .select("*")
                .eq("id", team_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not team:
                raise HTTPException(status_code=404, detail="Team not found")
            return TeamResponse(**team)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_team(self, club_id: int, team_data: TeamCreate) -> TeamResponse:
        try:
            row = team_data.model_dump(mode="json", exclude_none=True)
            row["club_id"] = club_id
            row.setdefault("season", current_season())
            result = self.supabase.table("teams").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team")
            invalidate_entity_data(self.cache, club_id, "teams")
            logger.info(f"Team {result.data[0]['id']} created in club {club_id}")
            return TeamResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_team(self, club_id: int, team_id: int, team_data: TeamUpdate) -> TeamResponse:
        try:
            update_data = team_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("teams")\
                .update(update_data)\
                .eq("id", team_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Team not found")
            invalidate_entity_data(self.cache, club_id, "teams")
            return TeamResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_team(self, club_id: int, team_id: int) -> bool:
        """Delete a team with its roster links and player assignments"""
        try:
            self.get_team(club_id, team_id)
            self.supabase.table("team_memberships").delete().eq("team_id", team_id).execute()
            self.supabase.table("player_team_assignments").delete().eq("team_id", team_id).execute()
            result = self.supabase.table("teams")\
                .delete()\
                .eq("id", team_id)\
                .eq("club_id", club_id)\
                .execute()
            invalidate_entity_data(self.cache, club_id, "teams")
            logger.info(f"Team {team_id} deleted from club {club_id}")
            return len(result.data or []) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_team_memberships(self, club_id: int, team_id: int) -> List[TeamMembershipResponse]:
        try:
            self.get_team(club_id, team_id)
            result = self.supabase.table("team_memberships")\
                .select("*")\
                .eq("team_id", team_id)\
                .eq("status", "active")\
                .execute()
            return [TeamMembershipResponse(**m) for m in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_club_team_memberships(self, club_id: int) -> List[TeamMembershipResponse]:
        """Active team memberships across all teams of the club"""
        try:
            teams = self.supabase.table("teams").select("id").eq("club_id", club_id).execute()
            team_ids = [t["id"] for t in teams.data or []]
            if not team_ids:
                return []
            result = self.supabase.table("team_memberships")\
                .select("*")\
                .in_("team_id", team_ids)\
                .eq("status", "active")\
                .execute()
            return [TeamMembershipResponse(**m) for m in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_team_membership(self, club_id: int, team_id: int, data: TeamMembershipCreate) -> TeamMembershipResponse:
        try:
            team = self.get_team(club_id, team_id)
            member = first_row(
                self.supabase.table("members")
                .select("id")
                .eq("id", data.member_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not member:
                raise HTTPException(status_code=404, detail="Member not found in this club")

            current = self.supabase.table("team_memberships")\
                .select("id, member_id")\
                .eq("team_id", team_id)\
                .eq("status", "active")\
                .execute()
            rows = current.data or []
            if any(r["member_id"] == data.member_id for r in rows):
                raise HTTPException(status_code=400, detail="Member is already on this team")
            if team.max_members is not None and len(rows) >= team.max_members:
                raise HTTPException(status_code=400, detail=f"Team is full ({team.max_members} members)")

            row = data.model_dump(exclude_none=True)
            row.update({"team_id": team_id, "status": "active"})
            result = self.supabase.table("team_memberships").insert(row).execute()
            invalidate_cross_entity_data(self.cache, club_id, ["teams", "members"])
            return TeamMembershipResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_team_membership(self, club_id: int, team_id: int, membership_id: int) -> bool:
        try:
            self.get_team(club_id, team_id)
            result = self.supabase.table("team_memberships")\
                .delete()\
                .eq("id", membership_id)\
                .eq("team_id", team_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Team membership not found")
            invalidate_cross_entity_data(self.cache, club_id, ["teams", "members"])
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class PlayerService:
    def __init__(self, supabase: Client, cache: Optional[MemoryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_cache()

    def _team_ids_by_player(self, player_ids: List[int]) -> dict:
        if not player_ids:
            return {}
        result = self.supabase.table("player_team_assignments")\
            .select("player_id, team_id")\
            .in_("player_id", player_ids)\
            .eq("is_active", True)\
            .execute()
        by_player: dict = {}
        for row in result.data or []:
            by_player.setdefault(row["player_id"], []).append(row["team_id"])
        return by_player

    def list_players(self, club_id: int, team_id: Optional[int] = None) -> List[PlayerResponse]:
        try:
            result = self.supabase.table("players")\
                .select("*")\
                .eq("club_id", club_id)\
                .order("last_name")\
                .execute()
            players = result.data or []
            teams = self._team_ids_by_player([p["id"] for p in players])
            response = [PlayerResponse(**p, team_ids=teams.get(p["id"], [])) for p in players]
            if team_id is not None:
                response = [p for p in response if team_id in p.team_ids]
            return response
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_player(self, club_id: int, player_id: int) -> PlayerResponse:
        try:
            player = first_row(
                self.supabase.table("players")
                .select("*")
                .eq("id", player_id)
                .eq("club_id", club_id)
                .limit(1)
                .execute()
            )
            if not player:
                raise HTTPException(status_code=404, detail="Player not found")
            teams = self._team_ids_by_player([player_id])
            return PlayerResponse(**player, team_ids=teams.get(player_id, []))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_player(self, club_id: int, player_data: PlayerCreate) -> PlayerResponse:
        try:
            row = player_data.model_dump(mode="json", exclude_none=True)
            row["club_id"] = club_id
            result = self.supabase.table("players").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create player")
            invalidate_entity_data(self.cache, club_id, "players")
            return PlayerResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_player(self, club_id: int, player_id: int, player_data: PlayerUpdate) -> PlayerResponse:
        try:
            update_data = player_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("players")\
                .update(update_data)\
                .eq("id", player_id)\
                .eq("club_id", club_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Player not found")
            invalidate_entity_data(self.cache, club_id, "players")
            return self.get_player(club_id, player_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_player(self, club_id: int, player_id: int) -> bool:
        try:
            self.get_player(club_id, player_id)
            self.supabase.table("player_team_assignments").delete().eq("player_id", player_id).execute()
            self.supabase.table("players").delete().eq("id", player_id).eq("club_id", club_id).execute()
            invalidate_cross_entity_data(self.cache, club_id, ["players", "teams"])
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def assign_to_team(self, club_id: int, player_id: int, team_id: int, season: Optional[str] = None) -> PlayerAssignmentResponse:
        try:
            self.get_player(club_id, player_id)
            TeamService(self.supabase, self.cache).get_team(club_id, team_id)
            existing = self.supabase.table("player_team_assignments")\
                .select("id")\
                .eq("player_id", player_id)\
                .eq("team_id", team_id)\
                .eq("is_active", True)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Player is already assigned to this team")
            result = self.supabase.table("player_team_assignments").insert({
                "player_id": player_id,
                "team_id": team_id,
                "season": season or current_season(),
                "is_active": True,
                "joined_at": utcnow().isoformat(),
            }).execute()
            invalidate_cross_entity_data(self.cache, club_id, ["players", "teams"])
            return PlayerAssignmentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unassign_from_team(self, club_id: int, player_id: int, team_id: int) -> bool:
        try:
            self.get_player(club_id, player_id)
            result = self.supabase.table("player_team_assignments")\
                .update({"is_active": False, "left_at": utcnow().isoformat()})\
                .eq("player_id", player_id)\
                .eq("team_id", team_id)\
                .eq("is_active", True)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Player is not assigned to this team")
            invalidate_cross_entity_data(self.cache, club_id, ["players", "teams"])
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
