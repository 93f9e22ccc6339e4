import logging
from supabase import Client
from clubflow.modules.roles.schemas import RoleUpdate, RoleResponse
from typing import List
from fastapi import HTTPException
from clubflow.core.timeutils import utcnow

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_roles(self, include_inactive: bool = False) -> List[RoleResponse]:
        """List club roles ordered by sort_order"""
        try:
            query = self.supabase.table("roles").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("sort_order").execute()
            return [RoleResponse(**role) for role in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_role(self, role_id: int) -> RoleResponse:
        try:
            result = self.supabase.table("roles")\
                .select("*")\
                .eq("id", role_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Role not found")
            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_role(self, role_id: int, role_data: RoleUpdate) -> RoleResponse:
        try:
            update_data = role_data.model_dump(exclude_none=True)
            if not update_data:
                return self.get_role(role_id)
            update_data["updated_at"] = utcnow().isoformat()
            result = self.supabase.table("roles")\
                .update(update_data)\
                .eq("id", role_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Role not found")
            logger.info(f"Updated role {role_id}: {sorted(update_data)}")
            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
