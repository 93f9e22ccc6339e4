from fastapi import APIRouter, Depends
from clubflow.database.supabase_client import get_supabase
from clubflow.config.permissions_config import PERMISSION_MATRIX
from clubflow.modules.roles.schemas import RoleUpdate, RoleResponse, PermissionResponse
from clubflow.modules.roles.service import RoleService
from clubflow.modules.users.routes import require_super_user
from clubflow.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    user_data: Dict = Depends(get_current_user_id),
    service: RoleService = Depends(get_role_service)
):
    """Active club roles, most privileged first"""
    return service.list_roles()


@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(user_data: Dict = Depends(get_current_user_id)):
    """Every permission a role can carry"""
    return PERMISSION_MATRIX["permissions"]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    user_data: Dict = Depends(get_current_user_id),
    service: RoleService = Depends(get_role_service)
):
    return service.get_role(role_id)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    role_data: RoleUpdate,
    user_data: Dict = Depends(require_super_user),
    service: RoleService = Depends(get_role_service)
):
    """Change a role's permission set (super users only; roles are shared by all clubs)"""
    return service.update_role(role_id, role_data)
