"""
Request dependencies: bearer auth, club membership and permission checks, plan feature gates
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from clubflow.config.permissions_config import ADMIN_ROLES, get_role_permissions
from clubflow.database.supabase_client import get_supabase, first_row
from clubflow.modules.auth.service import AuthService
from clubflow.modules.subscriptions.manager import (
    SubscriptionManager, load_subscription_manager, log_feature_denial,
)
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (memberships, roles, permission names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Supabase user behind the bearer token: id, email and both metadata dicts"""
    return auth_service.get_current_user(credentials.credentials)


def is_super_user(user_data: dict, supabase: Client) -> bool:
    # app_metadata is only writable with the service role key
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def get_role(role_id: Optional[int], supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[dict]:
    """Return a roles row by id. Uses request-scoped cache when provided."""
    if role_id is None:
        return None
    key = f"role:{role_id}"
    if cache is not None and key in cache:
        return cache[key]
    result = supabase.table("roles")\
        .select("*")\
        .eq("id", role_id)\
        .limit(1)\
        .execute()
    role = first_row(result)
    if cache is not None:
        cache[key] = role
    return role


def get_role_by_name(name: str, supabase: Client) -> Optional[dict]:
    result = supabase.table("roles")\
        .select("*")\
        .eq("name", name)\
        .limit(1)\
        .execute()
    return first_row(result)


def get_active_membership(user_id: str, club_id: int, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[dict]:
    """Active club_memberships row of the user, with ``role_name`` resolved. None when not an active member."""
    key = f"membership:{club_id}"
    if cache is not None and key in cache:
        return cache[key]
    try:
        result = supabase.table("club_memberships")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("club_id", club_id)\
            .eq("status", "active")\
            .limit(1)\
            .execute()
        membership = first_row(result)
        if membership is not None:
            role = get_role(membership.get("role_id"), supabase, cache)
            membership = {**membership, "role_name": role["name"] if role else membership.get("role")}
    except Exception as e:
        logger.error(f"Error getting membership of {user_id} in club {club_id}: {e}")
        membership = None
    if cache is not None:
        cache[key] = membership
    return membership


def get_club_permissions(user_id: str, club_id: int, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Permission names the user holds in a club through their membership role."""
    key = f"permissions:{club_id}"
    if cache is not None and key in cache:
        return cache[key]
    membership = get_active_membership(user_id, club_id, supabase, cache)
    names: List[str] = []
    if membership:
        role = get_role(membership.get("role_id"), supabase, cache)
        if role and role.get("permissions"):
            names = list(role["permissions"])
        else:
            names = get_role_permissions(membership.get("role_name") or "")
    if cache is not None:
        cache[key] = names
    return names


def is_club_admin(user_data: dict, club_id: int, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    if is_super_user(user_data, supabase):
        return True
    membership = get_active_membership(user_data["id"], club_id, supabase, cache)
    return bool(membership and membership.get("role_name") in ADMIN_ROLES)


def require_club_member(
    club_id: int,
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Caller must hold an active membership in the club (or be a super user)"""
    if is_super_user(user_data, supabase):
        return user_data
    cache = _get_request_cache(request)
    if not get_active_membership(user_data["id"], club_id, supabase, cache):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Active club membership required"
        )
    return user_data


def require_club_admin(
    club_id: int,
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Caller must be club-administrator or obmann of the club (or a super user)"""
    cache = _get_request_cache(request)
    if not is_club_admin(user_data, club_id, supabase, cache):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Club administrator role required"
        )
    return user_data


def require_club_permission(required_permission: str):
    """Factory function to create a club-scoped permission check dependency"""
    def check_permission(
        club_id: int,
        request: Request,
        user_data: dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        if is_super_user(user_data, supabase):
            return user_data
        cache = _get_request_cache(request)
        if not get_active_membership(user_data["id"], club_id, supabase, cache):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Active club membership required"
            )
        if required_permission not in get_club_permissions(user_data["id"], club_id, supabase, cache):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by the club checks when used)."""
    return _get_request_cache(request)


def get_subscription_manager(
    club_id: int,
    supabase: Client = Depends(get_supabase)
) -> SubscriptionManager:
    return load_subscription_manager(club_id, supabase)


def require_feature(feature: str):
    """Factory for a dependency that answers 403 when the club's plan lacks ``feature``"""
    def check_feature(
        club_id: int,
        user_data: dict = Depends(get_current_user_id),
        manager: SubscriptionManager = Depends(get_subscription_manager),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        if is_super_user(user_data, supabase):
            return user_data
        if not manager.has_feature(feature):
            logger.info(f"Club {club_id} blocked from feature {feature} on plan {manager.current_plan()}")
            log_feature_denial(supabase, club_id, feature, manager, user_data.get("id"))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=manager.feature_denied_detail(feature)
            )
        return user_data
    return check_feature
