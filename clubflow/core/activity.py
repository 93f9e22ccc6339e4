import logging
from typing import Any, Dict, Optional

from fastapi import Request
from supabase import Client

logger = logging.getLogger(__name__)


def log_activity(
    supabase: Client,
    club_id: int,
    user_id: str,
    action: str,
    description: str,
    target_user_id: Optional[str] = None,
    target_resource: Optional[str] = None,
    target_resource_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> None:
    """Append a row to activity_logs. Failures are logged, never raised."""
    row = {
        "club_id": club_id,
        "user_id": user_id,
        "action": action,
        "description": description,
        "target_user_id": target_user_id,
        "target_resource": target_resource,
        "target_resource_id": target_resource_id,
        "metadata": metadata or {},
    }
    if request is not None:
        row["ip_address"] = request.client.host if request.client else None
        row["user_agent"] = request.headers.get("user-agent")
    try:
        supabase.table("activity_logs").insert(row).execute()
    except Exception as e:
        logger.error(f"Error writing activity log '{action}' for club {club_id}: {e}")
