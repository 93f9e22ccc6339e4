import asyncio
import logging

from clubflow.config import settings
from clubflow.core.cache import get_cache
from clubflow.database.supabase_client import SupabaseClient
from clubflow.modules.finances.service import FinanceService
from clubflow.modules.invitations.service import InvitationService

logger = logging.getLogger(__name__)


async def run_maintenance():
    """One maintenance pass: expired cache entries, stale invitations, overdue payments"""
    cache = get_cache()
    removed = cache.cleanup()
    if removed:
        logger.debug(f"Removed {removed} expired cache entries")

    supabase = SupabaseClient.get_service_client()
    try:
        InvitationService(supabase).expire_invitations()
    except Exception as e:
        logger.error(f"Error expiring invitations: {str(e)}")

    try:
        FinanceService(supabase, cache).mark_overdue()
    except Exception as e:
        logger.error(f"Error marking overdue finances: {str(e)}")


async def maintenance_loop():
    """Background task that runs the maintenance pass every scheduler_interval_seconds"""
    while True:
        try:
            await run_maintenance()
        except Exception as e:
            logger.error(f"Error in maintenance loop: {str(e)}")

        await asyncio.sleep(settings.scheduler_interval_seconds)
