"""
Seed Roles and Subscription Plans Script
Upserts the club roles and the subscription plans from the config modules.
Run with: python -m clubflow.scripts.seed_roles_plans
"""

import sys
import logging

from supabase import Client

from clubflow.config.permissions_config import PERMISSION_MATRIX
from clubflow.config.plans_config import get_plan_definitions
from clubflow.database.supabase_client import SupabaseClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _upsert_by(supabase: Client, table: str, key: str, row: dict) -> str:
    existing = supabase.table(table)\
        .select("id")\
        .eq(key, row[key])\
        .execute()
    if existing.data:
        supabase.table(table).update(row).eq(key, row[key]).execute()
        return "updated"
    supabase.table(table).insert(row).execute()
    return "created"


def seed_roles(supabase: Client) -> dict:
    """Create or refresh the global roles with their permission lists"""
    logger.info("Seeding roles...")
    counts = {"created": 0, "updated": 0, "failed": 0}
    for role in PERMISSION_MATRIX["roles"]:
        try:
            outcome = _upsert_by(supabase, "roles", "name", {
                "name": role["name"],
                "display_name": role["display_name"],
                "description": role["description"],
                "sort_order": role["sort_order"],
                "permissions": role["permissions"],
                "is_active": True,
            })
            counts[outcome] += 1
            logger.debug(f"{outcome.capitalize()} role: {role['name']}")
        except Exception as e:
            counts["failed"] += 1
            logger.error(f"Error processing role {role['name']}: {e}")
    logger.info(f"Roles seeded: {counts['created']} created, {counts['updated']} updated")
    return counts


def seed_plans(supabase: Client) -> dict:
    """Create or refresh the subscription plans keyed by plan_type"""
    logger.info("Seeding subscription plans...")
    counts = {"created": 0, "updated": 0, "failed": 0}
    for plan in get_plan_definitions():
        try:
            outcome = _upsert_by(supabase, "subscription_plans", "plan_type", plan)
            counts[outcome] += 1
        except Exception as e:
            counts["failed"] += 1
            logger.error(f"Error processing plan {plan['plan_type']}: {e}")
    logger.info(f"Plans seeded: {counts['created']} created, {counts['updated']} updated")
    return counts


def main():
    try:
        supabase = SupabaseClient.get_service_client()
        roles = seed_roles(supabase)
        plans = seed_plans(supabase)
        if roles["failed"] or plans["failed"]:
            logger.error("Seeding finished with errors")
            sys.exit(1)
        logger.info("Seeding completed successfully!")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
