"""
Cache invalidation for club-scoped read models.

Each club has cached keys named ``clubs:{club_id}:{entity}``. Writes call
``invalidate_entity_data`` with the entity they touched; the static table
below decides which derived keys go stale with it. Every dropped key also
bumps a per-club sync version that clients poll through ``GET /clubs/{id}/sync``
to refetch only what changed.
"""

import logging
import threading
from typing import Dict, Iterable, List

from clubflow.core.cache import MemoryCache

logger = logging.getLogger(__name__)

ALWAYS_REFRESHED = ["dashboard", "communication-stats", "notifications"]

DASHBOARD_ENTITIES = {"members", "teams", "finances", "bookings", "events"}
COMMUNICATION_ENTITIES = {"messages", "announcements"}

# Polling tiers for clients, in seconds
SYNC_INTERVALS = {
    "critical": 30,
    "normal": 120,
    "low": 300,
}

SYNC_TIERS = {
    "critical": ["notifications", "communication-stats"],
    "normal": ["messages", "announcements"],
    "low": ["dashboard", "members", "teams", "bookings", "events", "finances"],
}


class SyncVersions:
    """Monotonic per-club counters, one per cache key."""

    def __init__(self):
        self._versions: Dict[int, Dict[str, int]] = {}
        self._lock = threading.Lock()

    def bump(self, club_id: int, key: str) -> int:
        with self._lock:
            club_versions = self._versions.setdefault(club_id, {})
            club_versions[key] = club_versions.get(key, 0) + 1
            return club_versions[key]

    def get(self, club_id: int) -> Dict[str, int]:
        with self._lock:
            return dict(self._versions.get(club_id, {}))

    def clear(self) -> None:
        with self._lock:
            self._versions.clear()


sync_versions = SyncVersions()


def cache_key(club_id: int, entity: str) -> str:
    return f"clubs:{club_id}:{entity}"


def dependent_keys(entity: str) -> List[str]:
    """Keys that go stale when ``entity`` changes, the entity itself first."""
    keys = [entity]
    if entity in DASHBOARD_ENTITIES:
        keys.append("dashboard")
    if entity in COMMUNICATION_ENTITIES:
        keys.extend(["communication-stats", "notifications"])
    return keys


def _drop(cache: MemoryCache, club_id: int, keys: Iterable[str]) -> List[str]:
    dropped = []
    for key in keys:
        cache.delete(cache_key(club_id, key))
        cache.delete_prefix(f"{cache_key(club_id, key)}:")
        sync_versions.bump(club_id, key)
        dropped.append(key)
    return dropped


def invalidate_all_data(cache: MemoryCache, club_id: int) -> List[str]:
    dropped = _drop(cache, club_id, ALWAYS_REFRESHED)
    logger.debug(f"Invalidated {dropped} for club {club_id}")
    return dropped


def invalidate_entity_data(cache: MemoryCache, club_id: int, entity: str) -> List[str]:
    dropped = _drop(cache, club_id, dependent_keys(entity))
    logger.debug(f"Invalidated {dropped} for club {club_id} after {entity} change")
    return dropped


def invalidate_cross_entity_data(cache: MemoryCache, club_id: int, entities: Iterable[str]) -> List[str]:
    dropped: List[str] = []
    for entity in entities:
        for key in invalidate_entity_data(cache, club_id, entity):
            if key not in dropped:
                dropped.append(key)
    return dropped


def get_sync_state(club_id: int) -> dict:
    return {
        "club_id": club_id,
        "versions": sync_versions.get(club_id),
        "sync_intervals": SYNC_INTERVALS,
        "tiers": SYNC_TIERS,
    }
