"""
Facility availability and recurrence expansion.

Both helpers work on plain booking rows as returned by Supabase so the
service can run them against whatever the query produced.
"""
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from clubflow.core.timeutils import add_months, parse_timestamp

MAX_OCCURRENCES = 366


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open interval overlap; touching intervals do not conflict."""
    return start < other_end and end > other_start


def evaluate_availability(
    bookings: Iterable[Dict[str, Any]],
    start: datetime,
    end: datetime,
    max_concurrent: Optional[int],
    exclude_booking_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Count the non-cancelled bookings overlapping [start, end).

    The facility is available while that count stays below
    max_concurrent (1 when unset). exclude_booking_id drops the booking
    being edited from the count.
    """
    conflicting = []
    for booking in bookings:
        if booking.get("status") == "cancelled":
            continue
        if exclude_booking_id is not None and booking.get("id") == exclude_booking_id:
            continue
        other_start = parse_timestamp(booking.get("start_time"))
        other_end = parse_timestamp(booking.get("end_time"))
        if other_start is None or other_end is None:
            continue
        if overlaps(start, end, other_start, other_end):
            conflicting.append(booking)

    limit = max_concurrent or 1
    return {
        "available": len(conflicting) < limit,
        "max_concurrent": limit,
        "current_bookings": len(conflicting),
        "conflicting_bookings": conflicting,
    }


def expand_occurrences(
    start: datetime,
    end: datetime,
    pattern: str,
    until: date,
    max_occurrences: int = MAX_OCCURRENCES,
) -> List[Tuple[datetime, datetime]]:
    """
    Occurrences of a recurring booking up to and including the until date.

    Each occurrence keeps the original duration. Monthly steps are taken
    from the first occurrence so a booking on the 31st returns to the
    31st after passing through shorter months.
    """
    if pattern not in ("daily", "weekly", "monthly"):
        raise ValueError(f"Unknown recurring pattern: {pattern}")

    duration = end - start
    occurrences: List[Tuple[datetime, datetime]] = []
    index = 0
    while len(occurrences) < max_occurrences:
        if pattern == "daily":
            current = start + timedelta(days=index)
        elif pattern == "weekly":
            current = start + timedelta(weeks=index)
        else:
            current = add_months(start, index)
        if current.date() > until:
            break
        occurrences.append((current, current + duration))
        index += 1
    return occurrences
