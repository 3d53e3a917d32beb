"""
Slot arithmetic on "HH:MM" wall-clock times.

Intervals are half-open: a booking ending at 10:00 does not conflict with one
starting at 10:00.
"""
from typing import Iterable, List, Sequence, Tuple

# Bookable start times offered for every turf, one per hour
TIME_OPTIONS = [f"{hour:02d}:00" for hour in range(9, 22)]


def to_minutes(value: str) -> int:
    """Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight."""
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 24 and 0 <= minutes < 60) or (hours == 24 and minutes):
        raise ValueError(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def from_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def overlaps(start1: str, end1: str, start2: str, end2: str) -> bool:
    return to_minutes(start1) < to_minutes(end2) and to_minutes(start2) < to_minutes(end1)


def is_slot_free(start: str, end: str, booked: Iterable[Tuple[str, str]]) -> bool:
    """True if [start, end) overlaps none of the booked intervals."""
    return not any(overlaps(start, end, b_start, b_end) for b_start, b_end in booked)


def add_hours(start: str, hours: int) -> str:
    return from_minutes(to_minutes(start) + hours * 60)


def duration_hours(start: str, end: str) -> float:
    return (to_minutes(end) - to_minutes(start)) / 60


def free_start_times(
    booked: Sequence[Tuple[str, str]], duration: int = 1, options: Sequence[str] = TIME_OPTIONS
) -> List[str]:
    free = []
    for start in options:
        end_minutes = to_minutes(start) + duration * 60
        # slots may not run past midnight
        if end_minutes > 24 * 60:
            continue
        if is_slot_free(start, from_minutes(end_minutes), booked):
            free.append(start)
    return free
