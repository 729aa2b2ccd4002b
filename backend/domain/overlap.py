"""
Overlap rules for working-hours windows.

Two half-open ranges [s1, e1) and [s2, e2) overlap iff ``s1 < e2 and e1 > s2``.
Back-to-back windows (08:00-12:00 and 12:00-16:00) therefore do not conflict.
"""

from collections.abc import Iterable
from datetime import time
from uuid import UUID

from backend.domain.entities import WorkingHours
from backend.domain.enums import Weekday


def intervals_overlap(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and end_a > start_b


def find_overlapping(
    existing: Iterable[WorkingHours],
    weekday: Weekday,
    start_time: time,
    end_time: time,
    exclude_id: UUID | None = None,
) -> WorkingHours | None:
    """
    Return the first window in ``existing`` that conflicts with the candidate.

    Every window is checked; ``exclude_id`` skips the window being replaced so
    an update never conflicts with itself.
    """
    for window in existing:
        if exclude_id is not None and window.id == exclude_id:
            continue
        if window.weekday != weekday:
            continue
        if intervals_overlap(window.start_time, window.end_time, start_time, end_time):
            return window
    return None


def exists_overlapping(
    existing: Iterable[WorkingHours],
    weekday: Weekday,
    start_time: time,
    end_time: time,
    exclude_id: UUID | None = None,
) -> bool:
    return find_overlapping(existing, weekday, start_time, end_time, exclude_id) is not None
