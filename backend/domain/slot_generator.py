"""
Expansion of a recurring working-hours window into concrete slots.

This is pure domain logic: no database and no clock. The caller passes the
moment generation starts from and persists the result.

Algorithm:
1. Find the first date on or after ``horizon_start`` that falls on the
   window's weekday. Today only counts if the window has not started yet.
2. Take ``horizon_weeks`` occurrences, one every seven days.
3. Tile each occurrence [date + start_time, date + end_time) into
   consecutive slots of ``slot_duration``; a trailing remainder shorter than
   one slot is dropped.

Tiling runs on UTC instants, so a slot is always ``slot_duration`` of real
time long, including on days the zone changes its offset. A local bound
that falls into a daylight-saving gap or fold is resolved with ``fold=0`` for
the start and ``fold=1`` for the end: in an autumn fold the window covers
both passes of the repeated hour, in a spring gap it starts after the gap.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from backend.core.exceptions import InvalidArgumentError
from backend.domain.entities import Slot, WorkingHours
from backend.domain.enums import SlotStatus, Weekday
from backend.domain.time_window import TimeInterval

DEFAULT_HORIZON_WEEKS = 4
DEFAULT_SLOT_DURATION = timedelta(minutes=30)


def occurrence_dates(
    weekday: Weekday,
    start_time: time,
    horizon_start: datetime,
    horizon_weeks: int,
) -> list[date]:
    days_ahead = (int(weekday) - horizon_start.isoweekday()) % 7
    first = horizon_start.date() + timedelta(days=days_ahead)

    if days_ahead == 0 and horizon_start.time() > start_time:
        # today's window has already started
        first += timedelta(days=7)

    return [first + timedelta(weeks=week) for week in range(horizon_weeks)]


def local_instant(day: date, at: time, zone: tzinfo, fold: int = 0) -> datetime:
    """
    Resolve a wall-clock time on ``day`` in ``zone`` to a real instant.

    Times inside a gap are shifted by the gap length; the UTC round trip
    also normalises the result to the offset actually in force.
    """
    wall = datetime.combine(day, at, tzinfo=zone).replace(fold=fold)
    return wall.astimezone(timezone.utc).astimezone(zone)


def tile_interval(start: datetime, end: datetime, slot_duration: timedelta) -> list[TimeInterval]:
    """
    Split [start, end) into back-to-back intervals of ``slot_duration``.

    Stepping happens in UTC and each bound is converted back to the zone of
    ``start``.

    Example:
    08:00 - 08:45 with 30 minutes -> [08:00-08:30]
    """
    zone = start.tzinfo
    intervals: list[TimeInterval] = []
    cursor = start.astimezone(timezone.utc)
    stop = end.astimezone(timezone.utc)

    while cursor + slot_duration <= stop:
        intervals.append(
            TimeInterval(start=cursor.astimezone(zone), end=(cursor + slot_duration).astimezone(zone))
        )
        cursor += slot_duration

    return intervals


def generate_slots(
    window: WorkingHours,
    horizon_start: datetime,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
    slot_duration: timedelta = DEFAULT_SLOT_DURATION,
    skip: Iterable[TimeInterval] = (),
) -> list[Slot]:
    """
    Materialise AVAILABLE slots for ``window`` over the horizon.

    Args:
        window: The working-hours window; its id becomes each slot's owner.
        horizon_start: Timezone-aware moment generation starts from. Its
            tzinfo is the zone in which the window's local times are read.
        horizon_weeks: Number of weekly occurrences to produce.
        slot_duration: Fixed slot length.
        skip: Intervals that must stay free of new slots (already booked time).

    Returns:
        Slots ordered by start time.
    """
    if horizon_start.tzinfo is None:
        raise InvalidArgumentError('horizon_start must be timezone-aware.')
    if horizon_weeks < 0:
        raise InvalidArgumentError(f'horizon_weeks must not be negative, got {horizon_weeks}.')
    if slot_duration <= timedelta(0):
        raise InvalidArgumentError(f'slot_duration must be positive, got {slot_duration}.')

    zone = horizon_start.tzinfo
    reserved = list(skip)
    slots: list[Slot] = []

    for occurrence in occurrence_dates(window.weekday, window.start_time, horizon_start, horizon_weeks):
        day_start = local_instant(occurrence, window.start_time, zone, fold=0)
        day_end = local_instant(occurrence, window.end_time, zone, fold=1)

        for interval in tile_interval(day_start, day_end, slot_duration):
            if any(interval.overlaps(taken) for taken in reserved):
                continue
            slots.append(
                Slot(
                    id=None,
                    working_hours_id=window.id,
                    start_time=interval.start,
                    end_time=interval.end,
                    status=SlotStatus.AVAILABLE,
                )
            )

    return slots
