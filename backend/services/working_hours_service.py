"""
Working-hours use cases.

Creating a window validates it, checks it against the doctor's other windows
for the same weekday and materialises its slots over the configured horizon.
The doctor row is locked for the whole transaction so concurrent writers for
one doctor run the overlap check one after another.
"""

import logging
from collections.abc import Callable
from datetime import datetime, time, timedelta, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core import config
from backend.core.exceptions import NotFoundError, OverlappingWindowError
from backend.database import transaction
from backend.domain.entities import Slot, WorkingHours
from backend.domain.enums import SlotStatus, Weekday
from backend.domain.slot_generator import generate_slots, local_instant
from backend.domain.time_window import LocalWindow
from backend.repositories.doctor_repository import DoctorRepository
from backend.repositories.slot_repository import SlotRepository
from backend.repositories.working_hours_repository import WorkingHoursRepository

logger = logging.getLogger(__name__)


def _build_window(weekday: Weekday | int, start_time: time, end_time: time) -> LocalWindow:
    if not isinstance(weekday, Weekday):
        weekday = Weekday.from_value(weekday)
    return LocalWindow(weekday=weekday, start_time=start_time, end_time=end_time)


class WorkingHoursService:

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] | None = None,
        horizon_weeks: int | None = None,
        slot_duration: timedelta | None = None,
    ) -> None:
        self.db = db
        self.doctors = DoctorRepository(db)
        self.working_hours = WorkingHoursRepository(db)
        self.slots = SlotRepository(db)
        self._clock = clock or (lambda: datetime.now(config.slot_zone()))
        self.horizon_weeks = config.SLOT_HORIZON_WEEKS if horizon_weeks is None else horizon_weeks
        self.slot_duration = slot_duration or timedelta(minutes=config.SLOT_DURATION_MINUTES)

    def create_working_hours(
        self,
        doctor_id: UUID,
        weekday: Weekday | int,
        start_time: time,
        end_time: time,
    ) -> WorkingHours:
        window = _build_window(weekday, start_time, end_time)

        with transaction(self.db):
            if not self.doctors.lock_by_id(doctor_id):
                raise NotFoundError('Doctor', doctor_id)
            self._ensure_no_overlap(doctor_id, window)

            created = self.working_hours.save(
                WorkingHours(
                    id=None,
                    doctor_id=doctor_id,
                    weekday=window.weekday,
                    start_time=window.start_time,
                    end_time=window.end_time,
                )
            )
            slots = self.slots.save_all(self._generate(created))

        logger.info('Created working hours %s (%s) for doctor %s with %d slots', created.id, window, doctor_id, len(slots))
        return created

    def update_working_hours(
        self,
        working_hours_id: UUID,
        weekday: Weekday | int,
        start_time: time,
        end_time: time,
    ) -> WorkingHours:
        window = _build_window(weekday, start_time, end_time)

        with transaction(self.db):
            current = self.working_hours.find_by_id(working_hours_id)
            if current is None:
                raise NotFoundError('Working hours', working_hours_id)

            self.doctors.lock_by_id(current.doctor_id)
            self._ensure_no_overlap(current.doctor_id, window, exclude_id=working_hours_id)

            updated = self.working_hours.update(
                WorkingHours(
                    id=working_hours_id,
                    doctor_id=current.doctor_id,
                    weekday=window.weekday,
                    start_time=window.start_time,
                    end_time=window.end_time,
                )
            )
            removed, added = self._reconcile_slots(updated)

        logger.info(
            'Updated working hours %s to %s: %d slots removed, %d slots added',
            working_hours_id,
            window,
            removed,
            added,
        )
        return updated

    def delete_working_hours(self, working_hours_id: UUID) -> None:
        with transaction(self.db):
            current = self.working_hours.find_by_id(working_hours_id)
            if current is None:
                raise NotFoundError('Working hours', working_hours_id)

            self.doctors.lock_by_id(current.doctor_id)
            # slots go first so no slot ever points at a missing window
            removed = self.slots.delete_all_by_working_hours_id(working_hours_id)
            self.working_hours.delete_by_id(working_hours_id)

        logger.info('Deleted working hours %s and %d slots', working_hours_id, removed)

    def get_working_hours(self, working_hours_id: UUID) -> WorkingHours:
        working_hours = self.working_hours.find_by_id(working_hours_id)
        if working_hours is None:
            raise NotFoundError('Working hours', working_hours_id)
        return working_hours

    def list_working_hours(self, doctor_id: UUID) -> list[WorkingHours]:
        if not self.doctors.exists_by_id(doctor_id):
            raise NotFoundError('Doctor', doctor_id)
        return self.working_hours.find_all_by_doctor_id(doctor_id)

    def _ensure_no_overlap(self, doctor_id: UUID, window: LocalWindow, exclude_id: UUID | None = None) -> None:
        if self.working_hours.exists_overlapping(
            doctor_id,
            window.weekday,
            window.start_time,
            window.end_time,
            exclude_id=exclude_id,
        ):
            logger.warning('Rejected working hours %s for doctor %s: overlaps an existing window', window, doctor_id)
            raise OverlappingWindowError(f'Working hours {window} overlap existing working hours of doctor {doctor_id}.')

    def _generate(self, working_hours: WorkingHours, horizon_start: datetime | None = None, skip=()) -> list[Slot]:
        return generate_slots(
            working_hours,
            horizon_start=horizon_start or self._clock(),
            horizon_weeks=self.horizon_weeks,
            slot_duration=self.slot_duration,
            skip=skip,
        )

    def _reconcile_slots(self, working_hours: WorkingHours) -> tuple[int, int]:
        """
        Bring the window's slots in line with its new times.

        BOOKED slots are never touched and new slots never overlap them.
        BLOCKED slots that match a regenerated slot exactly stay blocked.
        When today's occurrence has already started it is not regenerated, so
        its remaining future slots stay as long as they fit the new window.
        Every other non-booked slot is replaced by the regenerated horizon.
        """
        now = self._clock()
        existing = self.slots.find_all_by_working_hours_id(working_hours.id)
        booked = [slot for slot in existing if slot.status == SlotStatus.BOOKED]

        candidates = self._generate(working_hours, horizon_start=now, skip=[slot.interval for slot in booked])
        candidate_keys = {_instant_key(slot) for slot in candidates}

        kept_blocked = {
            _instant_key(slot): slot
            for slot in existing
            if slot.status == SlotStatus.BLOCKED and _instant_key(slot) in candidate_keys
        }
        kept_today = _remaining_today(working_hours, existing, booked, now)
        kept_ids = {slot.id for slot in booked} | {slot.id for slot in kept_blocked.values()}
        kept_ids |= {slot.id for slot in kept_today}

        removed = self.slots.delete_all_by_ids([slot.id for slot in existing if slot.id not in kept_ids])
        added = self.slots.save_all([slot for slot in candidates if _instant_key(slot) not in kept_blocked])
        return removed, len(added)


def _instant_key(slot: Slot) -> tuple[datetime, datetime]:
    return slot.start_time.astimezone(timezone.utc), slot.end_time.astimezone(timezone.utc)


def _remaining_today(
    working_hours: WorkingHours,
    existing: list[Slot],
    booked: list[Slot],
    now: datetime,
) -> list[Slot]:
    """Non-booked future slots of today's occurrence once that occurrence has started."""
    today = now.date()
    if Weekday.from_date(today) != working_hours.weekday or now.time() <= working_hours.start_time:
        return []

    opens = local_instant(today, working_hours.start_time, now.tzinfo, fold=0).astimezone(timezone.utc)
    closes = local_instant(today, working_hours.end_time, now.tzinfo, fold=1).astimezone(timezone.utc)
    cutoff = now.astimezone(timezone.utc)

    remaining = []
    for slot in existing:
        start, end = _instant_key(slot)
        if slot.status == SlotStatus.BOOKED or slot.date != today:
            continue
        if start <= cutoff or start < opens or end > closes:
            continue
        if any(slot.interval.overlaps(taken.interval) for taken in booked):
            continue
        remaining.append(slot)
    return remaining
