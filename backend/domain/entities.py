"""
Domain entities for the doctor directory and the scheduling core.

Relations between entities are held as ids only; nothing here keeps a live
reference to another entity.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from uuid import UUID

from backend.domain.enums import SlotStatus, SpecialityType, Weekday
from backend.domain.time_window import LocalWindow, TimeInterval


@dataclass
class City:
    id: UUID | None
    name: str
    zip_code: str


@dataclass
class Practice:
    id: UUID | None
    name: str
    street: str
    house_number: str
    postal_code: str
    city_id: UUID
    phone: str | None = None
    email: str | None = None


@dataclass
class Speciality:
    id: UUID | None
    name: SpecialityType


@dataclass
class Doctor:
    id: UUID | None
    first_name: str
    last_name: str
    practice_id: UUID | None = None
    speciality_ids: set[UUID] = field(default_factory=set)


@dataclass
class WorkingHours:
    id: UUID | None
    doctor_id: UUID
    weekday: Weekday
    start_time: time
    end_time: time

    @property
    def window(self) -> LocalWindow:
        return LocalWindow(weekday=self.weekday, start_time=self.start_time, end_time=self.end_time)


@dataclass
class Slot:
    """A concrete bookable unit of time owned by one working-hours window."""
    id: UUID | None
    working_hours_id: UUID
    start_time: datetime
    end_time: datetime
    status: SlotStatus = SlotStatus.AVAILABLE

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)

    @property
    def date(self) -> date:
        return self.start_time.date()
