"""Closed value sets used across the scheduling domain."""

from datetime import date
from enum import Enum, IntEnum

from backend.core.exceptions import InvalidArgumentError, InvalidWeekdayError


class Weekday(IntEnum):
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    @classmethod
    def from_value(cls, value: int) -> 'Weekday':
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidWeekdayError(f'Invalid weekday value: {value!r}. Must be between 1 and 7.')
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidWeekdayError(f'Invalid weekday value: {value}. Must be between 1 and 7.') from exc

    @classmethod
    def from_date(cls, value: date) -> 'Weekday':
        return cls(value.isoweekday())


class SlotStatus(str, Enum):
    AVAILABLE = 'available'
    BOOKED = 'booked'
    BLOCKED = 'blocked'

    @classmethod
    def from_value(cls, value: str) -> 'SlotStatus':
        normalized = (value or '').strip().lower()
        for status in cls:
            if status.value == normalized:
                return status
        raise InvalidArgumentError(f'Invalid slot status value: {value!r}.')


class SpecialityType(str, Enum):
    GENERAL_MEDICINE = 'general_medicine'
    INTERNAL_MEDICINE = 'internal_medicine'
    CARDIOLOGY = 'cardiology'
    DERMATOLOGY = 'dermatology'
    ORTHOPEDICS = 'orthopedics'
    NEUROLOGY = 'neurology'
    PSYCHIATRY = 'psychiatry'
    GYNECOLOGY = 'gynecology'
    PEDIATRICS = 'pediatrics'
    UROLOGY = 'urology'
    OPHTHALMOLOGY = 'ophthalmology'
    OTORHINOLARYNGOLOGY = 'otorhinolaryngology'
    RADIOLOGY = 'radiology'
    ANESTHESIOLOGY = 'anesthesiology'
    DENTISTRY = 'dentistry'

    @classmethod
    def from_value(cls, value: str) -> 'SpecialityType':
        normalized = (value or '').strip().lower()
        for speciality in cls:
            if speciality.value == normalized:
                return speciality
        raise InvalidArgumentError(f'Invalid speciality value: {value!r}.')
