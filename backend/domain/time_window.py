"""Value types for recurring weekly windows and absolute time intervals."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone

from backend.core.exceptions import InvalidArgumentError, InvalidTimeRangeError
from backend.domain.enums import Weekday


@dataclass(frozen=True)
class LocalWindow:
    """
    A weekday plus a time-of-day range, e.g. Monday 08:00-12:00.

    Invariant: start_time < end_time. Windows never wrap past midnight.
    """
    weekday: Weekday
    start_time: time
    end_time: time

    def __post_init__(self):
        if not isinstance(self.weekday, Weekday):
            object.__setattr__(self, 'weekday', Weekday.from_value(self.weekday))
        if self.start_time >= self.end_time:
            raise InvalidTimeRangeError(
                f'Start time {self.start_time.isoformat()} must be before end time {self.end_time.isoformat()}.'
            )

    def overlaps(self, other: 'LocalWindow') -> bool:
        return (
            self.weekday == other.weekday
            and self.start_time < other.end_time
            and self.end_time > other.start_time
        )

    def __str__(self) -> str:
        return f'{self.weekday.name.title()} {self.start_time:%H:%M}-{self.end_time:%H:%M}'


@dataclass(frozen=True)
class TimeInterval:
    """
    A timezone-aware [start, end) interval.

    Ordering and overlap compare UTC instants.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidArgumentError('Interval bounds must be timezone-aware.')
        if _utc(self.start) >= _utc(self.end):
            raise InvalidTimeRangeError(f'Start {self.start.isoformat()} must be before end {self.end.isoformat()}.')

    @property
    def duration(self) -> timedelta:
        return _utc(self.end) - _utc(self.start)

    def overlaps(self, other: 'TimeInterval') -> bool:
        return _utc(self.start) < _utc(other.end) and _utc(self.end) > _utc(other.start)


def _utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)
