"""Errors raised by the scheduling core.

Every error here is recoverable by the caller; the request layer maps each
class to a response status. Storage failures are not wrapped and surface as
``SQLAlchemyError``.
"""


class DoctorProviderError(Exception):
    """Base class for all domain-level errors."""


class NotFoundError(DoctorProviderError):
    """Raised when a referenced doctor, window, slot or reference record is absent."""

    def __init__(self, resource: str, resource_id) -> None:
        super().__init__(f'{resource} {resource_id} not found.')
        self.resource = resource
        self.resource_id = resource_id


class InvalidArgumentError(DoctorProviderError):
    """Raised for malformed input such as bad pagination or enum values."""


class InvalidWeekdayError(InvalidArgumentError):
    """Raised when an integer cannot be converted to a weekday."""


class InvalidTimeRangeError(InvalidArgumentError):
    """Raised when a start time is not strictly before its end time."""


class OverlappingWindowError(DoctorProviderError):
    """Raised when a working-hours window conflicts with an existing one."""


class InvalidTransitionError(DoctorProviderError):
    """Raised when a slot status change is not allowed from its current status."""

    def __init__(self, message: str, current=None, transition=None) -> None:
        super().__init__(message)
        self.current = current
        self.transition = transition
