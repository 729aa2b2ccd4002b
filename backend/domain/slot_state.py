"""
Legal status changes of a single slot.

    block   : AVAILABLE -> BLOCKED
    unblock : BLOCKED   -> AVAILABLE
    book    : AVAILABLE -> BOOKED

Nothing leaves BOOKED.
"""

from enum import Enum

from backend.core.exceptions import InvalidTransitionError
from backend.domain.enums import SlotStatus


class SlotTransition(str, Enum):
    BLOCK = 'block'
    UNBLOCK = 'unblock'
    BOOK = 'book'


TRANSITIONS: dict[SlotTransition, tuple[SlotStatus, SlotStatus]] = {
    SlotTransition.BLOCK: (SlotStatus.AVAILABLE, SlotStatus.BLOCKED),
    SlotTransition.UNBLOCK: (SlotStatus.BLOCKED, SlotStatus.AVAILABLE),
    SlotTransition.BOOK: (SlotStatus.AVAILABLE, SlotStatus.BOOKED),
}


def required_status(transition: SlotTransition) -> SlotStatus:
    return TRANSITIONS[transition][0]


def resulting_status(transition: SlotTransition) -> SlotStatus:
    return TRANSITIONS[transition][1]


def apply_transition(current: SlotStatus, transition: SlotTransition) -> SlotStatus:
    required, result = TRANSITIONS[transition]
    if current != required:
        raise InvalidTransitionError(
            f'Cannot {transition.value} a slot that is {current.value}; it must be {required.value}.',
            current=current,
            transition=transition,
        )
    return result
