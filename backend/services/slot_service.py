import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core import config
from backend.core.exceptions import InvalidArgumentError, InvalidTransitionError, NotFoundError
from backend.database import transaction
from backend.domain.entities import Slot
from backend.domain.enums import SlotStatus
from backend.domain.page import Page, validate_page_request
from backend.domain.slot_state import SlotTransition, apply_transition, required_status, resulting_status
from backend.repositories.slot_repository import SlotRepository

logger = logging.getLogger(__name__)


class SlotService:
    """Filtered slot listing and the block / unblock / book transitions."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.slots = SlotRepository(db)

    def find_all_slots(
        self,
        doctor_id: UUID | None = None,
        working_hours_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: SlotStatus | str | None = None,
        page: int = 0,
        size: int = config.DEFAULT_PAGE_SIZE,
    ) -> Page[Slot]:
        validate_page_request(page, size)
        if date_from is not None and date_to is not None and date_from > date_to:
            raise InvalidArgumentError(f'dateFrom {date_from} must not be after dateTo {date_to}.')
        if status is not None and not isinstance(status, SlotStatus):
            status = SlotStatus.from_value(status)

        return self.slots.find_all_filtered(
            doctor_id=doctor_id,
            working_hours_id=working_hours_id,
            date_from=date_from,
            date_to=date_to,
            status=status,
            page=page,
            size=size,
        )

    def get_slot(self, slot_id: UUID) -> Slot:
        slot = self.slots.find_by_id(slot_id)
        if slot is None:
            raise NotFoundError('Slot', slot_id)
        return slot

    def block_slot(self, slot_id: UUID) -> Slot:
        return self._transition(slot_id, SlotTransition.BLOCK)

    def unblock_slot(self, slot_id: UUID) -> Slot:
        return self._transition(slot_id, SlotTransition.UNBLOCK)

    def book_slot(self, slot_id: UUID) -> Slot:
        return self._transition(slot_id, SlotTransition.BOOK)

    def _transition(self, slot_id: UUID, transition: SlotTransition) -> Slot:
        """
        Apply ``transition`` with a single conditional UPDATE.

        When no row changes, the slot is reloaded to tell a missing slot from
        one in the wrong status.
        """
        with transaction(self.db):
            changed = self.slots.transition_status(
                slot_id,
                expected=required_status(transition),
                new_status=resulting_status(transition),
            )

        if not changed:
            current = self.get_slot(slot_id)
            try:
                apply_transition(current.status, transition)
            except InvalidTransitionError:
                logger.warning('Rejected %s on slot %s in status %s', transition.value, slot_id, current.status.value)
                raise
            # status matched again after a concurrent round trip (e.g. block then unblock)
            raise InvalidTransitionError(
                f'Slot {slot_id} changed concurrently; retry the {transition.value} request.',
                current=current.status,
                transition=transition,
            )

        slot = self.get_slot(slot_id)
        logger.info('Slot %s %s -> %s', slot_id, transition.value, slot.status.value)
        return slot
