"""
Slot persistence.

Repositories flush but never commit; the calling service owns the transaction.
"""

import uuid
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core import config
from backend.core.exceptions import NotFoundError
from backend.domain.entities import Slot
from backend.domain.enums import SlotStatus
from backend.domain.page import Page, page_offset
from backend.models.slot import Slot as DbSlot
from backend.models.working_hours import WorkingHours as DbWorkingHours


def _as_slot_zone(value: datetime) -> datetime:
    # sqlite drops the offset; values are written in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(config.slot_zone())


def _as_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


class SlotRepository:

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, slot: Slot) -> Slot:
        db_slot = self._to_row(slot)
        self.db.add(db_slot)
        self.db.flush()
        return self._to_domain(db_slot)

    def save_all(self, slots: list[Slot]) -> list[Slot]:
        rows = [self._to_row(slot) for slot in slots]
        self.db.add_all(rows)
        self.db.flush()
        return [self._to_domain(row) for row in rows]

    def find_by_id(self, slot_id: UUID) -> Slot | None:
        db_slot = self.db.get(DbSlot, slot_id)
        return self._to_domain(db_slot) if db_slot else None

    def find_all_by_working_hours_id(self, working_hours_id: UUID, status: SlotStatus | None = None) -> list[Slot]:
        query = self.db.query(DbSlot).filter(DbSlot.working_hours_id == working_hours_id)
        if status is not None:
            query = query.filter(DbSlot.status == status)
        return [self._to_domain(row) for row in query.order_by(DbSlot.start_time.asc()).all()]

    def find_all_filtered(
        self,
        doctor_id: UUID | None = None,
        working_hours_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: SlotStatus | None = None,
        page: int = 0,
        size: int = 20,
    ) -> Page[Slot]:
        offset = page_offset(page, size)
        query = self.db.query(DbSlot)

        if doctor_id is not None:
            query = query.join(DbWorkingHours, DbWorkingHours.id == DbSlot.working_hours_id).filter(
                DbWorkingHours.doctor_id == doctor_id
            )
        if working_hours_id is not None:
            query = query.filter(DbSlot.working_hours_id == working_hours_id)
        if date_from is not None:
            query = query.filter(DbSlot.date >= date_from)
        if date_to is not None:
            query = query.filter(DbSlot.date <= date_to)
        if status is not None:
            query = query.filter(DbSlot.status == status)

        total = query.count()
        rows = query.order_by(DbSlot.start_time.asc(), DbSlot.id.asc()).offset(offset).limit(size).all()

        return Page.of([self._to_domain(row) for row in rows], page=page, size=size, total_elements=total)

    def modify(self, slot: Slot) -> Slot:
        db_slot = self.db.get(DbSlot, slot.id)
        if db_slot is None:
            raise NotFoundError("Slot", slot.id)
        db_slot.start_time = _as_utc(slot.start_time)
        db_slot.end_time = _as_utc(slot.end_time)
        db_slot.date = slot.date
        db_slot.status = slot.status
        self.db.flush()
        return self._to_domain(db_slot)

    def transition_status(self, slot_id: UUID, expected: SlotStatus, new_status: SlotStatus) -> bool:
        """
        Set ``new_status`` only if the stored status still equals ``expected``.

        Returns whether a row changed. The check and the write are one UPDATE
        statement, so concurrent callers cannot both succeed.
        """
        changed = self.db.query(DbSlot).filter(
            DbSlot.id == slot_id,
            DbSlot.status == expected,
        ).update({DbSlot.status: new_status}, synchronize_session=False)
        return changed == 1

    def delete_by_id(self, slot_id: UUID) -> None:
        self.db.query(DbSlot).filter(DbSlot.id == slot_id).delete(synchronize_session=False)

    def delete_all_by_working_hours_id(self, working_hours_id: UUID) -> int:
        return self.db.query(DbSlot).filter(
            DbSlot.working_hours_id == working_hours_id,
        ).delete(synchronize_session=False)

    def delete_all_by_ids(self, slot_ids: list[UUID]) -> int:
        if not slot_ids:
            return 0
        return self.db.query(DbSlot).filter(DbSlot.id.in_(slot_ids)).delete(synchronize_session=False)

    def exists_by_id(self, slot_id: UUID) -> bool:
        return self.db.query(DbSlot.id).filter(DbSlot.id == slot_id).first() is not None

    def exists_by_id_and_status(self, slot_id: UUID, status: SlotStatus) -> bool:
        return self.db.query(DbSlot.id).filter(
            DbSlot.id == slot_id,
            DbSlot.status == status,
        ).first() is not None

    @staticmethod
    def _to_row(slot: Slot) -> DbSlot:
        return DbSlot(
            id=slot.id or uuid.uuid4(),
            working_hours_id=slot.working_hours_id,
            start_time=_as_utc(slot.start_time),
            end_time=_as_utc(slot.end_time),
            date=slot.date,
            status=slot.status,
        )

    @staticmethod
    def _to_domain(db_slot: DbSlot) -> Slot:
        return Slot(
            id=db_slot.id,
            working_hours_id=db_slot.working_hours_id,
            start_time=_as_slot_zone(db_slot.start_time),
            end_time=_as_slot_zone(db_slot.end_time),
            status=db_slot.status,
        )
