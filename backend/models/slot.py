"""Slot model definitions."""

import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Uuid
from backend.database import Base
from backend.domain.enums import SlotStatus


class Slot(Base):
    """
    A bookable slot generated from a working-hours window.

    The owning window is the only foreign key; the doctor is reached through it.
    ``date`` holds the local calendar date of ``start_time`` for date filtering.
    """
    __tablename__ = "slot"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_slot_time_order"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    working_hours_id = Column(
        Uuid,
        ForeignKey("doctor_working_hours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(
        Enum(SlotStatus, name="slot_status", values_callable=lambda enum: [item.value for item in enum]),
        nullable=False,
        default=SlotStatus.AVAILABLE,
    )
