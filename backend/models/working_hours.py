"""Working hours model definitions."""

import uuid

from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, Time, Uuid
from backend.database import Base
from backend.domain.enums import Weekday


class WorkingHours(Base):
    """A recurring weekly availability window of one doctor."""
    __tablename__ = "doctor_working_hours"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_working_hours_time_order"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    doctor_id = Column(Uuid, ForeignKey("doctor.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(Enum(Weekday, name="weekday_enum"), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
