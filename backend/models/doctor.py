"""Doctor model definitions."""

import uuid

from sqlalchemy import Column, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import relationship
from backend.database import Base
from backend.models.speciality import Speciality


doctor_speciality = Table(
    "doctor_speciality",
    Base.metadata,
    Column("doctor_id", Uuid, ForeignKey("doctor.id", ondelete="CASCADE"), primary_key=True),
    Column("speciality_id", Uuid, ForeignKey("speciality.id", ondelete="CASCADE"), primary_key=True),
)


class Doctor(Base):
    """Represents a doctor; optionally attached to a practice."""
    __tablename__ = "doctor"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, index=True)
    practice_id = Column(Uuid, ForeignKey("practice.id"), nullable=True, index=True)

    specialities = relationship(Speciality, secondary=doctor_speciality, lazy="selectin")
