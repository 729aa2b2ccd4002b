"""Speciality model definitions."""

import uuid

from sqlalchemy import Column, Enum, Uuid
from backend.database import Base
from backend.domain.enums import SpecialityType


class Speciality(Base):
    """A medical speciality a doctor can hold."""
    __tablename__ = "speciality"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(
        Enum(SpecialityType, name="speciality_type", values_callable=lambda enum: [item.value for item in enum]),
        nullable=False,
        unique=True,
    )
