"""Practice model definitions."""

import uuid

from sqlalchemy import Column, ForeignKey, String, Uuid
from backend.database import Base


class Practice(Base):
    """A medical practice; belongs to exactly one city."""
    __tablename__ = "practice"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    street = Column(String(200), nullable=False)
    house_number = Column(String(20), nullable=False)
    postal_code = Column(String(10), nullable=False)
    phone = Column(String(50))
    email = Column(String(200))
    city_id = Column(Uuid, ForeignKey("city.id"), nullable=False, index=True)
