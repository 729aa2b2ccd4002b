"""City model definitions."""

import uuid

from sqlalchemy import Column, String, Uuid
from backend.database import Base


class City(Base):
    """A city practices are located in."""
    __tablename__ = "city"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, index=True)
    zip_code = Column(String(10), nullable=False)
