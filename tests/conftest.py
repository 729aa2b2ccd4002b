import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.core import config  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.city import City  # noqa: E402
from backend.models.doctor import Doctor, doctor_speciality  # noqa: E402
from backend.models.practice import Practice  # noqa: E402
from backend.models.slot import Slot  # noqa: E402
from backend.models.speciality import Speciality  # noqa: E402
from backend.models.working_hours import WorkingHours  # noqa: E402

SCHEDULING_TABLES = [
    City.__table__,
    Practice.__table__,
    Speciality.__table__,
    Doctor.__table__,
    doctor_speciality,
    WorkingHours.__table__,
    Slot.__table__,
]

# Monday 2026-01-05 06:00 in the slot zone
FIXED_NOW = datetime(2026, 1, 5, 6, 0, tzinfo=config.slot_zone())


@pytest.fixture
def scheduling_db():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=SCHEDULING_TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(SCHEDULING_TABLES)))
        engine.dispose()


@pytest.fixture
def scheduling_tables():
    return SCHEDULING_TABLES


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
