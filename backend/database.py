import os
from contextlib import contextmanager
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend.core import config


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL")


def _connect_args(url: str | None) -> dict:
    if url and url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO, connect_args=_connect_args(DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_scheduling_schema_checked = False


def ensure_scheduling_schema() -> None:
    global _scheduling_schema_checked

    if _scheduling_schema_checked:
        return

    with _schema_lock:
        if _scheduling_schema_checked:
            return

        inspector = inspect(engine)
        table_names = inspector.get_table_names()

        if 'slot' not in table_names or 'doctor_working_hours' not in table_names:
            _scheduling_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('slot')}
        migration_steps = [
            ('date', 'ALTER TABLE slot ADD COLUMN date DATE'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_slot_working_hours_status ON slot(working_hours_id, status)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_slot_date ON slot(date)')
            )
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_working_hours_doctor_weekday '
                    'ON doctor_working_hours(doctor_id, weekday)'
                )
            )

        _scheduling_schema_checked = True


@contextmanager
def transaction(db: Session):
    """Commit the session when the block succeeds, roll back and re-raise otherwise."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
