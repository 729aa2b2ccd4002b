import uuid
from datetime import time
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core.exceptions import NotFoundError
from backend.domain.entities import WorkingHours
from backend.domain.enums import Weekday
from backend.domain.overlap import exists_overlapping
from backend.models.working_hours import WorkingHours as DbWorkingHours


class WorkingHoursRepository:
    """Persistence for doctor working-hours windows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, working_hours: WorkingHours) -> WorkingHours:
        db_working_hours = DbWorkingHours(
            id=working_hours.id or uuid.uuid4(),
            doctor_id=working_hours.doctor_id,
            weekday=working_hours.weekday,
            start_time=working_hours.start_time,
            end_time=working_hours.end_time,
        )
        self.db.add(db_working_hours)
        self.db.flush()
        return self._to_domain(db_working_hours)

    def find_by_id(self, working_hours_id: UUID) -> WorkingHours | None:
        db_working_hours = self.db.get(DbWorkingHours, working_hours_id)
        return self._to_domain(db_working_hours) if db_working_hours else None

    def find_all_by_doctor_id(self, doctor_id: UUID) -> list[WorkingHours]:
        rows = self.db.query(DbWorkingHours).filter(
            DbWorkingHours.doctor_id == doctor_id,
        ).all()
        # Enum columns sort by stored name, not by day order
        rows.sort(key=lambda row: (int(row.weekday), row.start_time))
        return [self._to_domain(row) for row in rows]

    def find_all_by_doctor_id_and_weekday(self, doctor_id: UUID, weekday: Weekday) -> list[WorkingHours]:
        rows = self.db.query(DbWorkingHours).filter(
            DbWorkingHours.doctor_id == doctor_id,
            DbWorkingHours.weekday == weekday,
        ).order_by(DbWorkingHours.start_time.asc()).all()
        return [self._to_domain(row) for row in rows]

    def update(self, working_hours: WorkingHours) -> WorkingHours:
        db_working_hours = self.db.get(DbWorkingHours, working_hours.id)
        if db_working_hours is None:
            raise NotFoundError('Working hours', working_hours.id)

        db_working_hours.weekday = working_hours.weekday
        db_working_hours.start_time = working_hours.start_time
        db_working_hours.end_time = working_hours.end_time
        self.db.flush()
        return self._to_domain(db_working_hours)

    def delete_by_id(self, working_hours_id: UUID) -> None:
        self.db.query(DbWorkingHours).filter(
            DbWorkingHours.id == working_hours_id,
        ).delete(synchronize_session=False)

    def exists_by_id(self, working_hours_id: UUID) -> bool:
        return self.db.query(DbWorkingHours.id).filter(
            DbWorkingHours.id == working_hours_id,
        ).first() is not None

    def exists_overlapping(
        self,
        doctor_id: UUID,
        weekday: Weekday,
        start_time: time,
        end_time: time,
        exclude_id: UUID | None = None,
    ) -> bool:
        existing = self.find_all_by_doctor_id_and_weekday(doctor_id, weekday)
        return exists_overlapping(existing, weekday, start_time, end_time, exclude_id=exclude_id)

    @staticmethod
    def _to_domain(db_working_hours: DbWorkingHours) -> WorkingHours:
        return WorkingHours(
            id=db_working_hours.id,
            doctor_id=db_working_hours.doctor_id,
            weekday=Weekday(db_working_hours.weekday),
            start_time=db_working_hours.start_time,
            end_time=db_working_hours.end_time,
        )
