import uuid
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core.exceptions import NotFoundError
from backend.domain.entities import Doctor
from backend.domain.page import Page, page_offset
from backend.models.doctor import Doctor as DbDoctor
from backend.models.speciality import Speciality as DbSpeciality


class DoctorRepository:
    """Persistence for doctors and their speciality links."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def exists_by_id(self, doctor_id: UUID) -> bool:
        return self.db.query(DbDoctor.id).filter(DbDoctor.id == doctor_id).first() is not None

    def lock_by_id(self, doctor_id: UUID) -> bool:
        """
        Take a row lock on the doctor for the rest of the transaction.

        Working-hours writes for one doctor serialize on this lock, so two
        overlapping windows cannot both pass the overlap check. Returns False
        when the doctor does not exist.
        """
        return self.db.query(DbDoctor.id).filter(
            DbDoctor.id == doctor_id,
        ).with_for_update().first() is not None

    def save(self, doctor: Doctor) -> Doctor:
        db_doctor = DbDoctor(
            id=doctor.id or uuid.uuid4(),
            first_name=doctor.first_name,
            last_name=doctor.last_name,
            practice_id=doctor.practice_id,
        )
        db_doctor.specialities = self._load_specialities(doctor.speciality_ids)
        self.db.add(db_doctor)
        self.db.flush()
        return self._to_domain(db_doctor)

    def find_by_id(self, doctor_id: UUID) -> Doctor | None:
        db_doctor = self.db.get(DbDoctor, doctor_id)
        return self._to_domain(db_doctor) if db_doctor else None

    def find_all_filtered(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        practice_id: UUID | None = None,
        speciality_id: UUID | None = None,
        page: int = 0,
        size: int = 20,
    ) -> Page[Doctor]:
        offset = page_offset(page, size)
        query = self.db.query(DbDoctor)

        if first_name:
            query = query.filter(DbDoctor.first_name.ilike(f'%{first_name.strip()}%'))
        if last_name:
            query = query.filter(DbDoctor.last_name.ilike(f'%{last_name.strip()}%'))
        if practice_id is not None:
            query = query.filter(DbDoctor.practice_id == practice_id)
        if speciality_id is not None:
            query = query.filter(DbDoctor.specialities.any(DbSpeciality.id == speciality_id))

        total = query.count()
        rows = query.order_by(DbDoctor.last_name.asc(), DbDoctor.first_name.asc(), DbDoctor.id.asc()).offset(
            offset
        ).limit(size).all()

        return Page.of([self._to_domain(row) for row in rows], page=page, size=size, total_elements=total)

    def update(self, doctor: Doctor) -> Doctor:
        db_doctor = self.db.get(DbDoctor, doctor.id)
        if db_doctor is None:
            raise NotFoundError('Doctor', doctor.id)

        db_doctor.first_name = doctor.first_name
        db_doctor.last_name = doctor.last_name
        db_doctor.practice_id = doctor.practice_id
        db_doctor.specialities = self._load_specialities(doctor.speciality_ids)
        self.db.flush()
        return self._to_domain(db_doctor)

    def delete_by_id(self, doctor_id: UUID) -> None:
        db_doctor = self.db.get(DbDoctor, doctor_id)
        if db_doctor is not None:
            self.db.delete(db_doctor)
            self.db.flush()

    def detach_from_practice(self, practice_id: UUID) -> int:
        rows = self.db.query(DbDoctor).filter(DbDoctor.practice_id == practice_id).all()
        for db_doctor in rows:
            db_doctor.practice_id = None
        self.db.flush()
        return len(rows)

    def _load_specialities(self, speciality_ids: Iterable[UUID]) -> list[DbSpeciality]:
        ids = set(speciality_ids or ())
        if not ids:
            return []
        return self.db.query(DbSpeciality).filter(DbSpeciality.id.in_(ids)).all()

    @staticmethod
    def _to_domain(db_doctor: DbDoctor) -> Doctor:
        return Doctor(
            id=db_doctor.id,
            first_name=db_doctor.first_name,
            last_name=db_doctor.last_name,
            practice_id=db_doctor.practice_id,
            speciality_ids={speciality.id for speciality in db_doctor.specialities},
        )
