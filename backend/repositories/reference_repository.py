"""Persistence for cities, practices and specialities."""

import uuid
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core.exceptions import NotFoundError
from backend.domain.entities import City, Practice, Speciality
from backend.domain.enums import SpecialityType
from backend.domain.page import Page, page_offset
from backend.models.city import City as DbCity
from backend.models.practice import Practice as DbPractice
from backend.models.speciality import Speciality as DbSpeciality


class CityRepository:

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, city: City) -> City:
        db_city = DbCity(id=city.id or uuid.uuid4(), name=city.name, zip_code=city.zip_code)
        self.db.add(db_city)
        self.db.flush()
        return self._to_domain(db_city)

    def exists_by_id(self, city_id: UUID) -> bool:
        return self.db.query(DbCity.id).filter(DbCity.id == city_id).first() is not None

    def find_all(
        self,
        name: str | None = None,
        postal_code: str | None = None,
        page: int = 0,
        size: int = 20,
    ) -> Page[City]:
        offset = page_offset(page, size)
        query = self.db.query(DbCity)
        if name:
            query = query.filter(DbCity.name.ilike(f'%{name.strip()}%'))
        if postal_code:
            query = query.filter(DbCity.zip_code.like(f'%{postal_code.strip()}%'))

        total = query.count()
        rows = query.order_by(DbCity.name.asc(), DbCity.id.asc()).offset(offset).limit(size).all()
        return Page.of([self._to_domain(row) for row in rows], page=page, size=size, total_elements=total)

    @staticmethod
    def _to_domain(db_city: DbCity) -> City:
        return City(id=db_city.id, name=db_city.name, zip_code=db_city.zip_code)


class PracticeRepository:

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, practice: Practice) -> Practice:
        db_practice = DbPractice(
            id=practice.id or uuid.uuid4(),
            name=practice.name,
            street=practice.street,
            house_number=practice.house_number,
            postal_code=practice.postal_code,
            phone=practice.phone,
            email=practice.email,
            city_id=practice.city_id,
        )
        self.db.add(db_practice)
        self.db.flush()
        return self._to_domain(db_practice)

    def find_by_id(self, practice_id: UUID) -> Practice | None:
        db_practice = self.db.get(DbPractice, practice_id)
        return self._to_domain(db_practice) if db_practice else None

    def exists_by_id(self, practice_id: UUID) -> bool:
        return self.db.query(DbPractice.id).filter(DbPractice.id == practice_id).first() is not None

    def find_all(
        self,
        city_id: UUID | None = None,
        name: str | None = None,
        page: int = 0,
        size: int = 20,
    ) -> Page[Practice]:
        offset = page_offset(page, size)
        query = self.db.query(DbPractice)
        if city_id is not None:
            query = query.filter(DbPractice.city_id == city_id)
        if name:
            query = query.filter(DbPractice.name.ilike(f'%{name.strip()}%'))

        total = query.count()
        rows = query.order_by(DbPractice.name.asc(), DbPractice.id.asc()).offset(offset).limit(size).all()
        return Page.of([self._to_domain(row) for row in rows], page=page, size=size, total_elements=total)

    def update(self, practice: Practice) -> Practice:
        db_practice = self.db.get(DbPractice, practice.id)
        if db_practice is None:
            raise NotFoundError('Practice', practice.id)

        db_practice.name = practice.name
        db_practice.street = practice.street
        db_practice.house_number = practice.house_number
        db_practice.postal_code = practice.postal_code
        db_practice.phone = practice.phone
        db_practice.email = practice.email
        db_practice.city_id = practice.city_id
        self.db.flush()
        return self._to_domain(db_practice)

    def delete_by_id(self, practice_id: UUID) -> None:
        db_practice = self.db.get(DbPractice, practice_id)
        if db_practice is not None:
            self.db.delete(db_practice)
            self.db.flush()

    @staticmethod
    def _to_domain(db_practice: DbPractice) -> Practice:
        return Practice(
            id=db_practice.id,
            name=db_practice.name,
            street=db_practice.street,
            house_number=db_practice.house_number,
            postal_code=db_practice.postal_code,
            city_id=db_practice.city_id,
            phone=db_practice.phone,
            email=db_practice.email,
        )


class SpecialityRepository:

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, speciality: Speciality) -> Speciality:
        db_speciality = DbSpeciality(id=speciality.id or uuid.uuid4(), name=speciality.name)
        self.db.add(db_speciality)
        self.db.flush()
        return self._to_domain(db_speciality)

    def exists_by_name(self, name: SpecialityType) -> bool:
        return self.db.query(DbSpeciality.id).filter(DbSpeciality.name == name).first() is not None

    def find_existing_ids(self, speciality_ids: Iterable[UUID]) -> set[UUID]:
        ids = set(speciality_ids or ())
        if not ids:
            return set()
        rows = self.db.query(DbSpeciality.id).filter(DbSpeciality.id.in_(ids)).all()
        return {row.id for row in rows}

    def find_all(self) -> list[Speciality]:
        rows = self.db.query(DbSpeciality).order_by(DbSpeciality.name.asc()).all()
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(db_speciality: DbSpeciality) -> Speciality:
        return Speciality(id=db_speciality.id, name=SpecialityType(db_speciality.name))
