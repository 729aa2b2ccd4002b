"""Reference data: cities, practices, specialities and doctors."""

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core import config
from backend.core.exceptions import InvalidArgumentError, NotFoundError
from backend.database import transaction
from backend.domain.entities import City, Doctor, Practice, Speciality
from backend.domain.enums import SpecialityType
from backend.domain.page import Page
from backend.repositories.doctor_repository import DoctorRepository
from backend.repositories.reference_repository import CityRepository, PracticeRepository, SpecialityRepository
from backend.repositories.slot_repository import SlotRepository
from backend.repositories.working_hours_repository import WorkingHoursRepository

logger = logging.getLogger(__name__)


def _require_text(value: str | None, field_name: str) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise InvalidArgumentError(f'{field_name} is required.')
    return normalized


class DirectoryService:

    def __init__(self, db: Session) -> None:
        self.db = db
        self.cities = CityRepository(db)
        self.practices = PracticeRepository(db)
        self.specialities = SpecialityRepository(db)
        self.doctors = DoctorRepository(db)
        self.working_hours = WorkingHoursRepository(db)
        self.slots = SlotRepository(db)

    def create_city(self, name: str, zip_code: str) -> City:
        city = City(id=None, name=_require_text(name, 'City name'), zip_code=_require_text(zip_code, 'Zip code'))
        with transaction(self.db):
            created = self.cities.save(city)
        return created

    def list_cities(
        self,
        name: str | None = None,
        postal_code: str | None = None,
        page: int = 0,
        size: int = config.DEFAULT_PAGE_SIZE,
    ) -> Page[City]:
        return self.cities.find_all(name=name, postal_code=postal_code, page=page, size=size)

    def create_practice(
        self,
        name: str,
        street: str,
        house_number: str,
        postal_code: str,
        city_id: UUID,
        phone: str | None = None,
        email: str | None = None,
    ) -> Practice:
        practice = Practice(
            id=None,
            name=_require_text(name, 'Practice name'),
            street=_require_text(street, 'Street'),
            house_number=_require_text(house_number, 'House number'),
            postal_code=_require_text(postal_code, 'Postal code'),
            city_id=city_id,
            phone=phone,
            email=email,
        )
        with transaction(self.db):
            if not self.cities.exists_by_id(city_id):
                raise NotFoundError('City', city_id)
            created = self.practices.save(practice)
        return created

    def get_practice(self, practice_id: UUID) -> Practice:
        practice = self.practices.find_by_id(practice_id)
        if practice is None:
            raise NotFoundError('Practice', practice_id)
        return practice

    def list_practices(
        self,
        city_id: UUID | None = None,
        name: str | None = None,
        page: int = 0,
        size: int = config.DEFAULT_PAGE_SIZE,
    ) -> Page[Practice]:
        return self.practices.find_all(city_id=city_id, name=name, page=page, size=size)

    def update_practice(
        self,
        practice_id: UUID,
        name: str,
        street: str,
        house_number: str,
        postal_code: str,
        city_id: UUID,
        phone: str | None = None,
        email: str | None = None,
    ) -> Practice:
        practice = Practice(
            id=practice_id,
            name=_require_text(name, 'Practice name'),
            street=_require_text(street, 'Street'),
            house_number=_require_text(house_number, 'House number'),
            postal_code=_require_text(postal_code, 'Postal code'),
            city_id=city_id,
            phone=phone,
            email=email,
        )
        with transaction(self.db):
            if not self.practices.exists_by_id(practice_id):
                raise NotFoundError('Practice', practice_id)
            if not self.cities.exists_by_id(city_id):
                raise NotFoundError('City', city_id)
            updated = self.practices.update(practice)
        return updated

    def delete_practice(self, practice_id: UUID) -> None:
        """Delete a practice; its doctors stay and lose their practice."""
        with transaction(self.db):
            if not self.practices.exists_by_id(practice_id):
                raise NotFoundError('Practice', practice_id)
            detached = self.doctors.detach_from_practice(practice_id)
            self.practices.delete_by_id(practice_id)

        logger.info('Deleted practice %s and detached %d doctors', practice_id, detached)

    def create_speciality(self, name: SpecialityType | str) -> Speciality:
        if not isinstance(name, SpecialityType):
            name = SpecialityType.from_value(name)

        with transaction(self.db):
            if self.specialities.exists_by_name(name):
                raise InvalidArgumentError(f'Speciality {name.value} already exists.')
            created = self.specialities.save(Speciality(id=None, name=name))
        return created

    def list_specialities(self) -> list[Speciality]:
        return self.specialities.find_all()

    def create_doctor(
        self,
        first_name: str,
        last_name: str,
        practice_id: UUID | None = None,
        speciality_ids: Iterable[UUID] = (),
    ) -> Doctor:
        doctor = Doctor(
            id=None,
            first_name=_require_text(first_name, 'First name'),
            last_name=_require_text(last_name, 'Last name'),
            practice_id=practice_id,
            speciality_ids=set(speciality_ids or ()),
        )
        with transaction(self.db):
            self._ensure_references(doctor)
            created = self.doctors.save(doctor)

        logger.info('Created doctor %s', created.id)
        return created

    def get_doctor(self, doctor_id: UUID) -> Doctor:
        doctor = self.doctors.find_by_id(doctor_id)
        if doctor is None:
            raise NotFoundError('Doctor', doctor_id)
        return doctor

    def list_doctors(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        practice_id: UUID | None = None,
        speciality_id: UUID | None = None,
        page: int = 0,
        size: int = config.DEFAULT_PAGE_SIZE,
    ) -> Page[Doctor]:
        return self.doctors.find_all_filtered(
            first_name=first_name,
            last_name=last_name,
            practice_id=practice_id,
            speciality_id=speciality_id,
            page=page,
            size=size,
        )

    def update_doctor(
        self,
        doctor_id: UUID,
        first_name: str,
        last_name: str,
        practice_id: UUID | None = None,
        speciality_ids: Iterable[UUID] = (),
    ) -> Doctor:
        doctor = Doctor(
            id=doctor_id,
            first_name=_require_text(first_name, 'First name'),
            last_name=_require_text(last_name, 'Last name'),
            practice_id=practice_id,
            speciality_ids=set(speciality_ids or ()),
        )
        with transaction(self.db):
            if not self.doctors.exists_by_id(doctor_id):
                raise NotFoundError('Doctor', doctor_id)
            self._ensure_references(doctor)
            updated = self.doctors.update(doctor)
        return updated

    def delete_doctor(self, doctor_id: UUID) -> None:
        with transaction(self.db):
            if not self.doctors.lock_by_id(doctor_id):
                raise NotFoundError('Doctor', doctor_id)

            windows = self.working_hours.find_all_by_doctor_id(doctor_id)
            removed_slots = 0
            for window in windows:
                removed_slots += self.slots.delete_all_by_working_hours_id(window.id)
                self.working_hours.delete_by_id(window.id)
            self.doctors.delete_by_id(doctor_id)

        logger.info('Deleted doctor %s with %d working hours and %d slots', doctor_id, len(windows), removed_slots)

    def _ensure_references(self, doctor: Doctor) -> None:
        if doctor.practice_id is not None and not self.practices.exists_by_id(doctor.practice_id):
            raise NotFoundError('Practice', doctor.practice_id)

        missing = doctor.speciality_ids - self.specialities.find_existing_ids(doctor.speciality_ids)
        if missing:
            raise NotFoundError('Speciality', ', '.join(sorted(str(speciality_id) for speciality_id in missing)))
