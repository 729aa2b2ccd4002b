from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.exceptions import DoctorProviderError
from backend.domain.enums import SpecialityType
from backend.domain.page import validate_page_request
from backend.routes.dependencies import database_unavailable, ensure_database_ready, get_db, to_http_exception
from backend.services.directory_service import DirectoryService

router = APIRouter(tags=['directory'])

MAX_NAME_LENGTH = 120


class CreateCityRequest(BaseModel):
    name: str
    zip_code: str


class CityResponse(BaseModel):
    id: UUID
    name: str
    zip_code: str

    class Config:
        from_attributes = True


class PracticeRequest(BaseModel):
    name: str
    street: str
    house_number: str
    postal_code: str
    city_id: UUID
    phone: str | None = None
    email: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if not normalized:
            return None
        if '@' not in normalized:
            raise ValueError('Email must contain @.')

        return normalized


class PracticeResponse(BaseModel):
    id: UUID
    name: str
    street: str
    house_number: str
    postal_code: str
    city_id: UUID
    phone: str | None = None
    email: str | None = None

    class Config:
        from_attributes = True


class CreateSpecialityRequest(BaseModel):
    name: SpecialityType


class SpecialityResponse(BaseModel):
    id: UUID
    name: SpecialityType

    class Config:
        from_attributes = True


class DoctorRequest(BaseModel):
    first_name: str
    last_name: str
    practice_id: UUID | None = None
    speciality_ids: set[UUID] = Field(default_factory=set)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) > MAX_NAME_LENGTH:
            raise ValueError(f'Names must be {MAX_NAME_LENGTH} characters or fewer.')
        return normalized


class DoctorResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    practice_id: UUID | None = None
    speciality_ids: set[UUID]

    class Config:
        from_attributes = True


class PageResponse(BaseModel):
    page: int
    size: int
    total_elements: int = Field(alias='totalElements')
    total_pages: int = Field(alias='totalPages')

    class Config:
        from_attributes = True
        populate_by_name = True


class CityPageResponse(PageResponse):
    items: list[CityResponse]


class PracticePageResponse(PageResponse):
    items: list[PracticeResponse]


class DoctorPageResponse(PageResponse):
    items: list[DoctorResponse]


@router.post('/cities', response_model=CityResponse, status_code=status.HTTP_201_CREATED)
def create_city(data: CreateCityRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).create_city(data.name, data.zip_code)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/cities', response_model=CityPageResponse)
def list_cities(
    name: str | None = Query(default=None),
    postal_code: str | None = Query(default=None, alias='postalCode'),
    page: int = Query(default=0),
    size: int = Query(default=config.DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        validate_page_request(page, size, max_size=config.MAX_PAGE_SIZE)
        return DirectoryService(db).list_cities(name=name, postal_code=postal_code, page=page, size=size)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/practices', response_model=PracticeResponse, status_code=status.HTTP_201_CREATED)
def create_practice(data: PracticeRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).create_practice(
            name=data.name,
            street=data.street,
            house_number=data.house_number,
            postal_code=data.postal_code,
            city_id=data.city_id,
            phone=data.phone,
            email=data.email,
        )
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/practices', response_model=PracticePageResponse)
def list_practices(
    city_id: UUID | None = Query(default=None, alias='cityId'),
    name: str | None = Query(default=None),
    page: int = Query(default=0),
    size: int = Query(default=config.DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        validate_page_request(page, size, max_size=config.MAX_PAGE_SIZE)
        return DirectoryService(db).list_practices(city_id=city_id, name=name, page=page, size=size)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/practices/{practice_id}', response_model=PracticeResponse)
def get_practice(practice_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).get_practice(practice_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/practices/{practice_id}', response_model=PracticeResponse)
def update_practice(practice_id: UUID, data: PracticeRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).update_practice(
            practice_id,
            name=data.name,
            street=data.street,
            house_number=data.house_number,
            postal_code=data.postal_code,
            city_id=data.city_id,
            phone=data.phone,
            email=data.email,
        )
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/practices/{practice_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_practice(practice_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        DirectoryService(db).delete_practice(practice_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.post('/specialities', response_model=SpecialityResponse, status_code=status.HTTP_201_CREATED)
def create_speciality(data: CreateSpecialityRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).create_speciality(data.name)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/specialities', response_model=list[SpecialityResponse])
def list_specialities(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).list_specialities()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/doctors', response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(data: DoctorRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).create_doctor(
            first_name=data.first_name,
            last_name=data.last_name,
            practice_id=data.practice_id,
            speciality_ids=data.speciality_ids,
        )
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/doctors', response_model=DoctorPageResponse)
def list_doctors(
    first_name: str | None = Query(default=None, alias='firstName'),
    last_name: str | None = Query(default=None, alias='lastName'),
    practice_id: UUID | None = Query(default=None, alias='practiceId'),
    speciality_id: UUID | None = Query(default=None, alias='specialityId'),
    page: int = Query(default=0),
    size: int = Query(default=config.DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        validate_page_request(page, size, max_size=config.MAX_PAGE_SIZE)
        return DirectoryService(db).list_doctors(
            first_name=first_name,
            last_name=last_name,
            practice_id=practice_id,
            speciality_id=speciality_id,
            page=page,
            size=size,
        )
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/doctors/{doctor_id}', response_model=DoctorResponse)
def get_doctor(doctor_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).get_doctor(doctor_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/doctors/{doctor_id}', response_model=DoctorResponse)
def update_doctor(doctor_id: UUID, data: DoctorRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DirectoryService(db).update_doctor(
            doctor_id,
            first_name=data.first_name,
            last_name=data.last_name,
            practice_id=data.practice_id,
            speciality_ids=data.speciality_ids,
        )
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/doctors/{doctor_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_doctor(doctor_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        DirectoryService(db).delete_doctor(doctor_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
