from datetime import time
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.exceptions import DoctorProviderError
from backend.routes.dependencies import database_unavailable, ensure_database_ready, get_db, to_http_exception
from backend.services.working_hours_service import WorkingHoursService

router = APIRouter(tags=['working-hours'])


class WorkingHoursRequest(BaseModel):
    weekday: int
    start_time: time
    end_time: time

    @field_validator('start_time', 'end_time')
    @classmethod
    def strip_seconds(cls, value: time) -> time:
        return value.replace(second=0, microsecond=0, tzinfo=None)


class WorkingHoursResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    weekday: int
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


@router.post(
    '/doctors/{doctor_id}/working-hours',
    response_model=WorkingHoursResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_working_hours(doctor_id: UUID, data: WorkingHoursRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return WorkingHoursService(db).create_working_hours(doctor_id, data.weekday, data.start_time, data.end_time)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/doctors/{doctor_id}/working-hours', response_model=list[WorkingHoursResponse])
def list_working_hours(doctor_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return WorkingHoursService(db).list_working_hours(doctor_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/working-hours/{working_hours_id}', response_model=WorkingHoursResponse)
def get_working_hours(working_hours_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return WorkingHoursService(db).get_working_hours(working_hours_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/working-hours/{working_hours_id}', response_model=WorkingHoursResponse)
def update_working_hours(working_hours_id: UUID, data: WorkingHoursRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return WorkingHoursService(db).update_working_hours(
            working_hours_id,
            data.weekday,
            data.start_time,
            data.end_time,
        )
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/working-hours/{working_hours_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_working_hours(working_hours_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        WorkingHoursService(db).delete_working_hours(working_hours_id)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
