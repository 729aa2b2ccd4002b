from datetime import date, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.exceptions import DoctorProviderError
from backend.domain.enums import SlotStatus
from backend.domain.page import validate_page_request
from backend.routes.dependencies import database_unavailable, ensure_database_ready, get_db, to_http_exception
from backend.services.slot_service import SlotService

router = APIRouter(tags=['slots'])


class SlotResponse(BaseModel):
    id: UUID
    working_hours_id: UUID
    start_time: datetime
    end_time: datetime
    date: date
    status: SlotStatus

    class Config:
        from_attributes = True


class SlotPageResponse(BaseModel):
    items: list[SlotResponse]
    page: int
    size: int
    total_elements: int = Field(alias='totalElements')
    total_pages: int = Field(alias='totalPages')

    class Config:
        from_attributes = True
        populate_by_name = True


@router.get('/slots', response_model=SlotPageResponse)
def list_slots(
    doctor_id: UUID | None = Query(default=None, alias='doctorId'),
    working_hours_id: UUID | None = Query(default=None, alias='workingHoursId'),
    date_from: date | None = Query(default=None, alias='dateFrom'),
    date_to: date | None = Query(default=None, alias='dateTo'),
    slot_status: str | None = Query(default=None, alias='status'),
    page: int = Query(default=0),
    size: int = Query(default=config.DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        validate_page_request(page, size, max_size=config.MAX_PAGE_SIZE)
        slot_page = SlotService(db).find_all_slots(
            doctor_id=doctor_id,
            working_hours_id=working_hours_id,
            date_from=date_from,
            date_to=date_to,
            status=slot_status,
            page=page,
            size=size,
        )
        return SlotPageResponse.model_validate(slot_page)
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/slots/{slot_id}', response_model=SlotResponse)
def get_slot(slot_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return SlotResponse.model_validate(SlotService(db).get_slot(slot_id))
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/slots/{slot_id}/block', response_model=SlotResponse)
def block_slot(slot_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return SlotResponse.model_validate(SlotService(db).block_slot(slot_id))
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.put('/slots/{slot_id}/unblock', response_model=SlotResponse)
def unblock_slot(slot_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return SlotResponse.model_validate(SlotService(db).unblock_slot(slot_id))
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.put('/slots/{slot_id}/book', response_model=SlotResponse)
def book_slot(slot_id: UUID, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return SlotResponse.model_validate(SlotService(db).book_slot(slot_id))
    except DoctorProviderError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
