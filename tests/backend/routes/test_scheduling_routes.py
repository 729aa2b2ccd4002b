import uuid
from datetime import time

import pytest
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from backend.core.exceptions import (
    DoctorProviderError,
    InvalidTimeRangeError,
    InvalidTransitionError,
    NotFoundError,
    OverlappingWindowError,
)
from backend.routes.dependencies import to_http_exception
from backend.routes.slot_routes import SlotPageResponse, book_slot, get_slot, list_slots
from backend.routes.working_hours_routes import (
    WorkingHoursRequest,
    WorkingHoursResponse,
    create_working_hours,
    delete_working_hours,
    list_working_hours,
    update_working_hours,
)
from backend.services.directory_service import DirectoryService
from backend.services.working_hours_service import WorkingHoursService


@pytest.fixture(autouse=True)
def database_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.routes.working_hours_routes.ensure_database_ready', lambda: None)
    monkeypatch.setattr('backend.routes.slot_routes.ensure_database_ready', lambda: None)


@pytest.fixture
def doctor(scheduling_db):
    return DirectoryService(scheduling_db).create_doctor(first_name='Anna', last_name='Berg')


def list_all_slots(db, **filters):
    params = {
        'doctor_id': None,
        'working_hours_id': None,
        'date_from': None,
        'date_to': None,
        'slot_status': None,
        'page': 0,
        'size': 100,
    }
    params.update(filters)
    return list_slots(db=db, **params)


@pytest.mark.parametrize(
    ('error', 'status_code'),
    [
        (NotFoundError('Slot', 'abc'), 404),
        (InvalidTimeRangeError('Start time 10:00 must be before end time 09:00.'), 400),
        (OverlappingWindowError('overlap'), 409),
        (InvalidTransitionError('Cannot book a slot that is booked; it must be available.'), 409),
        (DoctorProviderError('unexpected'), 500),
    ],
)
def test_domain_errors_map_to_status_codes(error: DoctorProviderError, status_code: int) -> None:
    exception = to_http_exception(error)

    assert exception.status_code == status_code
    assert exception.detail == str(error)


def test_working_hours_request_drops_seconds() -> None:
    request = WorkingHoursRequest(weekday=1, start_time=time(8, 0, 30), end_time='12:00:00')

    assert request.start_time == time(8, 0)
    assert request.end_time == time(12, 0)


def test_working_hours_request_rejects_malformed_time() -> None:
    with pytest.raises(ValidationError):
        WorkingHoursRequest(weekday=1, start_time='eight', end_time='12:00')


def test_create_working_hours_returns_window(scheduling_db, doctor) -> None:
    created = create_working_hours(
        doctor_id=doctor.id,
        data=WorkingHoursRequest(weekday=2, start_time=time(8, 0), end_time=time(12, 0)),
        db=scheduling_db,
    )

    response = WorkingHoursResponse.model_validate(created)
    assert response.doctor_id == doctor.id
    assert response.weekday == 2
    assert response.start_time == time(8, 0)


def test_create_working_hours_maps_overlap_to_conflict(scheduling_db, doctor) -> None:
    data = WorkingHoursRequest(weekday=1, start_time=time(8, 0), end_time=time(12, 0))
    create_working_hours(doctor_id=doctor.id, data=data, db=scheduling_db)

    with pytest.raises(HTTPException) as exception_info:
        create_working_hours(
            doctor_id=doctor.id,
            data=WorkingHoursRequest(weekday=1, start_time=time(11, 0), end_time=time(13, 0)),
            db=scheduling_db,
        )

    assert exception_info.value.status_code == 409


@pytest.mark.parametrize(
    ('weekday', 'start', 'end'),
    [
        (0, time(8, 0), time(12, 0)),
        (8, time(8, 0), time(12, 0)),
        (1, time(12, 0), time(8, 0)),
    ],
)
def test_create_working_hours_maps_invalid_input_to_bad_request(scheduling_db, doctor, weekday, start, end) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_working_hours(
            doctor_id=doctor.id,
            data=WorkingHoursRequest(weekday=weekday, start_time=start, end_time=end),
            db=scheduling_db,
        )

    assert exception_info.value.status_code == 400


def test_working_hours_routes_map_missing_resources_to_not_found(scheduling_db) -> None:
    data = WorkingHoursRequest(weekday=1, start_time=time(8, 0), end_time=time(12, 0))

    for call in (
        lambda: create_working_hours(doctor_id=uuid.uuid4(), data=data, db=scheduling_db),
        lambda: list_working_hours(doctor_id=uuid.uuid4(), db=scheduling_db),
        lambda: update_working_hours(working_hours_id=uuid.uuid4(), data=data, db=scheduling_db),
        lambda: delete_working_hours(working_hours_id=uuid.uuid4(), db=scheduling_db),
    ):
        with pytest.raises(HTTPException) as exception_info:
            call()
        assert exception_info.value.status_code == 404


def test_slot_listing_serializes_page_contract(scheduling_db, doctor) -> None:
    created = create_working_hours(
        doctor_id=doctor.id,
        data=WorkingHoursRequest(weekday=3, start_time=time(8, 0), end_time=time(9, 0)),
        db=scheduling_db,
    )

    page = list_all_slots(scheduling_db, working_hours_id=created.id, size=3)
    payload = SlotPageResponse.model_validate(page).model_dump(by_alias=True, mode='json')

    assert set(payload) == {'items', 'page', 'size', 'totalElements', 'totalPages'}
    assert payload['page'] == 0
    assert payload['size'] == 3
    assert payload['totalElements'] == page.total_elements
    assert payload['totalPages'] == page.total_pages
    assert all(item['status'] == 'available' for item in payload['items'])


def test_slot_listing_rejects_oversized_pages(scheduling_db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_all_slots(scheduling_db, size=10_000)

    assert exception_info.value.status_code == 400


def test_slot_listing_rejects_unknown_status(scheduling_db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_all_slots(scheduling_db, slot_status='cancelled')

    assert exception_info.value.status_code == 400


def test_double_booking_maps_to_conflict(scheduling_db, doctor) -> None:
    created = create_working_hours(
        doctor_id=doctor.id,
        data=WorkingHoursRequest(weekday=4, start_time=time(8, 0), end_time=time(9, 0)),
        db=scheduling_db,
    )
    slot = list_all_slots(scheduling_db, working_hours_id=created.id).items[0]

    assert book_slot(slot_id=slot.id, db=scheduling_db).status.value == 'booked'
    with pytest.raises(HTTPException) as exception_info:
        book_slot(slot_id=slot.id, db=scheduling_db)

    assert exception_info.value.status_code == 409


def test_get_slot_maps_missing_slot_to_not_found(scheduling_db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_slot(slot_id=uuid.uuid4(), db=scheduling_db)

    assert exception_info.value.status_code == 404


def test_database_errors_map_to_service_unavailable(scheduling_db, doctor, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise OperationalError('SELECT 1', {}, Exception('connection refused'))

    monkeypatch.setattr(WorkingHoursService, 'list_working_hours', fail)

    with pytest.raises(HTTPException) as exception_info:
        list_working_hours(doctor_id=doctor.id, db=scheduling_db)

    assert exception_info.value.status_code == 503
    assert exception_info.value.detail == 'Database unavailable. Verify DATABASE_URL and Postgres credentials.'
