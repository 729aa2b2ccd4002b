import uuid

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from backend.routes.directory_routes import (
    CreateCityRequest,
    CreateSpecialityRequest,
    DoctorPageResponse,
    DoctorRequest,
    PracticeRequest,
    create_city,
    create_doctor,
    create_practice,
    create_speciality,
    delete_doctor,
    delete_practice,
    get_doctor,
    get_practice,
    list_doctors,
    list_specialities,
    update_practice,
)


@pytest.fixture(autouse=True)
def database_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.routes.directory_routes.ensure_database_ready', lambda: None)


def search_doctors(db, **filters):
    params = {
        'first_name': None,
        'last_name': None,
        'practice_id': None,
        'speciality_id': None,
        'page': 0,
        'size': 20,
    }
    params.update(filters)
    return list_doctors(db=db, **params)


def test_practice_request_normalizes_email() -> None:
    request = PracticeRequest(
        name='Praxis Mitte',
        street='Invalidenstrasse',
        house_number='12',
        postal_code='10115',
        city_id=uuid.uuid4(),
        email=' Info@Praxis.DE ',
    )

    assert request.email == 'info@praxis.de'


def test_practice_request_rejects_malformed_email() -> None:
    with pytest.raises(ValidationError):
        PracticeRequest(
            name='Praxis Mitte',
            street='Invalidenstrasse',
            house_number='12',
            postal_code='10115',
            city_id=uuid.uuid4(),
            email='not-an-address',
        )


def test_create_speciality_request_rejects_unknown_speciality() -> None:
    with pytest.raises(ValidationError):
        CreateSpecialityRequest(name='astrology')


def test_create_practice_maps_unknown_city_to_not_found(scheduling_db) -> None:
    data = PracticeRequest(
        name='Praxis Mitte',
        street='Invalidenstrasse',
        house_number='12',
        postal_code='10115',
        city_id=uuid.uuid4(),
    )

    with pytest.raises(HTTPException) as exception_info:
        create_practice(data=data, db=scheduling_db)

    assert exception_info.value.status_code == 404


def test_duplicate_speciality_maps_to_bad_request(scheduling_db) -> None:
    create_speciality(data=CreateSpecialityRequest(name='cardiology'), db=scheduling_db)

    with pytest.raises(HTTPException) as exception_info:
        create_speciality(data=CreateSpecialityRequest(name='cardiology'), db=scheduling_db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Speciality cardiology already exists.'


def test_doctor_lifecycle(scheduling_db) -> None:
    city = create_city(data=CreateCityRequest(name='Berlin', zip_code='10115'), db=scheduling_db)
    practice = create_practice(
        data=PracticeRequest(
            name='Praxis Mitte',
            street='Invalidenstrasse',
            house_number='12',
            postal_code='10115',
            city_id=city.id,
        ),
        db=scheduling_db,
    )
    doctor = create_doctor(
        data=DoctorRequest(first_name='Anna', last_name='Berg', practice_id=practice.id),
        db=scheduling_db,
    )

    assert get_doctor(doctor_id=doctor.id, db=scheduling_db).practice_id == practice.id

    payload = DoctorPageResponse.model_validate(search_doctors(scheduling_db, last_name='berg')).model_dump(
        by_alias=True,
        mode='json',
    )
    assert payload['totalElements'] == 1
    assert payload['items'][0]['id'] == str(doctor.id)

    delete_doctor(doctor_id=doctor.id, db=scheduling_db)

    with pytest.raises(HTTPException) as exception_info:
        get_doctor(doctor_id=doctor.id, db=scheduling_db)
    assert exception_info.value.status_code == 404


def test_list_doctors_rejects_oversized_pages(scheduling_db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        search_doctors(scheduling_db, size=1000)

    assert exception_info.value.status_code == 400


def test_practice_update_and_delete(scheduling_db) -> None:
    city = create_city(data=CreateCityRequest(name='Berlin', zip_code='10115'), db=scheduling_db)
    data = PracticeRequest(
        name='Praxis Mitte',
        street='Invalidenstrasse',
        house_number='12',
        postal_code='10115',
        city_id=city.id,
    )
    practice = create_practice(data=data, db=scheduling_db)
    doctor = create_doctor(
        data=DoctorRequest(first_name='Anna', last_name='Berg', practice_id=practice.id),
        db=scheduling_db,
    )

    updated = update_practice(
        practice_id=practice.id,
        data=data.model_copy(update={'name': 'Praxis am Hauptbahnhof', 'phone': '030 1234'}),
        db=scheduling_db,
    )
    assert updated.name == 'Praxis am Hauptbahnhof'
    assert get_practice(practice_id=practice.id, db=scheduling_db).phone == '030 1234'

    delete_practice(practice_id=practice.id, db=scheduling_db)

    with pytest.raises(HTTPException) as exception_info:
        get_practice(practice_id=practice.id, db=scheduling_db)
    assert exception_info.value.status_code == 404
    assert get_doctor(doctor_id=doctor.id, db=scheduling_db).practice_id is None


def test_practice_update_and_delete_map_unknown_id_to_not_found(scheduling_db) -> None:
    city = create_city(data=CreateCityRequest(name='Berlin', zip_code='10115'), db=scheduling_db)
    data = PracticeRequest(
        name='Praxis Mitte',
        street='Invalidenstrasse',
        house_number='12',
        postal_code='10115',
        city_id=city.id,
    )

    with pytest.raises(HTTPException) as update_info:
        update_practice(practice_id=uuid.uuid4(), data=data, db=scheduling_db)
    with pytest.raises(HTTPException) as delete_info:
        delete_practice(practice_id=uuid.uuid4(), db=scheduling_db)

    assert update_info.value.status_code == 404
    assert delete_info.value.status_code == 404


def test_list_specialities_returns_a_plain_list(scheduling_db) -> None:
    create_speciality(data=CreateSpecialityRequest(name='neurology'), db=scheduling_db)
    create_speciality(data=CreateSpecialityRequest(name='cardiology'), db=scheduling_db)

    specialities = list_specialities(db=scheduling_db)

    assert [speciality.name.value for speciality in specialities] == ['cardiology', 'neurology']
