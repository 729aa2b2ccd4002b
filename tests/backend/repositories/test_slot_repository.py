import uuid
from datetime import datetime, time, timedelta, timezone

import pytest

from backend.core import config
from backend.core.exceptions import NotFoundError
from backend.domain.entities import Doctor, Slot, WorkingHours
from backend.domain.enums import SlotStatus, Weekday
from backend.repositories.doctor_repository import DoctorRepository
from backend.repositories.slot_repository import SlotRepository
from backend.repositories.working_hours_repository import WorkingHoursRepository


@pytest.fixture
def window(scheduling_db):
    doctor = DoctorRepository(scheduling_db).save(Doctor(id=None, first_name='Anna', last_name='Berg'))
    return WorkingHoursRepository(scheduling_db).save(
        WorkingHours(id=None, doctor_id=doctor.id, weekday=Weekday.MONDAY, start_time=time(8, 0), end_time=time(12, 0))
    )


def make_slot(working_hours_id, hour: int, minute: int = 0) -> Slot:
    start = datetime(2026, 1, 5, hour, minute, tzinfo=config.slot_zone())
    return Slot(id=None, working_hours_id=working_hours_id, start_time=start, end_time=start + timedelta(minutes=30))


def test_saved_slot_reads_back_in_the_slot_zone(scheduling_db, window) -> None:
    repository = SlotRepository(scheduling_db)
    saved = repository.save(make_slot(window.id, 8))
    scheduling_db.commit()
    scheduling_db.expire_all()

    loaded = repository.find_by_id(saved.id)

    assert loaded.start_time == datetime(2026, 1, 5, 8, 0, tzinfo=config.slot_zone())
    assert loaded.start_time.utcoffset() == timedelta(hours=1)
    assert loaded.status == SlotStatus.AVAILABLE


def test_transition_status_only_applies_from_expected_status(scheduling_db, window) -> None:
    repository = SlotRepository(scheduling_db)
    saved = repository.save(make_slot(window.id, 8))

    assert repository.transition_status(saved.id, SlotStatus.AVAILABLE, SlotStatus.BOOKED)
    assert not repository.transition_status(saved.id, SlotStatus.AVAILABLE, SlotStatus.BLOCKED)
    assert repository.exists_by_id_and_status(saved.id, SlotStatus.BOOKED)
    assert not repository.transition_status(uuid.uuid4(), SlotStatus.AVAILABLE, SlotStatus.BOOKED)


def test_modify_rewrites_slot_and_requires_existing_row(scheduling_db, window) -> None:
    repository = SlotRepository(scheduling_db)
    saved = repository.save(make_slot(window.id, 8))
    saved.status = SlotStatus.BLOCKED

    assert repository.modify(saved).status == SlotStatus.BLOCKED

    missing = make_slot(window.id, 9)
    missing.id = uuid.uuid4()
    with pytest.raises(NotFoundError):
        repository.modify(missing)


def test_find_all_by_working_hours_id_filters_by_status(scheduling_db, window) -> None:
    repository = SlotRepository(scheduling_db)
    first, second = repository.save_all([make_slot(window.id, 9), make_slot(window.id, 8)])
    repository.transition_status(first.id, SlotStatus.AVAILABLE, SlotStatus.BLOCKED)
    scheduling_db.expire_all()

    assert [slot.id for slot in repository.find_all_by_working_hours_id(window.id)] == [second.id, first.id]
    assert [slot.id for slot in repository.find_all_by_working_hours_id(window.id, SlotStatus.BLOCKED)] == [first.id]


def test_delete_operations(scheduling_db, window) -> None:
    repository = SlotRepository(scheduling_db)
    first, second, third = repository.save_all([make_slot(window.id, hour) for hour in (8, 9, 10)])

    repository.delete_by_id(first.id)
    assert not repository.exists_by_id(first.id)
    assert repository.delete_all_by_ids([second.id]) == 1
    assert repository.delete_all_by_ids([]) == 0
    assert repository.delete_all_by_working_hours_id(window.id) == 1
    assert not repository.exists_by_id(third.id)


def test_working_hours_overlap_lookup_is_scoped_to_doctor_and_weekday(scheduling_db, window) -> None:
    repository = WorkingHoursRepository(scheduling_db)

    assert repository.exists_overlapping(window.doctor_id, Weekday.MONDAY, time(11, 0), time(13, 0))
    assert not repository.exists_overlapping(window.doctor_id, Weekday.TUESDAY, time(11, 0), time(13, 0))
    assert not repository.exists_overlapping(uuid.uuid4(), Weekday.MONDAY, time(11, 0), time(13, 0))
    assert not repository.exists_overlapping(
        window.doctor_id, Weekday.MONDAY, time(11, 0), time(13, 0), exclude_id=window.id
    )
    assert [item.id for item in repository.find_all_by_doctor_id_and_weekday(window.doctor_id, Weekday.MONDAY)] == [
        window.id
    ]


def test_slots_in_the_repeated_autumn_hour_read_back_as_distinct_instants(scheduling_db, window) -> None:
    repository = SlotRepository(scheduling_db)
    first_pass = datetime(2026, 10, 25, 0, 0, tzinfo=timezone.utc)
    second_pass = first_pass + timedelta(hours=1)
    repository.save_all(
        [
            Slot(
                id=None,
                working_hours_id=window.id,
                start_time=start.astimezone(config.slot_zone()),
                end_time=(start + timedelta(minutes=30)).astimezone(config.slot_zone()),
            )
            for start in (second_pass, first_pass)
        ]
    )
    scheduling_db.commit()
    scheduling_db.expire_all()

    loaded = repository.find_all_by_working_hours_id(window.id)

    assert [slot.start_time.time() for slot in loaded] == [time(2, 0), time(2, 0)]
    assert [slot.start_time.utcoffset() for slot in loaded] == [timedelta(hours=2), timedelta(hours=1)]
    assert [slot.start_time.astimezone(timezone.utc) for slot in loaded] == [first_pass, second_pass]
