from datetime import time

import pytest
from fastapi import HTTPException, Response
from pydantic import ValidationError

from hospital_backend.auth.dependencies import require_admin
from hospital_backend.models.doctor_shift import DoctorShift
from hospital_backend.routes.shift_routes import (
    CreateShiftRequest,
    create_doctor_shift,
    list_doctor_shifts,
    remove_doctor_shift,
    router,
)


@pytest.fixture
def staff(make_department, make_doctor, make_user):
    department = make_department('Orthopedics')
    return {
        'doctor': make_doctor('bones@hospital.test', department),
        'admin': make_user('admin@hospital.test', role='admin'),
    }


def test_create_shift_request_normalizes_day_of_week() -> None:
    request = CreateShiftRequest(day_of_week=' wednesday ', start_time=time(9, 0), end_time=time(13, 0))

    assert request.day_of_week == 'Wednesday'


@pytest.mark.parametrize(
    ('day_of_week', 'start_time', 'end_time'),
    [
        ('Someday', time(9, 0), time(13, 0)),
        ('Monday', time(13, 0), time(9, 0)),
        ('Monday', time(9, 0), time(9, 0)),
    ],
)
def test_create_shift_request_rejects_invalid_shifts(day_of_week: str, start_time: time, end_time: time) -> None:
    with pytest.raises(ValidationError):
        CreateShiftRequest(day_of_week=day_of_week, start_time=start_time, end_time=end_time)


def test_create_doctor_shift_returns_capacity(db_session, staff) -> None:
    response = create_doctor_shift(
        doctor_id=staff['doctor'].id,
        data=CreateShiftRequest(day_of_week='monday', start_time=time(8, 0), end_time=time(10, 0)),
        response=Response(),
        current_user=staff['admin'],
        db=db_session,
    )

    assert response.day_of_week == 'Monday'
    assert response.max_patients == 4
    assert db_session.query(DoctorShift).count() == 1


def test_create_doctor_shift_replaces_existing_weekday(db_session, staff, make_shift) -> None:
    existing = make_shift(staff['doctor'], 'Monday', time(8, 0), time(12, 0))
    response = Response()

    shift = create_doctor_shift(
        doctor_id=staff['doctor'].id,
        data=CreateShiftRequest(day_of_week='Monday', start_time=time(13, 0), end_time=time(17, 0)),
        response=response,
        current_user=staff['admin'],
        db=db_session,
    )

    assert response.status_code == 200
    assert shift.id == existing.id
    assert (shift.start_time, shift.end_time, shift.max_patients) == (time(13, 0), time(17, 0), 9)
    assert db_session.query(DoctorShift).count() == 1


def test_every_shift_route_requires_admin() -> None:
    for route in router.routes:
        dependency_calls = {dependency.call for dependency in route.dependant.dependencies}
        assert require_admin in dependency_calls, route.path


def test_create_doctor_shift_rejects_unknown_doctor(db_session, staff) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_doctor_shift(
            doctor_id=staff['admin'].id,
            data=CreateShiftRequest(day_of_week='Monday', start_time=time(8, 0), end_time=time(12, 0)),
            response=Response(),
            current_user=staff['admin'],
            db=db_session,
        )

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Doctor not found.'


def test_list_doctor_shifts_orders_by_weekday(db_session, staff, make_shift) -> None:
    make_shift(staff['doctor'], 'Friday', time(8, 0), time(12, 0))
    make_shift(staff['doctor'], 'Monday', time(8, 0), time(10, 0))
    make_shift(staff['doctor'], 'Wednesday', time(8, 0), time(12, 0), is_available=False)

    response = list_doctor_shifts(doctor_id=staff['doctor'].id, current_user=staff['admin'], db=db_session)

    assert [shift.day_of_week for shift in response] == ['Monday', 'Wednesday', 'Friday']
    assert [shift.max_patients for shift in response] == [4, 0, 9]


def test_remove_doctor_shift_deletes_row(db_session, staff, make_shift) -> None:
    shift = make_shift(staff['doctor'], 'Tuesday', time(8, 0), time(12, 0))

    remove_doctor_shift(doctor_id=staff['doctor'].id, shift_id=shift.id, current_user=staff['admin'], db=db_session)

    assert db_session.query(DoctorShift).count() == 0


def test_remove_doctor_shift_returns_not_found_when_missing(db_session, staff) -> None:
    with pytest.raises(HTTPException) as exception_info:
        remove_doctor_shift(doctor_id=staff['doctor'].id, shift_id=404, current_user=staff['admin'], db=db_session)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Shift not found.'
