import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from hospital_backend.database import Base  # noqa: E402
from hospital_backend.models.appointment import Appointment  # noqa: E402
from hospital_backend.models.department import Department, DoctorDepartment  # noqa: E402
from hospital_backend.models.doctor_shift import DoctorShift  # noqa: E402
from hospital_backend.models.user import User  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_department(db_session):
    def _make_department(name: str = 'General Medicine') -> Department:
        department = Department(name=name)
        db_session.add(department)
        db_session.commit()
        db_session.refresh(department)
        return department

    return _make_department


@pytest.fixture
def make_user(db_session):
    def _make_user(email: str, role: str = 'patient', full_name: str | None = None, is_active: bool = True) -> User:
        user = User(
            email=email,
            full_name=full_name or email.split('@')[0].title(),
            hashed_password='',
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_doctor(db_session, make_user):
    def _make_doctor(email: str, *departments: Department, is_active: bool = True, staff_id: str | None = None) -> User:
        doctor = make_user(email, role='doctor', is_active=is_active)
        doctor.staff_id = staff_id
        for department in departments:
            db_session.add(DoctorDepartment(doctor_id=doctor.id, department_id=department.id))
        db_session.commit()
        db_session.refresh(doctor)
        return doctor

    return _make_doctor


@pytest.fixture
def make_shift(db_session):
    def _make_shift(doctor: User, day_of_week: str, start: time, end: time, is_available: bool = True) -> DoctorShift:
        shift = DoctorShift(
            doctor_id=doctor.id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            is_available=is_available,
        )
        db_session.add(shift)
        db_session.commit()
        db_session.refresh(shift)
        return shift

    return _make_shift


@pytest.fixture
def make_appointment(db_session):
    def _make_appointment(
        patient: User,
        doctor: User,
        appointment_date: date,
        queue_number: int,
        appointment_time: str = '08:00',
        status: str = 'scheduled',
    ) -> Appointment:
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            status=status,
            reason='Checkup',
            notes=f'Queue number: {queue_number}',
            queue_number=queue_number,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return _make_appointment
