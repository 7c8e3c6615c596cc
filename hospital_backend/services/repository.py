"""SQLAlchemy-backed storage used by the scheduler."""

import functools
from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, distinct, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hospital_backend.models.appointment import (
    STATUS_SCHEDULED,
    SLOT_RELEASING_STATUSES,
    UNLOADED_STATUSES,
    Appointment,
)
from hospital_backend.models.department import Department, DoctorDepartment
from hospital_backend.models.doctor_shift import DoctorShift
from hospital_backend.models.user import User
from hospital_backend.services.errors import QueueNumberTaken, StorageError


@dataclass(frozen=True)
class DoctorRecord:
    doctor_id: int
    full_name: str | None
    email: str | None
    staff_id: str | None


@dataclass(frozen=True)
class DoctorLoad:
    doctor: DoctorRecord
    current_patients: int


@dataclass(frozen=True)
class NewAppointment:
    patient_id: int
    doctor_id: int
    appointment_date: date
    appointment_time: str
    queue_number: int
    reason: str | None
    notes: str | None
    status: str = STATUS_SCHEDULED


QUEUE_NUMBER_CONSTRAINT = 'uq_appointments_doctor_date_queue'
# SQLite names the columns of a failed unique constraint instead of the constraint.
QUEUE_NUMBER_SQLITE_COLUMNS = 'appointments.doctor_id, appointments.appointment_date, appointments.queue_number'


def is_queue_number_clash(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return QUEUE_NUMBER_CONSTRAINT in message or QUEUE_NUMBER_SQLITE_COLUMNS in message


def _storage_call(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f'{method.__name__} failed: {exc}') from exc

    return wrapper


def _doctor_record(row) -> DoctorRecord:
    return DoctorRecord(
        doctor_id=row.id,
        full_name=row.full_name,
        email=row.email,
        staff_id=row.staff_id,
    )


class AppointmentRepository:
    """Reads and writes the rows the scheduler depends on.

    Every SQLAlchemy failure rolls the session back and is re-raised as
    ``StorageError``. A unique-constraint clash on insert is reported as
    ``QueueNumberTaken`` so the caller can recompute and retry.
    """

    def __init__(self, db: Session):
        self.db = db

    @_storage_call
    def list_doctors_in_department(self, department_id: int, on_date: date) -> list[DoctorLoad]:
        active_on_date = and_(
            Appointment.doctor_id == User.id,
            Appointment.appointment_date == on_date,
            Appointment.status.not_in(UNLOADED_STATUSES),
        )
        current_patients = func.count(distinct(Appointment.id)).label('current_patients')

        rows = (
            self.db.query(User.id, User.full_name, User.email, User.staff_id, current_patients)
            .join(DoctorDepartment, DoctorDepartment.doctor_id == User.id)
            .outerjoin(Appointment, active_on_date)
            .filter(
                DoctorDepartment.department_id == department_id,
                User.role == 'doctor',
                User.is_active.is_(True),
            )
            .group_by(User.id, User.full_name, User.email, User.staff_id)
            .order_by(current_patients.asc(), User.id.asc())
            .all()
        )

        return [DoctorLoad(doctor=_doctor_record(row), current_patients=row.current_patients) for row in rows]

    @_storage_call
    def get_doctor_in_department(self, doctor_id: int, department_id: int) -> DoctorRecord | None:
        row = (
            self.db.query(User.id, User.full_name, User.email, User.staff_id)
            .join(DoctorDepartment, DoctorDepartment.doctor_id == User.id)
            .filter(
                User.id == doctor_id,
                DoctorDepartment.department_id == department_id,
                User.role == 'doctor',
                User.is_active.is_(True),
            )
            .first()
        )
        return _doctor_record(row) if row else None

    @_storage_call
    def get_department(self, department_id: int) -> Department | None:
        return self.db.query(Department).filter(Department.id == department_id).first()

    @_storage_call
    def count_active_appointments(self, doctor_id: int, on_date: date) -> int:
        return (
            self.db.query(func.count(Appointment.id))
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on_date,
                Appointment.status.not_in(UNLOADED_STATUSES),
            )
            .scalar()
        ) or 0

    @_storage_call
    def get_shift(self, doctor_id: int, day_of_week: str) -> DoctorShift | None:
        return (
            self.db.query(DoctorShift)
            .filter(DoctorShift.doctor_id == doctor_id, DoctorShift.day_of_week == day_of_week)
            .first()
        )

    @_storage_call
    def max_queue_number(self, doctor_id: int, on_date: date) -> int | None:
        return (
            self.db.query(func.max(Appointment.queue_number))
            .filter(Appointment.doctor_id == doctor_id, Appointment.appointment_date == on_date)
            .scalar()
        )

    @_storage_call
    def list_booked_times(self, doctor_id: int, on_date: date) -> set[str]:
        rows = (
            self.db.query(Appointment.appointment_time)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on_date,
                Appointment.status.not_in(SLOT_RELEASING_STATUSES),
            )
            .all()
        )
        return {appointment_time for (appointment_time,) in rows}

    @_storage_call
    def find_active_patient_appointment(self, patient_id: int, on_date: date) -> Appointment | None:
        return (
            self.db.query(Appointment)
            .filter(
                Appointment.patient_id == patient_id,
                Appointment.appointment_date == on_date,
                Appointment.status.not_in(UNLOADED_STATUSES),
            )
            .first()
        )

    def insert_appointment(self, record: NewAppointment) -> Appointment:
        appointment = Appointment(
            patient_id=record.patient_id,
            doctor_id=record.doctor_id,
            appointment_date=record.appointment_date,
            appointment_time=record.appointment_time,
            status=record.status,
            reason=record.reason,
            notes=record.notes,
            queue_number=record.queue_number,
        )

        try:
            self.db.add(appointment)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if not is_queue_number_clash(exc):
                raise StorageError(f'insert_appointment failed: {exc}') from exc
            raise QueueNumberTaken(
                f'Queue number {record.queue_number} for doctor {record.doctor_id} '
                f'on {record.appointment_date} is already taken.'
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f'insert_appointment failed: {exc}') from exc

        self.db.refresh(appointment)
        return appointment
