import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hospital_backend.auth.dependencies import require_patient
from hospital_backend.database import ensure_appointment_schema, get_db
from hospital_backend.models.user import User
from hospital_backend.services.errors import (
    NoDoctorsInDepartment,
    QueueAssignmentConflict,
    SchedulingExhausted,
    SlotOutOfRange,
    StorageError,
)
from hospital_backend.services.repository import AppointmentRepository
from hospital_backend.services.scheduler import (
    BookingRequest,
    department_doctor_loads,
    list_available_slots,
    schedule_appointment,
)
from hospital_backend.services.slots import adjust_to_weekday, format_time

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 600
DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class BookAppointmentRequest(BaseModel):
    department_id: int
    reason: str
    appointment_date: date
    preferred_doctor_id: int | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Symptoms description is required.')
        if len(normalized) > MAX_REASON_LENGTH:
            raise ValueError(f'Symptoms description must be {MAX_REASON_LENGTH} characters or fewer.')
        return normalized

    @field_validator('appointment_date')
    @classmethod
    def validate_appointment_date(cls, value: date) -> date:
        if value < date.today():
            raise ValueError('Appointment date must be in the future.')
        return value


class AssignedDoctorResponse(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None
    staff_id: str | None = None


class BookedAppointmentResponse(BaseModel):
    appointment_id: int
    queue_number: int
    doctor: AssignedDoctorResponse
    department_name: str
    appointment_date: date
    appointment_time: str
    requested_date: date
    weekend_adjusted: bool
    rolled_over: bool
    status: str
    notes: str


class AvailableSlotsResponse(BaseModel):
    doctor_id: int
    date: date
    available_slots: list[str]


class DoctorLoadResponse(BaseModel):
    doctor_id: int
    full_name: str | None = None
    email: str | None = None
    staff_id: str | None = None
    current_patients: int
    max_patients: int
    shift_start: str
    shift_end: str
    has_capacity: bool


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def storage_unavailable(exc: StorageError) -> HTTPException:
    logger.error('Appointment storage failure: %s', exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


@router.post('/book', response_model=BookedAppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: BookAppointmentRequest,
    current_user: User = Depends(require_patient),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    repository = AppointmentRepository(db)

    try:
        department = repository.get_department(data.department_id)
        if department is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Department not found.',
            )

        booking_day = adjust_to_weekday(data.appointment_date)
        existing = repository.find_active_patient_appointment(current_user.id, booking_day)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f'You already have an appointment scheduled for {booking_day.isoformat()} '
                    f'at {existing.appointment_time}. You can only book one appointment per day.'
                ),
            )

        assignment = schedule_appointment(
            repository,
            BookingRequest(
                patient_id=current_user.id,
                department_id=data.department_id,
                reason=data.reason,
                requested_date=data.appointment_date,
                preferred_doctor_id=data.preferred_doctor_id,
            ),
        )
    except NoDoctorsInDepartment as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (SchedulingExhausted, QueueAssignmentConflict, SlotOutOfRange) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    return BookedAppointmentResponse(
        appointment_id=assignment.appointment_id,
        queue_number=assignment.queue_number,
        doctor=AssignedDoctorResponse(
            id=assignment.doctor.doctor_id,
            name=assignment.doctor.full_name,
            email=assignment.doctor.email,
            staff_id=assignment.doctor.staff_id,
        ),
        department_name=department.name,
        appointment_date=assignment.appointment_date,
        appointment_time=assignment.appointment_time,
        requested_date=assignment.requested_date,
        weekend_adjusted=assignment.weekend_adjusted,
        rolled_over=assignment.rolled_over,
        status=assignment.status,
        notes=assignment.notes,
    )


@router.get('/available-slots', response_model=AvailableSlotsResponse)
def get_available_slots(
    doctor_id: int = Query(..., ge=1),
    on_date: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        available_slots = list_available_slots(AppointmentRepository(db), doctor_id, on_date)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    return AvailableSlotsResponse(doctor_id=doctor_id, date=on_date, available_slots=available_slots)


@router.get('/departments/{department_id}/doctors', response_model=list[DoctorLoadResponse])
def list_department_doctors(
    department_id: int,
    on_date: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    repository = AppointmentRepository(db)

    try:
        if repository.get_department(department_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Department not found.',
            )

        loads = department_doctor_loads(repository, department_id, on_date)
    except StorageError as exc:
        raise storage_unavailable(exc) from exc

    return [
        DoctorLoadResponse(
            doctor_id=load.doctor.doctor_id,
            full_name=load.doctor.full_name,
            email=load.doctor.email,
            staff_id=load.doctor.staff_id,
            current_patients=load.current_patients,
            max_patients=load.shift.max_patients,
            shift_start=format_time(load.shift.start_time),
            shift_end=format_time(load.shift.end_time),
            has_capacity=load.has_capacity,
        )
        for load in loads
    ]
