from datetime import time

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hospital_backend.auth.dependencies import require_admin
from hospital_backend.database import get_db
from hospital_backend.models.doctor_shift import DoctorShift
from hospital_backend.models.user import User
from hospital_backend.services.slots import WEEKDAY_NAMES, capacity_for_window, normalize_weekday_name

router = APIRouter(tags=['doctor-shifts'])

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class CreateShiftRequest(BaseModel):
    day_of_week: str
    start_time: time
    end_time: time
    is_available: bool = True

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, value: str) -> str:
        return normalize_weekday_name(value)

    @model_validator(mode='after')
    def validate_window(self) -> 'CreateShiftRequest':
        if self.end_time <= self.start_time:
            raise ValueError('Shift end time must be after its start time.')
        return self


class ShiftResponse(BaseModel):
    id: int
    doctor_id: int
    day_of_week: str
    start_time: time
    end_time: time
    is_available: bool
    max_patients: int


def to_shift_response(shift: DoctorShift) -> ShiftResponse:
    return ShiftResponse(
        id=shift.id,
        doctor_id=shift.doctor_id,
        day_of_week=shift.day_of_week,
        start_time=shift.start_time,
        end_time=shift.end_time,
        is_available=shift.is_available,
        max_patients=capacity_for_window(shift.start_time, shift.end_time) if shift.is_available else 0,
    )


def get_doctor_or_404(doctor_id: int, db: Session) -> User:
    doctor = db.query(User).filter(User.id == doctor_id, User.role == 'doctor').first()
    if doctor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Doctor not found.',
        )
    return doctor


@router.get('/{doctor_id}/shifts', response_model=list[ShiftResponse])
def list_doctor_shifts(
    doctor_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    del current_user

    try:
        get_doctor_or_404(doctor_id, db)
        shifts = db.query(DoctorShift).filter(DoctorShift.doctor_id == doctor_id).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    shifts.sort(key=lambda shift: WEEKDAY_NAMES.index(shift.day_of_week))
    return [to_shift_response(shift) for shift in shifts]


@router.post('/{doctor_id}/shifts', response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
def create_doctor_shift(
    doctor_id: int,
    data: CreateShiftRequest,
    response: Response,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Create the doctor's shift for a weekday, or replace the existing one."""
    del current_user

    try:
        get_doctor_or_404(doctor_id, db)

        shift = db.query(DoctorShift).filter(
            DoctorShift.doctor_id == doctor_id,
            DoctorShift.day_of_week == data.day_of_week,
        ).first()
        if shift is None:
            shift = DoctorShift(doctor_id=doctor_id, day_of_week=data.day_of_week)
            db.add(shift)
        else:
            response.status_code = status.HTTP_200_OK

        shift.start_time = data.start_time
        shift.end_time = data.end_time
        shift.is_available = data.is_available
        db.commit()
        db.refresh(shift)

        return to_shift_response(shift)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.delete('/{doctor_id}/shifts/{shift_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_doctor_shift(
    doctor_id: int,
    shift_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    del current_user

    try:
        shift = db.query(DoctorShift).filter(
            DoctorShift.id == shift_id,
            DoctorShift.doctor_id == doctor_id,
        ).first()

        if not shift:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Shift not found.',
            )

        db.delete(shift)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc
