"""Automatic doctor assignment and queue numbering for appointment bookings.

A booking names a department and a wished-for date. The scheduler moves
weekend dates to the next Monday, picks the least loaded active doctor of the
department who still has room in that day's shift, and rolls forward one
weekday at a time when every doctor is full. The chosen doctor's next queue
number fixes the time slot: the shift start plus 25 minutes per patient ahead.

All functions are stateless and receive the repository explicitly; the
database is the only place load and queue numbers live.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from enum import Enum

from hospital_backend.core import config
from hospital_backend.services.errors import (
    NoDoctorsInDepartment,
    QueueAssignmentConflict,
    QueueNumberTaken,
    SchedulingExhausted,
    SlotOutOfRange,
    StorageError,
)
from hospital_backend.services.repository import DoctorRecord, NewAppointment
from hospital_backend.services.slots import (
    DEFAULT_SHIFT_END,
    DEFAULT_SHIFT_START,
    adjust_to_weekday,
    capacity_for_window,
    compute_time_slot,
    format_time,
    listing_grid,
    next_candidate_date,
    next_queue_number,
    parse_calendar_date,
    parse_time_of_day,
    weekday_name,
)

logger = logging.getLogger(__name__)


class SelectionOutcome(Enum):
    ASSIGNED = 'assigned'
    NO_DOCTORS = 'no_doctors'
    ALL_FULL = 'all_full'


@dataclass(frozen=True)
class ShiftCapacity:
    max_patients: int
    start_time: time
    end_time: time


DEFAULT_SHIFT = ShiftCapacity(
    max_patients=capacity_for_window(DEFAULT_SHIFT_START, DEFAULT_SHIFT_END),
    start_time=DEFAULT_SHIFT_START,
    end_time=DEFAULT_SHIFT_END,
)


@dataclass(frozen=True)
class DoctorAssignment:
    doctor: DoctorRecord
    current_patients: int
    shift: ShiftCapacity

    @property
    def has_capacity(self) -> bool:
        return self.current_patients < self.shift.max_patients


@dataclass(frozen=True)
class DoctorSelection:
    outcome: SelectionOutcome
    assignment: DoctorAssignment | None = None


@dataclass(frozen=True)
class BookingRequest:
    patient_id: int
    department_id: int
    reason: str | None
    requested_date: date | str
    preferred_doctor_id: int | None = None


@dataclass(frozen=True)
class AppointmentAssignment:
    appointment_id: int
    queue_number: int
    doctor: DoctorRecord
    appointment_date: date
    appointment_time: str
    status: str
    requested_date: date
    weekend_adjusted: bool
    rolled_over: bool
    notes: str


def resolve_shift_capacity(repository, doctor_id: int, on_date: date) -> ShiftCapacity:
    """Working window and patient capacity of a doctor on a calendar date.

    A doctor without a shift row for the weekday, or whose row is marked
    unavailable, works the default 08:00-16:00 shift.

    When the shift lookup itself fails the default shift is returned as well,
    so a storage error on this read never blocks booking. Every other store
    failure in the scheduler propagates.
    """
    try:
        shift = repository.get_shift(doctor_id, weekday_name(on_date))
    except StorageError:
        logger.warning(
            'Shift lookup failed for doctor %s on %s; using default %s-%s shift.',
            doctor_id,
            on_date,
            format_time(DEFAULT_SHIFT_START),
            format_time(DEFAULT_SHIFT_END),
            exc_info=True,
        )
        return DEFAULT_SHIFT

    if shift is None or not shift.is_available:
        return DEFAULT_SHIFT

    start_time = parse_time_of_day(shift.start_time)
    end_time = parse_time_of_day(shift.end_time)
    max_patients = capacity_for_window(start_time, end_time)

    if end_time <= start_time:
        logger.warning(
            'Doctor %s has a %s shift ending at %s before it starts at %s; treating as fully booked.',
            doctor_id,
            weekday_name(on_date),
            format_time(end_time),
            format_time(start_time),
        )

    return ShiftCapacity(max_patients=max_patients, start_time=start_time, end_time=end_time)


def select_doctor(repository, department_id: int, on_date: date) -> DoctorSelection:
    """Least loaded doctor of a department with room left on ``on_date``.

    Candidates are ordered by current patient count and then by doctor id, so
    ties always go to the lowest id.
    """
    loads = repository.list_doctors_in_department(department_id, on_date)
    if not loads:
        return DoctorSelection(SelectionOutcome.NO_DOCTORS)

    for load in loads:
        shift = resolve_shift_capacity(repository, load.doctor.doctor_id, on_date)
        candidate = DoctorAssignment(doctor=load.doctor, current_patients=load.current_patients, shift=shift)
        if candidate.has_capacity:
            return DoctorSelection(SelectionOutcome.ASSIGNED, candidate)

    return DoctorSelection(SelectionOutcome.ALL_FULL)


def department_doctor_loads(repository, department_id: int, on_date: date) -> list[DoctorAssignment]:
    return [
        DoctorAssignment(
            doctor=load.doctor,
            current_patients=load.current_patients,
            shift=resolve_shift_capacity(repository, load.doctor.doctor_id, on_date),
        )
        for load in repository.list_doctors_in_department(department_id, on_date)
    ]


def _preferred_doctor_assignment(repository, request: BookingRequest, on_date: date) -> DoctorAssignment | None:
    doctor = repository.get_doctor_in_department(request.preferred_doctor_id, request.department_id)
    if doctor is None:
        logger.info(
            'Preferred doctor %s is not an active member of department %s; selecting automatically.',
            request.preferred_doctor_id,
            request.department_id,
        )
        return None

    shift = resolve_shift_capacity(repository, doctor.doctor_id, on_date)
    current_patients = repository.count_active_appointments(doctor.doctor_id, on_date)
    candidate = DoctorAssignment(doctor=doctor, current_patients=current_patients, shift=shift)

    if not candidate.has_capacity:
        logger.info('Preferred doctor %s is fully booked on %s; selecting automatically.', doctor.doctor_id, on_date)
        return None

    return candidate


def build_scheduling_notes(
    queue_number: int,
    requested_date: date,
    weekend_adjusted: bool,
    rolled_over: bool,
) -> str:
    notes = f'Queue number: {queue_number}'
    if weekend_adjusted:
        notes += ' | [Weekend booking adjusted to Monday]'
    if rolled_over:
        notes += f' | [Rescheduled from {requested_date.isoformat()} - doctors were fully booked]'
    return notes


def _find_available_doctor(
    repository,
    department_id: int,
    on_date: date,
    attempted_dates: list[date],
    max_attempt_days: int,
) -> tuple[DoctorAssignment, date]:
    """Walk forward from ``on_date`` until a department doctor has room.

    ``attempted_dates`` is extended in place with every candidate date tried,
    so a caller that comes back after a doctor filled up keeps one budget for
    the whole booking.
    """
    while True:
        if not attempted_dates or attempted_dates[-1] != on_date:
            if len(attempted_dates) >= max_attempt_days:
                raise SchedulingExhausted(department_id, attempted_dates)
            attempted_dates.append(on_date)

        selection = select_doctor(repository, department_id, on_date)
        if selection.outcome is SelectionOutcome.NO_DOCTORS:
            raise NoDoctorsInDepartment(department_id)
        if selection.outcome is SelectionOutcome.ASSIGNED:
            return selection.assignment, on_date

        logger.info(
            'All doctors in department %s are fully booked on %s; trying the next weekday.',
            department_id,
            on_date,
        )
        on_date = next_candidate_date(on_date)


def schedule_appointment(
    repository,
    request: BookingRequest,
    *,
    max_attempt_days: int | None = None,
    queue_retries: int | None = None,
) -> AppointmentAssignment:
    """Assign a doctor, queue number and time slot to a booking and persist it.

    Capacity is checked again right before every insert, after the queue
    number has been read. An insert can only succeed when nothing was
    committed for that doctor and date in between, so a doctor that filled up
    under concurrent bookings is dropped and selection resumes, rolling over
    to later weekdays as needed.

    Raises ``NoDoctorsInDepartment`` when the department has no active
    doctors, ``SchedulingExhausted`` when every candidate day is full,
    ``QueueAssignmentConflict`` when concurrent bookings keep claiming the
    computed queue number and ``StorageError`` when the store fails.
    """
    if max_attempt_days is None:
        max_attempt_days = config.SCHEDULING_MAX_ATTEMPT_DAYS
    if queue_retries is None:
        queue_retries = config.QUEUE_ASSIGNMENT_RETRIES

    requested_date = parse_calendar_date(request.requested_date)
    appointment_date = adjust_to_weekday(requested_date)
    weekend_adjusted = appointment_date != requested_date

    attempted_dates: list[date] = []
    assignment = None
    if request.preferred_doctor_id is not None:
        assignment = _preferred_doctor_assignment(repository, request, appointment_date)
        if assignment is not None:
            attempted_dates.append(appointment_date)

    conflicts = 0
    while True:
        if assignment is None:
            assignment, appointment_date = _find_available_doctor(
                repository,
                request.department_id,
                appointment_date,
                attempted_dates,
                max_attempt_days,
            )

        doctor_id = assignment.doctor.doctor_id
        queue_number = next_queue_number(repository.max_queue_number(doctor_id, appointment_date))
        current_patients = repository.count_active_appointments(doctor_id, appointment_date)
        if current_patients >= assignment.shift.max_patients:
            logger.info(
                'Doctor %s filled up on %s while booking (%s of %s); selecting again.',
                doctor_id,
                appointment_date,
                current_patients,
                assignment.shift.max_patients,
            )
            assignment = None
            continue

        try:
            appointment_time = compute_time_slot(queue_number, assignment.shift.start_time)
        except OverflowError as exc:
            raise SlotOutOfRange(str(exc)) from exc

        rolled_over = len(attempted_dates) > 1
        notes = build_scheduling_notes(queue_number, requested_date, weekend_adjusted, rolled_over)
        record = NewAppointment(
            patient_id=request.patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            queue_number=queue_number,
            reason=request.reason,
            notes=notes,
        )

        try:
            appointment = repository.insert_appointment(record)
        except QueueNumberTaken:
            conflicts += 1
            logger.info(
                'Queue number %s for doctor %s on %s was claimed concurrently (attempt %s of %s).',
                queue_number,
                doctor_id,
                appointment_date,
                conflicts,
                queue_retries,
            )
            if conflicts >= queue_retries:
                raise QueueAssignmentConflict(doctor_id, appointment_date, queue_retries)
            continue

        logger.info(
            'Scheduled appointment %s: patient %s with doctor %s on %s at %s (queue %s).',
            appointment.id,
            request.patient_id,
            doctor_id,
            appointment_date,
            appointment_time,
            queue_number,
        )
        return AppointmentAssignment(
            appointment_id=appointment.id,
            queue_number=queue_number,
            doctor=assignment.doctor,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            status=record.status,
            requested_date=requested_date,
            weekend_adjusted=weekend_adjusted,
            rolled_over=rolled_over,
            notes=notes,
        )


def list_available_slots(repository, doctor_id: int, on_date: date | str) -> list[str]:
    """Free 30-minute slots between 09:00 and 17:00 for a doctor and date.

    This listing uses its own fixed 9-5 half-hour grid. It does not follow the
    doctor's shift or the 25-minute queue grid used by ``schedule_appointment``,
    so a slot listed here is not necessarily the time a booking would receive.
    """
    booked_times = repository.list_booked_times(doctor_id, parse_calendar_date(on_date))
    return [slot for slot in listing_grid() if slot not in booked_times]
