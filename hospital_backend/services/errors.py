"""Exceptions raised by the scheduling service."""


class SchedulingError(Exception):
    """A booking request could not be turned into an appointment."""


class NoDoctorsInDepartment(SchedulingError):
    def __init__(self, department_id: int):
        self.department_id = department_id
        super().__init__(f'No available doctors found for department {department_id}.')


class SchedulingExhausted(SchedulingError):
    def __init__(self, department_id: int, attempted_dates: list):
        self.department_id = department_id
        self.attempted_dates = attempted_dates
        super().__init__(
            f'All doctors in this department are fully booked for the next {len(attempted_dates)} weekdays. '
            'Please try a later date or contact the hospital.'
        )


class QueueAssignmentConflict(SchedulingError):
    def __init__(self, doctor_id: int, appointment_date, attempts: int):
        self.doctor_id = doctor_id
        self.appointment_date = appointment_date
        self.attempts = attempts
        super().__init__(
            f'Could not reserve a queue number for doctor {doctor_id} on {appointment_date} '
            f'after {attempts} attempts. Please retry.'
        )


class SlotOutOfRange(SchedulingError):
    pass


class StorageError(Exception):
    """The appointment store failed to answer a query or write."""


class QueueNumberTaken(Exception):
    """Another booking committed the same (doctor, date, queue number) first."""
