"""Appointment model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from hospital_backend.database import Base


class Appointment(Base):
    """Represents a scheduled appointment and its place in a doctor's queue."""
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint(
            "doctor_id",
            "appointment_date",
            "queue_number",
            name="uq_appointments_doctor_date_queue",
        ),
        Index("idx_appointments_doctor_date", "doctor_id", "appointment_date"),
    )

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # HH:MM
    status = Column(String, default="scheduled", nullable=False)
    reason = Column(String)
    notes = Column(String)
    queue_number = Column(Integer, nullable=False)


STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUS_NO_SHOW = "no-show"

# Appointments in these states no longer count toward a doctor's daily load.
UNLOADED_STATUSES = (STATUS_CANCELLED, STATUS_COMPLETED, STATUS_NO_SHOW)
# Appointments in these states no longer hold their time slot.
SLOT_RELEASING_STATUSES = (STATUS_CANCELLED, STATUS_NO_SHOW)
