"""Doctor shift model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Time, UniqueConstraint
from hospital_backend.database import Base


class DoctorShift(Base):
    """A doctor's working window on one day of the week."""
    __tablename__ = "doctor_shifts"
    __table_args__ = (
        UniqueConstraint("doctor_id", "day_of_week", name="uq_doctor_shifts_doctor_day"),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(String, nullable=False)  # Monday..Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
