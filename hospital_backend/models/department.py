"""Department model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from hospital_backend.database import Base


class Department(Base):
    """Represents a hospital department."""
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)


class DoctorDepartment(Base):
    """Assigns a doctor to a department."""
    __tablename__ = "doctor_departments"
    __table_args__ = (
        UniqueConstraint("doctor_id", "department_id", name="uq_doctor_departments_doctor_department"),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
