"""User model definitions."""

from sqlalchemy import Boolean, Column, Integer, String
from hospital_backend.database import Base


class User(Base):
    """Represents an application user: patient, doctor or admin."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    full_name = Column(String)
    staff_id = Column(String, unique=True, nullable=True)
    hashed_password = Column(String)
    role = Column(String)  # patient/doctor/admin
    is_active = Column(Boolean, default=True, nullable=False)
