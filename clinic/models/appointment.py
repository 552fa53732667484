"""Appointment model definitions."""

from enum import IntEnum

from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from clinic.database import Base


class AppointmentStatus(IntEnum):
    """Persisted status codes. Cancellation deletes the row and has no code."""

    SCHEDULED = 0
    COMPLETED = 1
    PRESCRIBED = 2


class Appointment(Base):
    """Represents a single booked slot with one doctor."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    appointment_time = Column(DateTime, nullable=False)
    status = Column(Integer, nullable=False, default=AppointmentStatus.SCHEDULED.value)

    doctor = relationship("Doctor", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")
