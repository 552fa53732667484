"""Doctor model definitions."""

from sqlalchemy import Column, Integer, JSON, String
from sqlalchemy.orm import relationship

from clinic.database import Base


class Doctor(Base):
    """A doctor and the daily slot template they offer."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String)
    specialty = Column(String, nullable=False)
    # Ordered "HH:MM-HH:MM" strings; only changed through a profile update.
    available_times = Column(JSON, nullable=False, default=list)

    appointments = relationship("Appointment", back_populates="doctor", cascade="all, delete-orphan")
