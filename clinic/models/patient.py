"""Patient model definitions."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from clinic.database import Base


class Patient(Base):
    """Represents a registered patient."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, unique=True, nullable=False)
    address = Column(String)

    appointments = relationship("Appointment", back_populates="patient")
