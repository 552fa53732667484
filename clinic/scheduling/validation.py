from datetime import datetime
from enum import Enum

from clinic.scheduling.availability import AvailabilityCalculator
from clinic.scheduling.ports import DoctorLookup
from clinic.scheduling.slots import appointment_hour, slot_hour


class ValidationResult(str, Enum):
    VALID = 'valid'
    SLOT_UNAVAILABLE = 'slot_unavailable'
    DOCTOR_NOT_FOUND = 'doctor_not_found'


class ConflictValidator:
    """Classifies a requested appointment time against current availability.

    The check does not reserve anything; the lifecycle repeats it inside its
    critical section before writing.
    """

    def __init__(self, doctors: DoctorLookup, availability: AvailabilityCalculator):
        self.doctors = doctors
        self.availability = availability

    def validate(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_appointment_id: int | None = None,
    ) -> ValidationResult:
        if self.doctors.find_by_id(doctor_id) is None:
            return ValidationResult.DOCTOR_NOT_FOUND

        free_slots = self.availability.availability(
            doctor_id,
            appointment_time.date(),
            exclude_appointment_id=exclude_appointment_id,
        )
        requested_hour = appointment_hour(appointment_time)
        if any(slot_hour(slot) == requested_hour for slot in free_slots):
            return ValidationResult.VALID
        return ValidationResult.SLOT_UNAVAILABLE
