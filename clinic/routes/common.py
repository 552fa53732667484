from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from clinic.database import get_db
from clinic.repositories import AppointmentRepository, DoctorRepository, PatientRepository
from clinic.scheduling.availability import AvailabilityCalculator
from clinic.scheduling.lifecycle import AppointmentLifecycle
from clinic.scheduling.results import OperationResult, Outcome
from clinic.scheduling.search import DoctorSearchIndex
from clinic.scheduling.validation import ConflictValidator
from clinic.services.profiles import ProfileService

OUTCOME_STATUS_CODES = {
    Outcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    Outcome.CONFLICT: status.HTTP_409_CONFLICT,
    Outcome.INVALID: status.HTTP_400_BAD_REQUEST,
    Outcome.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    Outcome.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

REASON_MESSAGES = {
    'appointment_not_found': 'Appointment not found.',
    'doctor_not_found': 'Doctor not found.',
    'patient_not_found': 'Patient not found.',
    'slot_unavailable': 'Time slot not available.',
    'not_owner': 'You are not allowed to modify this appointment.',
    'invalid_transition': 'The appointment status does not allow this change.',
    'doctor_email_exists': 'Doctor with this email already exists.',
    'patient_exists': 'Patient with this email or phone already exists.',
    'invalid_condition': "Invalid condition. Use 'past' or 'future'.",
    'invalid_slot_template': 'Invalid slot template. Slots must be HH:MM-HH:MM, one per hour, without overlaps.',
    'internal_error': 'Internal server error.',
}


def raise_for_result(result: OperationResult) -> OperationResult:
    if result.ok:
        return result
    raise HTTPException(
        status_code=OUTCOME_STATUS_CODES[result.outcome],
        detail=REASON_MESSAGES.get(result.reason, 'Request declined.'),
    )


def get_availability(db: Session = Depends(get_db)) -> AvailabilityCalculator:
    return AvailabilityCalculator(DoctorRepository(db), AppointmentRepository(db))


def get_search_index(db: Session = Depends(get_db)) -> DoctorSearchIndex:
    return DoctorSearchIndex(DoctorRepository(db))


def get_lifecycle(db: Session = Depends(get_db)) -> AppointmentLifecycle:
    doctors = DoctorRepository(db)
    appointments = AppointmentRepository(db)
    validator = ConflictValidator(doctors, AvailabilityCalculator(doctors, appointments))
    return AppointmentLifecycle(doctors, PatientRepository(db), appointments, validator)


def get_profiles(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(DoctorRepository(db), PatientRepository(db), AppointmentRepository(db))
