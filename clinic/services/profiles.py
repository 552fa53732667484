"""Doctor and patient profile management plus the per-role appointment listings."""

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from clinic.auth.gate import Identity
from clinic.models.appointment import AppointmentStatus
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient
from clinic.repositories import AppointmentRepository, DoctorRepository, PatientRepository
from clinic.scheduling.results import OperationResult, Outcome
from clinic.scheduling.slots import InvalidSlotError, validate_slot_template

logger = logging.getLogger(__name__)

PATIENT_CONDITIONS = {
    'past': AppointmentStatus.COMPLETED,
    'future': AppointmentStatus.SCHEDULED,
}


class ProfileService:
    def __init__(
        self,
        doctors: DoctorRepository,
        patients: PatientRepository,
        appointments: AppointmentRepository,
    ):
        self.doctors = doctors
        self.patients = patients
        self.appointments = appointments

    def create_doctor(
        self,
        name: str,
        email: str,
        specialty: str,
        available_times: list[str],
        phone: str | None = None,
    ) -> OperationResult:
        try:
            template = validate_slot_template(available_times)
        except InvalidSlotError as exc:
            return self._invalid_template('create_doctor', exc)

        try:
            if self.doctors.find_by_email(email) is not None:
                return OperationResult.declined(Outcome.CONFLICT, 'doctor_email_exists')

            doctor = self.doctors.add(
                Doctor(
                    name=name,
                    email=email.strip().lower(),
                    phone=phone,
                    specialty=specialty,
                    available_times=template,
                )
            )
        except SQLAlchemyError:
            return self._internal('create_doctor', self.doctors)

        logger.info('Created doctor %s', doctor.id)
        return OperationResult.success(doctor)

    def update_doctor(
        self,
        doctor_id: int,
        name: str | None = None,
        specialty: str | None = None,
        phone: str | None = None,
        available_times: list[str] | None = None,
    ) -> OperationResult:
        """Apply a profile update. This is the only path that changes a slot template."""
        template = None
        if available_times is not None:
            try:
                template = validate_slot_template(available_times)
            except InvalidSlotError as exc:
                return self._invalid_template('update_doctor', exc)

        try:
            doctor = self.doctors.find_by_id(doctor_id)
            if doctor is None:
                return OperationResult.declined(Outcome.NOT_FOUND, 'doctor_not_found')

            if name is not None:
                doctor.name = name
            if specialty is not None:
                doctor.specialty = specialty
            if phone is not None:
                doctor.phone = phone
            if template is not None:
                doctor.available_times = template

            doctor = self.doctors.save(doctor)
        except SQLAlchemyError:
            return self._internal('update_doctor', self.doctors)

        logger.info('Updated doctor %s', doctor_id)
        return OperationResult.success(doctor)

    def delete_doctor(self, doctor_id: int) -> OperationResult:
        try:
            doctor = self.doctors.find_by_id(doctor_id)
            if doctor is None:
                return OperationResult.declined(Outcome.NOT_FOUND, 'doctor_not_found')
            self.doctors.delete(doctor)
        except SQLAlchemyError:
            return self._internal('delete_doctor', self.doctors)

        logger.info('Deleted doctor %s and their appointments', doctor_id)
        return OperationResult.success()

    def create_patient(self, name: str, email: str, phone: str, address: str | None = None) -> OperationResult:
        try:
            if self.patients.find_by_email_or_phone(email, phone) is not None:
                return OperationResult.declined(Outcome.CONFLICT, 'patient_exists')

            patient = self.patients.add(
                Patient(name=name, email=email.strip().lower(), phone=phone.strip(), address=address)
            )
        except SQLAlchemyError:
            return self._internal('create_patient', self.patients)

        logger.info('Created patient %s', patient.id)
        return OperationResult.success(patient)

    def patient_details(self, identity: Identity) -> OperationResult:
        try:
            patient = self.patients.find_by_email(identity.email)
        except SQLAlchemyError:
            return self._internal('patient_details', self.patients)

        if patient is None:
            return OperationResult.declined(Outcome.NOT_FOUND, 'patient_not_found')
        return OperationResult.success(patient)

    def doctor_appointments(self, identity: Identity, day: date, patient_name: str | None = None) -> OperationResult:
        try:
            doctor = self.doctors.find_by_email(identity.email)
            if doctor is None:
                return OperationResult.declined(Outcome.NOT_FOUND, 'doctor_not_found')
            appointments = self.appointments.find_for_doctor_on_day(doctor.id, day, patient_name)
        except SQLAlchemyError:
            return self._internal('doctor_appointments', self.appointments)

        return OperationResult.success(appointments)

    def patient_appointments(
        self,
        identity: Identity,
        condition: str | None = None,
        doctor_name: str | None = None,
    ) -> OperationResult:
        status = None
        if condition is not None:
            status = PATIENT_CONDITIONS.get(condition.strip().lower())
            if status is None:
                return OperationResult.declined(Outcome.INVALID, 'invalid_condition')

        try:
            patient = self.patients.find_by_email(identity.email)
            if patient is None:
                return OperationResult.declined(Outcome.NOT_FOUND, 'patient_not_found')
            if status is not None and not doctor_name:
                appointments = self.appointments.find_by_patient_id_and_status(patient.id, status.value)
            else:
                appointments = self.appointments.find_for_patient(
                    patient.id,
                    status=status.value if status is not None else None,
                    doctor_name=doctor_name,
                )
        except SQLAlchemyError:
            return self._internal('patient_appointments', self.appointments)

        return OperationResult.success(appointments)

    def _invalid_template(self, operation: str, exc: InvalidSlotError) -> OperationResult:
        logger.info('Declined %s (invalid_slot_template): %s', operation, exc)
        return OperationResult.declined(Outcome.INVALID, 'invalid_slot_template')

    def _internal(self, operation: str, repository) -> OperationResult:
        logger.exception('Profile operation %s failed', operation)
        repository.rollback()
        return OperationResult.internal()
