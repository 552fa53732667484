"""Appointment state machine.

``Scheduled`` is the only non-terminal state::

    Scheduled -> Completed | Prescribed | Cancelled (row deleted)

Every public method returns exactly one ``OperationResult``. Validation
failures come back as declined results; storage errors are rolled back,
logged and reported as ``internal_error``.
"""

import logging
from datetime import date, datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from clinic.auth.gate import Identity
from clinic.models.appointment import AppointmentStatus
from clinic.scheduling.locks import KeyedLockRegistry, booking_locks
from clinic.scheduling.ports import AppointmentStore, DoctorLookup, PatientLookup
from clinic.scheduling.results import OperationResult, Outcome
from clinic.scheduling.slots import is_upcoming
from clinic.scheduling.validation import ConflictValidator, ValidationResult

logger = logging.getLogger(__name__)

APPOINTMENT_NOT_FOUND = 'appointment_not_found'
DOCTOR_NOT_FOUND = 'doctor_not_found'
PATIENT_NOT_FOUND = 'patient_not_found'
SLOT_UNAVAILABLE = 'slot_unavailable'
NOT_OWNER = 'not_owner'
INVALID_TRANSITION = 'invalid_transition'

PRESCRIBABLE_STATUSES = {AppointmentStatus.SCHEDULED, AppointmentStatus.PRESCRIBED}


def _slot_key(doctor_id: int, appointment_time: datetime) -> tuple[int, date]:
    return doctor_id, appointment_time.date()


def _same_email(left: str | None, right: str | None) -> bool:
    return bool(left) and bool(right) and left.strip().lower() == right.strip().lower()


class AppointmentLifecycle:
    def __init__(
        self,
        doctors: DoctorLookup,
        patients: PatientLookup,
        appointments: AppointmentStore,
        validator: ConflictValidator,
        locks: KeyedLockRegistry = booking_locks,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.doctors = doctors
        self.patients = patients
        self.appointments = appointments
        self.validator = validator
        self.locks = locks
        self.clock = clock

    def book(self, identity: Identity, doctor_id: int, appointment_time: datetime) -> OperationResult:
        """Create a Scheduled appointment for the calling patient.

        Availability is re-derived while holding the (doctor, date) lock and
        the appointment is committed before the lock is released, so two
        requests for the same hour cannot both succeed.
        """
        try:
            patient = self.patients.find_by_email(identity.email)
            if patient is None:
                return self._decline(Outcome.NOT_FOUND, PATIENT_NOT_FOUND, 'book', doctor_id=doctor_id)

            with self.locks.hold(_slot_key(doctor_id, appointment_time)):
                self.appointments.lock_doctor(doctor_id)
                verdict = self.validator.validate(doctor_id, appointment_time)
                if verdict is ValidationResult.DOCTOR_NOT_FOUND:
                    self.appointments.rollback()
                    return self._decline(Outcome.NOT_FOUND, DOCTOR_NOT_FOUND, 'book', doctor_id=doctor_id)
                if verdict is ValidationResult.SLOT_UNAVAILABLE:
                    self.appointments.rollback()
                    return self._decline(Outcome.CONFLICT, SLOT_UNAVAILABLE, 'book', doctor_id=doctor_id)

                appointment = self.appointments.create(
                    doctor_id=doctor_id,
                    patient_id=patient.id,
                    appointment_time=appointment_time,
                    status=AppointmentStatus.SCHEDULED.value,
                )
        except SQLAlchemyError:
            return self._internal('book')

        logger.info(
            'Booked appointment %s with doctor %s at %s',
            appointment.id,
            doctor_id,
            appointment_time.isoformat(),
        )
        return OperationResult.success(appointment)

    def update(
        self,
        identity: Identity,
        appointment_id: int,
        doctor_id: int,
        appointment_time: datetime,
    ) -> OperationResult:
        try:
            current = self.appointments.find_by_id(appointment_id)
            if current is None:
                return self._decline(Outcome.NOT_FOUND, APPOINTMENT_NOT_FOUND, 'update', appointment_id=appointment_id)

            keys = (
                _slot_key(current.doctor_id, current.appointment_time),
                _slot_key(doctor_id, appointment_time),
            )
            with self.locks.hold(*keys):
                # Re-read under the lock; another request may have moved or cancelled it.
                existing = self.appointments.find_by_id(appointment_id)
                if existing is None or not self._is_reschedulable(existing, identity):
                    self.appointments.rollback()
                    return self._decline(
                        Outcome.NOT_FOUND, APPOINTMENT_NOT_FOUND, 'update', appointment_id=appointment_id
                    )

                self.appointments.lock_doctor(doctor_id)
                verdict = self.validator.validate(
                    doctor_id,
                    appointment_time,
                    exclude_appointment_id=existing.id,
                )
                if verdict is ValidationResult.DOCTOR_NOT_FOUND:
                    self.appointments.rollback()
                    return self._decline(Outcome.NOT_FOUND, DOCTOR_NOT_FOUND, 'update', appointment_id=appointment_id)
                if verdict is ValidationResult.SLOT_UNAVAILABLE:
                    self.appointments.rollback()
                    return self._decline(Outcome.CONFLICT, SLOT_UNAVAILABLE, 'update', appointment_id=appointment_id)

                existing.doctor_id = doctor_id
                existing.appointment_time = appointment_time
                updated = self.appointments.save(existing)
        except SQLAlchemyError:
            return self._internal('update')

        logger.info('Rescheduled appointment %s to doctor %s at %s', appointment_id, doctor_id, appointment_time.isoformat())
        return OperationResult.success(updated)

    def cancel(self, identity: Identity, appointment_id: int) -> OperationResult:
        """Hard-delete an appointment owned by the calling patient.

        A second cancel of the same id finds nothing and returns NOT_FOUND.
        """
        try:
            appointment = self.appointments.find_by_id(appointment_id)
            if appointment is None:
                return self._decline(Outcome.NOT_FOUND, APPOINTMENT_NOT_FOUND, 'cancel', appointment_id=appointment_id)

            owner = self.patients.find_by_id(appointment.patient_id)
            if owner is None or not _same_email(owner.email, identity.email):
                return self._decline(Outcome.UNAUTHORIZED, NOT_OWNER, 'cancel', appointment_id=appointment_id)

            with self.locks.hold(_slot_key(appointment.doctor_id, appointment.appointment_time)):
                self.appointments.delete(appointment)
        except SQLAlchemyError:
            return self._internal('cancel')

        logger.info('Cancelled appointment %s', appointment_id)
        return OperationResult.success()

    def prescribe(self, appointment_id: int) -> OperationResult:
        """Mark an appointment Prescribed once a prescription is recorded.

        Calling it again on a Prescribed appointment re-sets the same status.
        """
        try:
            appointment = self.appointments.find_by_id(appointment_id)
            if appointment is None:
                return self._decline(Outcome.NOT_FOUND, APPOINTMENT_NOT_FOUND, 'prescribe', appointment_id=appointment_id)

            if appointment.status not in PRESCRIBABLE_STATUSES:
                return self._decline(Outcome.CONFLICT, INVALID_TRANSITION, 'prescribe', appointment_id=appointment_id)

            appointment.status = AppointmentStatus.PRESCRIBED.value
            saved = self.appointments.save(appointment)
        except SQLAlchemyError:
            return self._internal('prescribe')

        logger.info('Appointment %s marked prescribed', appointment_id)
        return OperationResult.success(saved)

    def complete(self, identity: Identity, appointment_id: int) -> OperationResult:
        try:
            appointment = self.appointments.find_by_id(appointment_id)
            if appointment is None:
                return self._decline(Outcome.NOT_FOUND, APPOINTMENT_NOT_FOUND, 'complete', appointment_id=appointment_id)

            doctor = self.doctors.find_by_id(appointment.doctor_id)
            if doctor is None or not _same_email(doctor.email, identity.email):
                return self._decline(Outcome.UNAUTHORIZED, NOT_OWNER, 'complete', appointment_id=appointment_id)

            if appointment.status != AppointmentStatus.SCHEDULED:
                return self._decline(Outcome.CONFLICT, INVALID_TRANSITION, 'complete', appointment_id=appointment_id)

            appointment.status = AppointmentStatus.COMPLETED.value
            saved = self.appointments.save(appointment)
        except SQLAlchemyError:
            return self._internal('complete')

        logger.info('Appointment %s marked completed', appointment_id)
        return OperationResult.success(saved)

    def _is_reschedulable(self, appointment, identity: Identity) -> bool:
        if appointment.status != AppointmentStatus.SCHEDULED:
            return False
        if not is_upcoming(appointment.appointment_time, self.clock()):
            return False
        owner = self.patients.find_by_id(appointment.patient_id)
        return owner is not None and _same_email(owner.email, identity.email)

    def _decline(self, outcome: Outcome, reason: str, operation: str, **context) -> OperationResult:
        logger.info('Declined %s (%s): %s', operation, reason, context)
        return OperationResult.declined(outcome, reason)

    def _internal(self, operation: str) -> OperationResult:
        logger.exception('Appointment %s failed', operation)
        try:
            self.appointments.rollback()
        except SQLAlchemyError:
            logger.exception('Rollback after failed %s also failed', operation)
        return OperationResult.internal()
