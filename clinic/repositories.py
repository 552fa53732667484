"""SQLAlchemy implementations of the scheduling ports.

Each repository wraps the request's ``Session``; write helpers commit so the
lifecycle's critical sections end with the row durable.
"""

from datetime import date, datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from clinic.models.appointment import Appointment
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient
from clinic.scheduling.slots import day_bounds


class DoctorRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, doctor_id: int) -> Doctor | None:
        return self.db.get(Doctor, doctor_id)

    def find_by_email(self, email: str) -> Doctor | None:
        return self.db.query(Doctor).filter(func.lower(Doctor.email) == email.strip().lower()).first()

    def find_all(self) -> list[Doctor]:
        return self.db.query(Doctor).order_by(Doctor.id.asc()).all()

    def add(self, doctor: Doctor) -> Doctor:
        self.db.add(doctor)
        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def save(self, doctor: Doctor) -> Doctor:
        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def delete(self, doctor: Doctor) -> None:
        # Doctor.appointments cascades, so the doctor's bookings go with it.
        self.db.delete(doctor)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()


class PatientRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, patient_id: int) -> Patient | None:
        return self.db.get(Patient, patient_id)

    def find_by_email(self, email: str) -> Patient | None:
        return self.db.query(Patient).filter(func.lower(Patient.email) == email.strip().lower()).first()

    def find_by_email_or_phone(self, email: str, phone: str) -> Patient | None:
        return self.db.query(Patient).filter(
            or_(func.lower(Patient.email) == email.strip().lower(), Patient.phone == phone.strip())
        ).first()

    def add(self, patient: Patient) -> Patient:
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        return patient

    def rollback(self) -> None:
        self.db.rollback()


class AppointmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, appointment_id: int) -> Appointment | None:
        return self.db.get(Appointment, appointment_id, populate_existing=True)

    def find_by_doctor_and_date_range(self, doctor_id: int, start: datetime, end: datetime) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= start,
            Appointment.appointment_time <= end,
        ).order_by(Appointment.appointment_time.asc()).all()

    def find_by_patient_id_and_status(self, patient_id: int, status: int) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.patient_id == patient_id,
            Appointment.status == status,
        ).order_by(Appointment.appointment_time.asc()).all()

    def find_for_patient(
        self,
        patient_id: int,
        status: int | None = None,
        doctor_name: str | None = None,
    ) -> list[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.patient_id == patient_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if doctor_name:
            query = query.join(Doctor, Appointment.doctor_id == Doctor.id).filter(
                Doctor.name.ilike(f'%{doctor_name}%')
            )
        return query.order_by(Appointment.appointment_time.asc()).all()

    def find_for_doctor_on_day(self, doctor_id: int, day: date, patient_name: str | None = None) -> list[Appointment]:
        start, end = day_bounds(day)
        query = self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= start,
            Appointment.appointment_time <= end,
        )
        if patient_name:
            query = query.join(Patient, Appointment.patient_id == Patient.id).filter(
                Patient.name.ilike(f'%{patient_name}%')
            )
        return query.order_by(Appointment.appointment_time.asc()).all()

    def lock_doctor(self, doctor_id: int) -> None:
        # Row lock on PostgreSQL; the SQLite dialect renders no FOR UPDATE clause.
        self.db.query(Doctor.id).filter(Doctor.id == doctor_id).with_for_update().first()

    def create(self, doctor_id: int, patient_id: int, appointment_time: datetime, status: int) -> Appointment:
        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            appointment_time=appointment_time,
            status=status,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def save(self, appointment: Appointment) -> Appointment:
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def delete(self, appointment: Appointment) -> None:
        self.db.delete(appointment)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
