import os
import threading
import time
from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from clinic.auth import jwt_handler  # noqa: E402
from clinic.database import Base  # noqa: E402
from clinic.models.appointment import Appointment  # noqa: E402
from clinic.models.doctor import Doctor  # noqa: E402
from clinic.models.patient import Patient  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_doctor(db):
    def _make_doctor(
        name='Dr. Xavier Hale',
        email='xavier@clinic.test',
        specialty='Cardiology',
        available_times=('09:00-10:00', '14:00-15:00'),
    ) -> Doctor:
        doctor = Doctor(name=name, email=email, specialty=specialty, available_times=list(available_times))
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    return _make_doctor


@pytest.fixture
def make_patient(db):
    def _make_patient(name='Pat Owner', email='owner@example.com', phone='555-0100') -> Patient:
        patient = Patient(name=name, email=email, phone=phone)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    return _make_patient


@pytest.fixture
def make_appointment(db):
    def _make_appointment(doctor, patient, appointment_time: datetime, status=0) -> Appointment:
        appointment = Appointment(
            doctor_id=doctor.id,
            patient_id=patient.id,
            appointment_time=appointment_time,
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment


@pytest.fixture
def token_for():
    def _token_for(subject: str, role: str) -> str:
        return jwt_handler.create_access_token(subject=subject, role=role)

    return _token_for


class FakeDoctors:
    def __init__(self, doctors=()):
        self.rows = {doctor.id: doctor for doctor in doctors}

    def find_by_id(self, doctor_id):
        return self.rows.get(doctor_id)

    def find_by_email(self, email):
        return next((doctor for doctor in self.rows.values() if doctor.email == email), None)

    def find_all(self):
        return list(self.rows.values())


class FakePatients:
    def __init__(self, patients=()):
        self.rows = {patient.id: patient for patient in patients}

    def find_by_id(self, patient_id):
        return self.rows.get(patient_id)

    def find_by_email(self, email):
        return next((patient for patient in self.rows.values() if patient.email == email), None)


class FakeAppointments:
    """Thread-safe in-memory store. ``read_delay`` widens the read-then-write window."""

    def __init__(self, read_delay: float = 0.0):
        self.rows = {}
        self.read_delay = read_delay
        self.rollbacks = 0
        self._guard = threading.Lock()
        self._next_id = 1

    def find_by_id(self, appointment_id):
        with self._guard:
            return self.rows.get(appointment_id)

    def find_by_doctor_and_date_range(self, doctor_id, start, end):
        with self._guard:
            found = [
                row for row in self.rows.values()
                if row.doctor_id == doctor_id and start <= row.appointment_time <= end
            ]
        if self.read_delay:
            time.sleep(self.read_delay)
        return found

    def find_by_patient_id_and_status(self, patient_id, status):
        with self._guard:
            return [row for row in self.rows.values() if row.patient_id == patient_id and row.status == status]

    def lock_doctor(self, doctor_id):
        return None

    def create(self, doctor_id, patient_id, appointment_time, status):
        with self._guard:
            row = SimpleNamespace(
                id=self._next_id,
                doctor_id=doctor_id,
                patient_id=patient_id,
                appointment_time=appointment_time,
                status=status,
            )
            self.rows[row.id] = row
            self._next_id += 1
            return row

    def save(self, appointment):
        return appointment

    def delete(self, appointment):
        with self._guard:
            self.rows.pop(appointment.id, None)

    def rollback(self):
        self.rollbacks += 1


@pytest.fixture
def fakes():
    doctor = SimpleNamespace(
        id=1,
        name='Dr. Xavier Hale',
        email='xavier@clinic.test',
        specialty='Cardiology',
        available_times=['09:00-10:00', '14:00-15:00'],
    )
    owner = SimpleNamespace(id=1, name='Pat Owner', email='owner@example.com')
    other = SimpleNamespace(id=2, name='Olive Other', email='other@example.com')
    return SimpleNamespace(
        doctor=doctor,
        owner=owner,
        other=other,
        doctors=FakeDoctors([doctor]),
        patients=FakePatients([owner, other]),
        appointments=FakeAppointments(),
    )
