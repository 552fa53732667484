"""Narrow persistence interfaces the scheduling core depends on.

The SQLAlchemy implementations live in ``clinic.repositories``; tests swap in
in-memory fakes.
"""

from datetime import datetime
from typing import Any, Protocol, Sequence


class DoctorLookup(Protocol):
    def find_by_id(self, doctor_id: int) -> Any | None:
        ...

    def find_by_email(self, email: str) -> Any | None:
        ...

    def find_all(self) -> Sequence[Any]:
        ...


class PatientLookup(Protocol):
    def find_by_id(self, patient_id: int) -> Any | None:
        ...

    def find_by_email(self, email: str) -> Any | None:
        ...


class AppointmentStore(Protocol):
    def find_by_id(self, appointment_id: int) -> Any | None:
        ...

    def find_by_doctor_and_date_range(
        self, doctor_id: int, start: datetime, end: datetime
    ) -> Sequence[Any]:
        ...

    def find_by_patient_id_and_status(self, patient_id: int, status: int) -> Sequence[Any]:
        ...

    def lock_doctor(self, doctor_id: int) -> None:
        """Serialize writers for one doctor at the storage level, where supported."""
        ...

    def create(self, doctor_id: int, patient_id: int, appointment_time: datetime, status: int) -> Any:
        ...

    def save(self, appointment: Any) -> Any:
        ...

    def delete(self, appointment: Any) -> None:
        ...

    def rollback(self) -> None:
        ...
