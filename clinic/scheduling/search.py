"""Doctor search by name, specialty and time of day.

Each criterion is optional. ``NO_FILTER`` marks an absent criterion inside the
core; the HTTP layer's ``"null"`` path convention is translated by
``filter_from_wire`` and ``time_of_day_from_wire``.
"""

from enum import Enum
from typing import Any

from clinic.scheduling.ports import DoctorLookup
from clinic.scheduling.slots import TimeOfDay, slot_start_hour

WIRE_NULL = 'null'


class _NoFilter(Enum):
    NO_FILTER = 'no_filter'

    def __repr__(self) -> str:
        return 'NO_FILTER'


NO_FILTER = _NoFilter.NO_FILTER


def filter_from_wire(value: str | None) -> str | _NoFilter:
    if value is None:
        return NO_FILTER
    normalized = value.strip()
    if not normalized or normalized.lower() == WIRE_NULL:
        return NO_FILTER
    return normalized


def time_of_day_from_wire(value: str | None) -> TimeOfDay | _NoFilter:
    normalized = filter_from_wire(value)
    if normalized is NO_FILTER:
        return NO_FILTER
    try:
        return TimeOfDay(normalized.upper())
    except ValueError as exc:
        raise ValueError(f'Invalid time of day "{value}". Use AM or PM.') from exc


def matches_name(doctor: Any, name: str) -> bool:
    return name.lower() in (doctor.name or '').lower()


def matches_specialty(doctor: Any, specialty: str) -> bool:
    return (doctor.specialty or '').lower() == specialty.lower()


def is_available_at(doctor: Any, time_of_day: TimeOfDay) -> bool:
    return any(time_of_day.matches(slot_start_hour(slot)) for slot in doctor.available_times or [])


class DoctorSearchIndex:
    def __init__(self, doctors: DoctorLookup):
        self.doctors = doctors

    def search(
        self,
        name: str | _NoFilter = NO_FILTER,
        specialty: str | _NoFilter = NO_FILTER,
        time_of_day: TimeOfDay | _NoFilter = NO_FILTER,
    ) -> list:
        results = list(self.doctors.find_all())

        if name is not NO_FILTER:
            results = [doctor for doctor in results if matches_name(doctor, name)]
        if specialty is not NO_FILTER:
            results = [doctor for doctor in results if matches_specialty(doctor, specialty)]
        if time_of_day is not NO_FILTER:
            results = [doctor for doctor in results if is_available_at(doctor, time_of_day)]

        return results
