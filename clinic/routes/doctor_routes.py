from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator

from clinic.auth.dependencies import require_role
from clinic.auth.gate import Identity, Role
from clinic.routes.appointment_routes import AppointmentResponse, MessageResponse
from clinic.routes.common import (
    get_availability,
    get_profiles,
    get_search_index,
    raise_for_result,
)
from clinic.scheduling.availability import AvailabilityCalculator
from clinic.scheduling.search import NO_FILTER, DoctorSearchIndex, filter_from_wire, time_of_day_from_wire
from clinic.scheduling.slots import validate_slot_template
from clinic.services.profiles import ProfileService

router = APIRouter(tags=['doctors'])


def _normalize_template(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    return validate_slot_template(value)


class CreateDoctorRequest(BaseModel):
    name: str
    email: str
    specialty: str
    phone: str | None = None
    available_times: list[str]

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized or '@' not in normalized:
            raise ValueError('A valid email is required.')
        return normalized

    @field_validator('name', 'specialty')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('This field is required.')
        return normalized

    @field_validator('available_times')
    @classmethod
    def validate_available_times(cls, value: list[str]) -> list[str]:
        return _normalize_template(value)


class UpdateDoctorRequest(BaseModel):
    name: str | None = None
    specialty: str | None = None
    phone: str | None = None
    available_times: list[str] | None = None

    @field_validator('name', 'specialty')
    @classmethod
    def validate_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('This field cannot be blank.')
        return normalized

    @field_validator('available_times')
    @classmethod
    def validate_available_times(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_template(value)


class DoctorResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    specialty: str
    available_times: list[str]

    class Config:
        from_attributes = True


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]


class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: date
    availability: list[str]
    hours: list[str]


@router.get('', response_model=DoctorListResponse)
def list_doctors(search: DoctorSearchIndex = Depends(get_search_index)):
    return DoctorListResponse(doctors=search.search())


@router.get('/filter/{name}/{time}/{specialty}', response_model=DoctorListResponse)
def filter_doctors(
    name: str,
    time: str,
    specialty: str,
    search: DoctorSearchIndex = Depends(get_search_index),
):
    try:
        time_of_day = time_of_day_from_wire(time)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    doctors = search.search(
        name=filter_from_wire(name),
        specialty=filter_from_wire(specialty),
        time_of_day=time_of_day,
    )
    return DoctorListResponse(doctors=doctors)


@router.get('/{doctor_id}/availability/{day}', response_model=AvailabilityResponse)
def get_doctor_availability(
    doctor_id: int,
    day: date,
    identity: Identity = Depends(require_role(Role.PATIENT, Role.DOCTOR, Role.ADMIN)),
    availability: AvailabilityCalculator = Depends(get_availability),
):
    del identity
    free_slots = availability.availability(doctor_id, day)
    return AvailabilityResponse(
        doctor_id=doctor_id,
        date=day,
        availability=free_slots,
        hours=availability.free_hours(doctor_id, day),
    )


@router.post('', response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(
    data: CreateDoctorRequest,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    profiles: ProfileService = Depends(get_profiles),
):
    del identity
    result = raise_for_result(
        profiles.create_doctor(
            name=data.name,
            email=data.email,
            specialty=data.specialty,
            phone=data.phone,
            available_times=data.available_times,
        )
    )
    return result.value


@router.put('/{doctor_id}', response_model=DoctorResponse)
def update_doctor(
    doctor_id: int,
    data: UpdateDoctorRequest,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    profiles: ProfileService = Depends(get_profiles),
):
    del identity
    result = raise_for_result(
        profiles.update_doctor(
            doctor_id,
            name=data.name,
            specialty=data.specialty,
            phone=data.phone,
            available_times=data.available_times,
        )
    )
    return result.value


@router.delete('/{doctor_id}', response_model=MessageResponse)
def delete_doctor(
    doctor_id: int,
    identity: Identity = Depends(require_role(Role.ADMIN)),
    profiles: ProfileService = Depends(get_profiles),
):
    del identity
    raise_for_result(profiles.delete_doctor(doctor_id))
    return MessageResponse(message='Doctor deleted successfully')


@router.get('/me/appointments/{day}/{patient_name}', response_model=list[AppointmentResponse])
def list_my_appointments(
    day: date,
    patient_name: str,
    identity: Identity = Depends(require_role(Role.DOCTOR)),
    profiles: ProfileService = Depends(get_profiles),
):
    name_filter = filter_from_wire(patient_name)
    result = raise_for_result(
        profiles.doctor_appointments(
            identity,
            day,
            patient_name=None if name_filter is NO_FILTER else name_filter,
        )
    )
    return result.value
