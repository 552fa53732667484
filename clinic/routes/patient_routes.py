from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from clinic.auth.dependencies import require_role
from clinic.auth.gate import Identity, Role
from clinic.routes.appointment_routes import AppointmentResponse
from clinic.routes.common import get_profiles, raise_for_result
from clinic.scheduling.search import NO_FILTER, filter_from_wire
from clinic.services.profiles import ProfileService

router = APIRouter(tags=['patients'])


class CreatePatientRequest(BaseModel):
    name: str
    email: str
    phone: str
    address: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized or '@' not in normalized:
            raise ValueError('A valid email is required.')
        return normalized

    @field_validator('name', 'phone')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('This field is required.')
        return normalized


class PatientResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: str | None = None

    class Config:
        from_attributes = True


@router.post('', response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(data: CreatePatientRequest, profiles: ProfileService = Depends(get_profiles)):
    result = raise_for_result(
        profiles.create_patient(name=data.name, email=data.email, phone=data.phone, address=data.address)
    )
    return result.value


@router.get('/me', response_model=PatientResponse)
def get_my_details(
    identity: Identity = Depends(require_role(Role.PATIENT)),
    profiles: ProfileService = Depends(get_profiles),
):
    result = raise_for_result(profiles.patient_details(identity))
    return result.value


@router.get('/me/appointments/{condition}/{doctor_name}', response_model=list[AppointmentResponse])
def list_my_appointments(
    condition: str,
    doctor_name: str,
    identity: Identity = Depends(require_role(Role.PATIENT)),
    profiles: ProfileService = Depends(get_profiles),
):
    condition_filter = filter_from_wire(condition)
    name_filter = filter_from_wire(doctor_name)
    result = raise_for_result(
        profiles.patient_appointments(
            identity,
            condition=None if condition_filter is NO_FILTER else condition_filter,
            doctor_name=None if name_filter is NO_FILTER else name_filter,
        )
    )
    return result.value
