from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from clinic.auth.dependencies import require_role
from clinic.auth.gate import Identity, Role
from clinic.routes.common import get_lifecycle, raise_for_result
from clinic.scheduling.lifecycle import AppointmentLifecycle

router = APIRouter(tags=['appointments'])


class AppointmentRequest(BaseModel):
    doctor_id: int
    appointment_time: datetime

    @field_validator('appointment_time')
    @classmethod
    def validate_appointment_time(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            raise ValueError('Appointment times are clinic-local; omit the UTC offset.')
        return value.replace(second=0, microsecond=0)


class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    patient_id: int
    appointment_time: datetime
    status: int

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: AppointmentRequest,
    identity: Identity = Depends(require_role(Role.PATIENT)),
    lifecycle: AppointmentLifecycle = Depends(get_lifecycle),
):
    result = raise_for_result(lifecycle.book(identity, data.doctor_id, data.appointment_time))
    return result.value


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentRequest,
    identity: Identity = Depends(require_role(Role.PATIENT)),
    lifecycle: AppointmentLifecycle = Depends(get_lifecycle),
):
    result = raise_for_result(
        lifecycle.update(identity, appointment_id, data.doctor_id, data.appointment_time)
    )
    return result.value


@router.delete('/{appointment_id}', response_model=MessageResponse)
def cancel_appointment(
    appointment_id: int,
    identity: Identity = Depends(require_role(Role.PATIENT)),
    lifecycle: AppointmentLifecycle = Depends(get_lifecycle),
):
    raise_for_result(lifecycle.cancel(identity, appointment_id))
    return MessageResponse(message='Appointment cancelled')


@router.post('/{appointment_id}/complete', response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    identity: Identity = Depends(require_role(Role.DOCTOR)),
    lifecycle: AppointmentLifecycle = Depends(get_lifecycle),
):
    result = raise_for_result(lifecycle.complete(identity, appointment_id))
    return result.value
