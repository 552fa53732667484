from fastapi import APIRouter, Depends

from clinic.auth.dependencies import require_role
from clinic.auth.gate import Identity, Role
from clinic.routes.appointment_routes import AppointmentResponse
from clinic.routes.common import get_lifecycle, raise_for_result
from clinic.scheduling.lifecycle import AppointmentLifecycle

router = APIRouter(tags=['prescriptions'])


@router.post('/{appointment_id}', response_model=AppointmentResponse)
def record_prescription(
    appointment_id: int,
    identity: Identity = Depends(require_role(Role.DOCTOR)),
    lifecycle: AppointmentLifecycle = Depends(get_lifecycle),
):
    # The prescription record itself is stored elsewhere; this only moves the appointment.
    del identity
    result = raise_for_result(lifecycle.prescribe(appointment_id))
    return result.value
