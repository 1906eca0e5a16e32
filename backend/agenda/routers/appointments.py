from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import Caller, require_role
from ..models.appointment import Appointment
from ..schemas.appointment import AppointmentCreate, AppointmentOut
from ..services.booking import BookingService
from ..services.policy import Role

router = APIRouter(prefix="/citas", tags=["citas"])

# quién puede agendar: todos los roles conocidos
auth_booking = require_role(*(r.value for r in Role))
auth_staff = require_role(
    Role.EMPLEADO.value, Role.ADMIN.value, Role.PROPIETARIO.value, Role.SUPER_ADMIN.value
)


def _out(appt: Appointment) -> AppointmentOut:
    out = AppointmentOut.model_validate(appt)
    out.total_duration_minutes = sum(
        s.applied_duration_minutes for s in appt.services if not s.is_cancelled
    )
    return out


@router.post("", response_model=AppointmentOut, status_code=201)
def create_appointment(
    payload: AppointmentCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(auth_booking),
):
    appt = BookingService(db).create_appointment(caller.organization_id, payload)
    return _out(appt)


@router.post("/{appointment_id}/cancelar", response_model=AppointmentOut)
def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(auth_staff),
):
    appt = BookingService(db).cancel_appointment(caller.organization_id, appointment_id)
    return _out(appt)
