from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import Caller, get_caller
from ..schemas.availability import AvailabilityQuery
from ..services.availability import AvailabilityService

router = APIRouter(tags=["availability"])


# -----------------------------------------------------------------------------
# DISPONIBILIDAD (calendario front-end, portal cliente, agentes automáticos)
# -----------------------------------------------------------------------------
@router.get("/availability")
def availability(
    fecha: str | None = Query(None),
    servicio_id: str | None = Query(None),
    profesional_id: str | None = Query(None),
    hora: str | None = Query(None),
    duracion: str | None = Query(None),
    rango_dias: str | None = Query(None),
    intervalo_minutos: str | None = Query(None),
    solo_disponibles: str | None = Query(None),
    excluir_cita_id: str | None = Query(None),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    # parámetros crudos: la validación (y el 400 con el campo) vive en el schema
    params = AvailabilityQuery.from_params(
        organization_id=caller.organization_id,
        role=caller.role,
        fecha=fecha,
        servicio_id=servicio_id,
        profesional_id=profesional_id,
        hora=hora,
        duracion=duracion,
        rango_dias=rango_dias,
        intervalo_minutos=intervalo_minutos,
        solo_disponibles=solo_disponibles,
        excluir_cita_id=excluir_cita_id,
    )
    return AvailabilityService(db).query(params)
