"""
Vista por nivel de detalle.

El cálculo de slots no sabe nada de roles: produce siempre el Slot completo.
Aquí, en el borde de salida, se formatea la razón y se filtran los campos
con una lista blanca por nivel.
"""
from dataclasses import dataclass
from datetime import date

from ..core.intervals import fmt_minutes
from .conflicts import Occupation, OccupationKind
from .policy import DetailLevel

_BASE_FIELDS = ("hora", "hora_fin", "duracion_minutos", "disponible")

ALLOWED_SLOT_FIELDS: dict[DetailLevel, frozenset[str]] = {
    DetailLevel.BASICO: frozenset(_BASE_FIELDS),
    DetailLevel.COMPLETO: frozenset(_BASE_FIELDS + ("razon",)),
    DetailLevel.ADMIN: frozenset(_BASE_FIELDS + ("razon", "cita_id", "cliente_nombre")),
}


@dataclass(frozen=True)
class Slot:
    """Slot calculado. Valor inmutable: no reserva ni bloquea nada."""

    date: date
    start: int
    duration_minutes: int
    professional_id: int
    free: bool
    reason: Occupation | None = None

    @property
    def end(self) -> int:
        return self.start + self.duration_minutes


def format_reason(reason: Occupation, level: DetailLevel) -> str:
    if reason.kind == OccupationKind.FUERA_HORARIO:
        return "Fuera del horario laboral"

    if reason.kind == OccupationKind.BLOQUEO:
        if level <= DetailLevel.COMPLETO:
            return reason.title or "Horario bloqueado"
        scope = "Bloqueo organizacional" if reason.is_org_wide else "Bloqueo del profesional"
        return f"{scope}: {reason.title or 'Horario bloqueado'}"

    if level <= DetailLevel.COMPLETO:
        return "Cita existente"
    return f"Cita {reason.appointment_code or reason.appointment_id} - {reason.client_name or 'Cliente'}"


def render_slot(slot: Slot, level: DetailLevel) -> dict:
    full = {
        "hora": fmt_minutes(slot.start),
        "hora_fin": fmt_minutes(slot.end),
        "duracion_minutos": slot.duration_minutes,
        "disponible": slot.free,
    }
    if slot.reason is not None:
        full["razon"] = format_reason(slot.reason, level)
        if slot.reason.kind == OccupationKind.CITA:
            full["cita_id"] = slot.reason.appointment_id
            full["cliente_nombre"] = slot.reason.client_name

    allowed = ALLOWED_SLOT_FIELDS[level]
    return {k: v for k, v in full.items() if k in allowed}
