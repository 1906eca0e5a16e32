"""
Clasificación de un slot contra citas y bloqueos.

Usa el predicado semiabierto compartido `core.intervals.overlaps`, el mismo
que aplica la validación de escritura (services/booking.py): un slot que
termina justo cuando empieza la siguiente cita está libre.
"""
import enum
from dataclasses import dataclass

from ..core.intervals import overlaps
from .ledger import OccupiedInterval
from .schedule_store import ExceptionBlock


class OccupationKind(str, enum.Enum):
    BLOQUEO = "bloqueo"
    CITA = "cita"
    FUERA_HORARIO = "fuera_horario"


@dataclass(frozen=True)
class Occupation:
    kind: OccupationKind
    title: str | None = None
    is_org_wide: bool = False
    appointment_id: int | None = None
    appointment_code: str | None = None
    client_name: str | None = None

    @classmethod
    def from_exception(cls, block: ExceptionBlock) -> "Occupation":
        return cls(OccupationKind.BLOQUEO, title=block.title, is_org_wide=block.is_org_wide)

    @classmethod
    def from_booking(cls, booking: OccupiedInterval) -> "Occupation":
        return cls(
            OccupationKind.CITA,
            appointment_id=booking.appointment_id,
            appointment_code=booking.code,
            client_name=booking.client_name,
        )


@dataclass(frozen=True)
class Classification:
    free: bool
    reason: Occupation | None = None


FREE = Classification(free=True)


def exception_blocks(block: ExceptionBlock, start: int, end: int) -> bool:
    if block.whole_day:
        return True
    return overlaps(start, end, block.start, block.end)


def find_exception(start: int, end: int, exceptions: list[ExceptionBlock]) -> ExceptionBlock | None:
    return next((b for b in exceptions if exception_blocks(b, start, end)), None)


def find_booking(start: int, end: int, occupied: list[OccupiedInterval]) -> OccupiedInterval | None:
    return next((o for o in occupied if overlaps(start, end, o.start, o.end)), None)


def classify(
    start: int,
    duration_minutes: int,
    occupied: list[OccupiedInterval],
    exceptions: list[ExceptionBlock],
) -> Classification:
    """
    `occupied` y `exceptions` deben venir ya filtrados por profesional y fecha.
    Si aplican ambos, el bloqueo tiene prioridad como razón.
    """
    end = start + duration_minutes

    block = find_exception(start, end, exceptions)
    if block is not None:
        return Classification(free=False, reason=Occupation.from_exception(block))

    booking = find_booking(start, end, occupied)
    if booking is not None:
        return Classification(free=False, reason=Occupation.from_booking(booking))

    return FREE
