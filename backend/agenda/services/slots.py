"""
Generación de slots candidatos para un día.
"""
from ..core.intervals import contains
from .schedule_store import TimeWindow


def generate_slots(
    windows: list[TimeWindow],
    granularity_minutes: int,
    duration_minutes: int,
) -> list[int]:
    """
    Inicios candidatos (minutos desde medianoche), ordenados y sin duplicados.

    Por cada franja se avanza desde su inicio en pasos de `granularity_minutes`
    y se emite un inicio solo si un servicio de `duration_minutes` cabe entero
    antes del fin de la franja. Las franjas pueden solaparse entre sí.
    """
    if granularity_minutes <= 0:
        raise ValueError("granularity_minutes debe ser positivo")

    starts: set[int] = set()
    for w in windows:
        current = w.start
        while current + duration_minutes <= w.end:
            starts.add(current)
            current += granularity_minutes
    return sorted(starts)


def fits_in_windows(windows: list[TimeWindow], start: int, duration_minutes: int) -> bool:
    """True si [start, start+duración) queda dentro de alguna franja."""
    end = start + duration_minutes
    return any(contains(w.start, w.end, start, end) for w in windows)
