"""
Aritmética de intervalos horarios compartida por lectura y escritura.

Todos los intervalos son semiabiertos [inicio, fin) expresados en minutos
desde medianoche. `overlaps` es el único predicado de solapamiento del
proyecto: lo usan tanto la consulta de disponibilidad como la validación
al crear una cita.
"""
from datetime import time


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """
    True si [a_start, a_end) y [b_start, b_end) se intersectan.

    Tocarse no es solaparse:
    overlaps(540, 600, 600, 660) -> False  (09:00-10:00 vs 10:00-11:00)
    """
    return a_start < b_end and b_start < a_end


def contains(outer_start: int, outer_end: int, start: int, end: int) -> bool:
    return outer_start <= start and end <= outer_end


def to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def fmt_minutes(minutes: int) -> str:
    # un slot que termina después de medianoche se muestra como 24:30, etc.
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
