# backend/agenda/schemas/availability.py
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from pydantic import BaseModel, Field, field_validator, ValidationError as PydanticValidationError

from ..core.clock import local_today
from ..core.errors import ValidationError

_HORA_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

TODAY_ALIASES = ("today", "hoy")
TOMORROW_ALIASES = ("tomorrow", "mañana")
ALLOWED_GRANULARITIES = (15, 30, 60)


class AvailabilityQuery(BaseModel):
    """Consulta de disponibilidad (vive solo durante la request)."""

    organization_id: int
    fecha: date
    servicio_id: int = Field(gt=0)
    profesional_id: int | None = Field(None, gt=0)
    hora: time | None = None
    duracion: int | None = Field(None, ge=10, le=480)
    # sin tope superior aquí: el máximo lo decide el rol (se reduce, no se rechaza)
    rango_dias: int = Field(1, ge=1)
    intervalo_minutos: int = 30
    solo_disponibles: bool = True
    excluir_cita_id: int | None = Field(None, gt=0)
    role: str | None = None

    @field_validator("fecha", mode="before")
    @classmethod
    def _resolve_fecha(cls, v):
        if isinstance(v, str):
            raw = v.strip().lower()
            if raw in TODAY_ALIASES:
                return local_today()
            if raw in TOMORROW_ALIASES:
                return local_today() + timedelta(days=1)
            # ISO con timestamp: nos quedamos con la fecha
            if "t" in raw:
                raw = raw.split("t", 1)[0]
            try:
                return date.fromisoformat(raw)
            except ValueError:
                raise ValueError("fecha debe ser YYYY-MM-DD, 'today' o 'tomorrow'")
        return v

    @field_validator("hora", mode="before")
    @classmethod
    def _parse_hora(cls, v):
        if v is None or isinstance(v, time):
            return v
        if isinstance(v, str) and _HORA_RE.match(v.strip()):
            return datetime.strptime(v.strip(), "%H:%M").time()
        raise ValueError("hora debe tener formato HH:MM (24h)")

    @field_validator("intervalo_minutos")
    @classmethod
    def _check_intervalo(cls, v: int) -> int:
        if v not in ALLOWED_GRANULARITIES:
            raise ValueError("intervalo_minutos debe ser 15, 30 o 60")
        return v

    @classmethod
    def from_params(cls, **params) -> "AvailabilityQuery":
        """
        Construye la consulta desde parámetros crudos; los errores de pydantic
        se traducen a ValidationError indicando el campo.
        """
        data = {k: v for k, v in params.items() if v is not None and v != ""}
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            err = exc.errors()[0]
            field = str(err["loc"][0]) if err.get("loc") else "query"
            msg = err.get("msg", "valor no válido")
            raise ValidationError(field, f"{field}: {msg}") from exc
