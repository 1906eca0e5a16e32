# backend/agenda/schemas/appointment.py
from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..models.appointment import AppointmentStatus


class AppointmentServiceIn(BaseModel):
    """Servicio dentro de la cita; duración/precio aplicados opcionales."""

    servicio_id: int = Field(gt=0)
    duracion_minutos: Optional[int] = Field(None, ge=0, le=480)
    precio: Optional[Decimal] = Field(None, ge=0)
    descuento: Decimal = Field(Decimal("0"), ge=0, le=100)


class AppointmentCreate(BaseModel):
    profesional_id: int = Field(gt=0)
    cliente_id: int = Field(gt=0)
    fecha: date
    hora_inicio: time
    servicios: list[AppointmentServiceIn] = Field(min_length=1)
    estado: AppointmentStatus = AppointmentStatus.PENDIENTE
    notas: str = ""

    @field_validator("estado")
    @classmethod
    def _estado_inicial(cls, v: AppointmentStatus) -> AppointmentStatus:
        if v not in (AppointmentStatus.PENDIENTE, AppointmentStatus.CONFIRMADA):
            raise ValueError("estado inicial debe ser pendiente o confirmada")
        return v


class AppointmentServiceOut(BaseModel):
    id: int
    service_id: int
    execution_order: int
    applied_duration_minutes: int
    applied_price: Decimal
    discount: Decimal

    class Config:
        from_attributes = True


class AppointmentOut(BaseModel):
    id: int
    code: Optional[str] = None
    professional_id: int
    client_id: int
    date: date
    start_time: time
    status: AppointmentStatus
    total_duration_minutes: int = 0
    services: list[AppointmentServiceOut] = []

    class Config:
        from_attributes = True
