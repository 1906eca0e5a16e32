"""
Lectura del libro de citas: intervalos ocupados por rango de fechas.

La duración de una cita no es una columna: es la suma de las duraciones
aplicadas de sus servicios. Para no caer en N+1 (una query por cita) se
emite UNA sola sentencia por rango:

    citas LEFT JOIN citas_servicios LEFT JOIN servicios LEFT JOIN clientes

ordenada por cita y orden de ejecución, y las filas se agrupan en una
única pasada en memoria (suma de duración + lista de servicios por cita).
El coste depende del total de filas tocadas, no de cuántos servicios tenga
cada cita. LEFT JOIN y no JOIN: una cita sin servicios sigue apareciendo,
con duración 0.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from itertools import groupby

from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..core.intervals import to_minutes
from ..models.appointment import (
    Appointment,
    AppointmentService,
    AppointmentStatus,
    HOLDING_STATUSES,
)
from ..models.client import Client
from ..models.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceLine:
    line_id: int
    service_id: int
    service_name: str | None
    execution_order: int
    applied_duration_minutes: int
    applied_price: Decimal
    discount: Decimal


@dataclass(frozen=True)
class OccupiedInterval:
    appointment_id: int
    professional_id: int
    date: date
    start_time: time
    total_duration_minutes: int
    status: AppointmentStatus
    code: str | None = None
    client_name: str | None = None
    services: tuple[ServiceLine, ...] = field(default_factory=tuple)

    @property
    def start(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end(self) -> int:
        return self.start + self.total_duration_minutes


class LedgerReader:
    def __init__(self, db: Session):
        self.db = db

    def _query(
        self,
        organization_id: int,
        start_date: date,
        end_date: date,
        professional_ids: list[int] | None,
        exclude_appointment_id: int | None,
    ):
        q = (
            self.db.query(
                Appointment.id.label("appointment_id"),
                Appointment.professional_id,
                Appointment.date,
                Appointment.start_time,
                Appointment.status,
                Appointment.code,
                Client.name.label("client_name"),
                AppointmentService.id.label("line_id"),
                AppointmentService.service_id,
                AppointmentService.execution_order,
                AppointmentService.applied_duration_minutes,
                AppointmentService.applied_price,
                AppointmentService.discount,
                Service.name.label("service_name"),
            )
            .outerjoin(
                AppointmentService,
                and_(
                    AppointmentService.appointment_id == Appointment.id,
                    AppointmentService.is_cancelled == False,  # noqa: E712
                ),
            )
            .outerjoin(Service, Service.id == AppointmentService.service_id)
            .outerjoin(Client, Client.id == Appointment.client_id)
            .filter(
                Appointment.organization_id == organization_id,
                Appointment.date >= start_date,
                Appointment.date <= end_date,
                Appointment.status.in_(HOLDING_STATUSES),
            )
        )
        if professional_ids is not None:
            q = q.filter(Appointment.professional_id.in_(list(professional_ids)))
        if exclude_appointment_id is not None:
            q = q.filter(Appointment.id != exclude_appointment_id)

        return q.order_by(
            Appointment.date.asc(),
            Appointment.start_time.asc(),
            Appointment.id.asc(),
            AppointmentService.execution_order.asc(),
            AppointmentService.id.asc(),
        )

    def list_occupied_intervals(
        self,
        organization_id: int,
        start_date: date,
        end_date: date,
        professional_ids: list[int] | None = None,
        exclude_appointment_id: int | None = None,
    ) -> list[OccupiedInterval]:
        """
        Citas que ocupan agenda en [start_date, end_date], una entrada por
        cita con su duración total ya sumada.
        """
        if professional_ids is not None and not professional_ids:
            return []

        rows = self._query(
            organization_id, start_date, end_date, professional_ids, exclude_appointment_id
        ).all()

        out: list[OccupiedInterval] = []
        # filas contiguas por cita gracias al ORDER BY
        for _, group in groupby(rows, key=lambda r: r.appointment_id):
            group = list(group)
            head = group[0]
            lines = tuple(
                ServiceLine(
                    line_id=r.line_id,
                    service_id=r.service_id,
                    service_name=r.service_name,
                    execution_order=r.execution_order,
                    applied_duration_minutes=r.applied_duration_minutes or 0,
                    applied_price=r.applied_price if r.applied_price is not None else Decimal("0"),
                    discount=r.discount if r.discount is not None else Decimal("0"),
                )
                for r in group
                if r.line_id is not None
            )
            out.append(
                OccupiedInterval(
                    appointment_id=head.appointment_id,
                    professional_id=head.professional_id,
                    date=head.date,
                    start_time=head.start_time,
                    total_duration_minutes=sum(l.applied_duration_minutes for l in lines),
                    status=head.status,
                    code=head.code,
                    client_name=head.client_name,
                    services=lines,
                )
            )

        logger.debug(
            f"Libro de citas org={organization_id} {start_date}..{end_date}: "
            f"{len(rows)} filas -> {len(out)} citas"
        )
        return out


def index_by_professional_day(
    intervals: list[OccupiedInterval],
) -> dict[tuple[int, date], list[OccupiedInterval]]:
    index: dict[tuple[int, date], list[OccupiedInterval]] = {}
    for it in intervals:
        index.setdefault((it.professional_id, it.date), []).append(it)
    return index
