"""
Validación de escritura y creación de citas.

Comparte con la consulta de disponibilidad el almacén de horarios, el libro
de citas y el predicado de solapamiento (core.intervals.overlaps), de modo
que un slot anunciado como libre sea aceptado aquí y uno ocupado sea
rechazado. Esta es la autoridad contra la doble reserva: la consulta de
disponibilidad es solo una foto.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal

from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError
from ..core.intervals import fmt_minutes, to_minutes
from ..models.appointment import Appointment, AppointmentService, AppointmentStatus, RELEASED_STATUSES
from ..models.client import Client
from ..models.professional import Professional, ProfessionalService
from ..models.service import Service
from ..schemas.appointment import AppointmentCreate
from .conflicts import find_booking, find_exception
from .ledger import LedgerReader
from .schedule_store import ScheduleStore
from .slots import fits_in_windows

logger = logging.getLogger(__name__)


@dataclass
class SlotCheck:
    valid: bool
    errors: list[dict] = field(default_factory=list)


class BookingService:
    def __init__(self, db: Session):
        self.db = db

    def check_slot(
        self,
        organization_id: int,
        professional_id: int,
        day: date,
        start: time,
        duration_minutes: int,
        exclude_appointment_id: int | None = None,
    ) -> SlotCheck:
        """¿Se puede reservar [start, start+duración) para el profesional ese día?"""
        start_min = to_minutes(start)
        end_min = start_min + duration_minutes
        errors: list[dict] = []

        store = ScheduleStore(self.db, organization_id).load([professional_id], day, day)
        windows = store.work_windows(professional_id, day)
        if not windows:
            errors.append({"tipo": "SIN_HORARIO_LABORAL", "mensaje": "El profesional no trabaja ese día"})
        elif not fits_in_windows(windows, start_min, duration_minutes):
            franjas = ", ".join(f"{fmt_minutes(w.start)}-{fmt_minutes(w.end)}" for w in windows)
            errors.append(
                {
                    "tipo": "FUERA_HORARIO_LABORAL",
                    "mensaje": f"El horario {fmt_minutes(start_min)}-{fmt_minutes(end_min)} "
                    f"está fuera del horario laboral ({franjas})",
                }
            )

        block = find_exception(start_min, end_min, store.exceptions(professional_id, day))
        if block is not None:
            scope = "Bloqueo organizacional" if block.is_org_wide else "Bloqueo del profesional"
            errors.append({"tipo": "HORARIO_BLOQUEADO", "mensaje": f"{scope}: {block.title}"})

        occupied = LedgerReader(self.db).list_occupied_intervals(
            organization_id,
            day,
            day,
            professional_ids=[professional_id],
            exclude_appointment_id=exclude_appointment_id,
        )
        booking = find_booking(start_min, end_min, occupied)
        if booking is not None:
            errors.append(
                {
                    "tipo": "CONFLICTO_CITA",
                    "mensaje": f"Se solapa con la cita {booking.code or booking.appointment_id} "
                    f"({fmt_minutes(booking.start)}-{fmt_minutes(booking.end)})",
                }
            )

        if errors:
            logger.warning(
                f"Validación fallida prof={professional_id} {day} "
                f"{fmt_minutes(start_min)}-{fmt_minutes(end_min)}: {[e['tipo'] for e in errors]}"
            )
        return SlotCheck(valid=not errors, errors=errors)

    def _lock_professional(self, organization_id: int, professional_id: int) -> Professional:
        # FOR UPDATE serializa las altas concurrentes del mismo profesional
        # (en SQLite no se emite y la escritura ya es serializada)
        prof = (
            self.db.query(Professional)
            .filter(
                Professional.id == professional_id,
                Professional.organization_id == organization_id,
                Professional.is_active == True,  # noqa: E712
            )
            .with_for_update()
            .first()
        )
        if not prof:
            raise NotFoundError()
        return prof

    def create_appointment(self, organization_id: int, payload: AppointmentCreate) -> Appointment:
        self._lock_professional(organization_id, payload.profesional_id)

        client = (
            self.db.query(Client)
            .filter(Client.id == payload.cliente_id, Client.organization_id == organization_id)
            .first()
        )
        if not client:
            raise NotFoundError()

        ids = {s.servicio_id for s in payload.servicios}
        services = {
            s.id: s
            for s in self.db.query(Service)
            .filter(
                Service.id.in_(ids),
                Service.organization_id == organization_id,
                Service.is_active == True,  # noqa: E712
            )
            .all()
        }
        if len(services) != len(ids):
            raise NotFoundError()

        offered = {
            row.service_id
            for row in self.db.query(ProfessionalService.service_id)
            .filter(
                ProfessionalService.professional_id == payload.profesional_id,
                ProfessionalService.service_id.in_(ids),
                ProfessionalService.is_active == True,  # noqa: E712
            )
            .all()
        }
        missing = [
            {
                "tipo": "SERVICIO_NO_ASIGNADO",
                "mensaje": f"El profesional no tiene asignado el servicio {services[sid].name}",
            }
            for sid in sorted(ids - offered)
        ]
        if missing:
            logger.warning(f"Servicios no asignados prof={payload.profesional_id}: {sorted(ids - offered)}")
            self.db.rollback()
            raise ConflictError(missing)

        lines: list[AppointmentService] = []
        for order, item in enumerate(payload.servicios, start=1):
            svc = services[item.servicio_id]
            lines.append(
                AppointmentService(
                    service_id=svc.id,
                    applied_duration_minutes=(
                        item.duracion_minutos if item.duracion_minutos is not None else svc.duration_minutes
                    ),
                    applied_price=item.precio if item.precio is not None else svc.price,
                    discount=item.descuento or Decimal("0"),
                    execution_order=order,
                )
            )
        duration = sum(l.applied_duration_minutes for l in lines)

        check = self.check_slot(
            organization_id, payload.profesional_id, payload.fecha, payload.hora_inicio, duration
        )
        if not check.valid:
            self.db.rollback()
            raise ConflictError(check.errors)

        appt = Appointment(
            organization_id=organization_id,
            professional_id=payload.profesional_id,
            client_id=client.id,
            date=payload.fecha,
            start_time=payload.hora_inicio,
            status=payload.estado,
            notes=payload.notas,
            services=lines,
        )
        self.db.add(appt)
        self.db.flush()
        appt.code = f"ORG{organization_id:03d}-{appt.id:05d}"
        self.db.commit()
        self.db.refresh(appt)

        logger.info(
            f"Cita creada {appt.code} prof={appt.professional_id} {appt.date} "
            f"{fmt_minutes(to_minutes(appt.start_time))} dur={duration}"
        )
        return appt

    def cancel_appointment(self, organization_id: int, appointment_id: int) -> Appointment:
        appt = (
            self.db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.organization_id == organization_id)
            .first()
        )
        if not appt:
            raise NotFoundError()
        if appt.status in RELEASED_STATUSES:
            return appt

        appt.status = AppointmentStatus.CANCELADA
        self.db.commit()
        self.db.refresh(appt)
        logger.info(f"Cita cancelada {appt.code or appt.id}")
        return appt
