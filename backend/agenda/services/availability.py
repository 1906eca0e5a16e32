"""
Consulta de disponibilidad: orquesta política, horarios, libro de citas,
generación y clasificación de slots, y aplica la vista por nivel de detalle.

Es una lectura "snapshot": no reserva nada. Dos clientes pueden ver el mismo
slot libre; la validación de escritura (services/booking.py) es la única
autoridad contra la doble reserva.
"""
import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from ..config import settings
from ..core.clock import local_today
from ..core.errors import NotFoundError, ValidationError
from ..core.intervals import fmt_minutes, to_minutes
from ..models.professional import Professional, ProfessionalService
from ..models.service import Service
from ..schemas.availability import AvailabilityQuery
from .conflicts import Classification, Occupation, OccupationKind, classify
from .ledger import LedgerReader, index_by_professional_day
from .policy import clamp_range, resolve_policy
from .redaction import Slot, render_slot
from .schedule_store import ScheduleStore, date_range
from .slots import fits_in_windows, generate_slots

logger = logging.getLogger(__name__)

_WEEKDAYS_ES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")

OUTSIDE_HOURS = Classification(free=False, reason=Occupation(OccupationKind.FUERA_HORARIO))


def get_service(db: Session, organization_id: int, service_id: int) -> Service:
    service = (
        db.query(Service)
        .filter(
            Service.id == service_id,
            Service.organization_id == organization_id,
            Service.is_active == True,  # noqa: E712
        )
        .first()
    )
    if not service:
        raise NotFoundError()
    return service


def get_professional(db: Session, organization_id: int, professional_id: int) -> Professional:
    """Inexistente, inactivo o de otra organización -> el mismo 404 genérico."""
    prof = (
        db.query(Professional)
        .filter(
            Professional.id == professional_id,
            Professional.organization_id == organization_id,
            Professional.is_active == True,  # noqa: E712
        )
        .first()
    )
    if not prof:
        raise NotFoundError()
    return prof


def eligible_professionals(
    db: Session, organization_id: int, service_id: int, professional_id: int | None = None
) -> list[Professional]:
    """Profesionales activos que ofrecen el servicio."""
    q = (
        db.query(Professional)
        .join(ProfessionalService, ProfessionalService.professional_id == Professional.id)
        .filter(
            ProfessionalService.service_id == service_id,
            ProfessionalService.is_active == True,  # noqa: E712
            Professional.organization_id == organization_id,
            Professional.is_active == True,  # noqa: E712
        )
    )
    if professional_id is not None:
        q = q.filter(Professional.id == professional_id)
    return q.order_by(Professional.name.asc(), Professional.id.asc()).distinct().all()


def check_date_bounds(day: date, today: date) -> None:
    if day < today - timedelta(days=settings.AVAILABILITY_MAX_PAST_DAYS):
        raise ValidationError("fecha", "fecha: demasiado en el pasado")
    if day > today + timedelta(days=settings.AVAILABILITY_MAX_FUTURE_DAYS):
        raise ValidationError("fecha", "fecha: demasiado lejana en el futuro")


class AvailabilityService:
    def __init__(self, db: Session):
        self.db = db

    def compute_day(
        self,
        professional_id: int,
        day: date,
        store: ScheduleStore,
        occupied_index: dict,
        duration: int,
        granularity: int,
        exact_start: int | None = None,
    ) -> tuple[list, list[Slot]]:
        """
        Slots clasificados de un profesional en un día, sin redactar.
        Devuelve (franjas, slots). Sin franjas -> ([], []).
        """
        windows = store.work_windows(professional_id, day)
        if not windows:
            return [], []

        occupied = occupied_index.get((professional_id, day), [])
        exceptions = store.exceptions(professional_id, day)

        if exact_start is not None:
            if fits_in_windows(windows, exact_start, duration):
                result = classify(exact_start, duration, occupied, exceptions)
            else:
                result = OUTSIDE_HOURS
            starts = [(exact_start, result)]
        else:
            starts = [
                (s, classify(s, duration, occupied, exceptions))
                for s in generate_slots(windows, granularity, duration)
            ]

        slots = [
            Slot(
                date=day,
                start=start,
                duration_minutes=duration,
                professional_id=professional_id,
                free=result.free,
                reason=result.reason,
            )
            for start, result in starts
        ]
        return windows, slots

    def query(self, params: AvailabilityQuery, today: date | None = None) -> dict:
        today = today or local_today()
        check_date_bounds(params.fecha, today)

        org_id = params.organization_id
        policy = resolve_policy(params.role)
        level = policy.detail_level

        service = get_service(self.db, org_id, params.servicio_id)
        if params.profesional_id is not None:
            get_professional(self.db, org_id, params.profesional_id)

        range_days, clamped = clamp_range(params.rango_dias, policy)
        if clamped:
            logger.info(
                f"rango_dias reducido para rol={params.role!r}: "
                f"{params.rango_dias} -> {range_days} (org={org_id})"
            )

        duration = params.duracion or service.duration_minutes or params.intervalo_minutos
        start_date = params.fecha
        end_date = start_date + timedelta(days=range_days - 1)
        exact_start = to_minutes(params.hora) if params.hora is not None else None

        logger.info(
            f"Disponibilidad org={org_id} servicio={service.id} prof={params.profesional_id} "
            f"{start_date}..{end_date} dur={duration} int={params.intervalo_minutos} "
            f"hora={params.hora} nivel={level.label}"
        )

        professionals = eligible_professionals(
            self.db, org_id, service.id, params.profesional_id
        )
        prof_ids = [p.id for p in professionals]

        # Datos de todo el rango cargados de una vez
        store = ScheduleStore(self.db, org_id).load(prof_ids, start_date, end_date)
        occupied = LedgerReader(self.db).list_occupied_intervals(
            org_id,
            start_date,
            end_date,
            professional_ids=prof_ids,
            exclude_appointment_id=params.excluir_cita_id,
        )
        occupied_index = index_by_professional_day(occupied)

        by_date = []
        for day in date_range(start_date, range_days):
            entries = []
            for prof in professionals:
                windows, slots = self.compute_day(
                    prof.id,
                    day,
                    store,
                    occupied_index,
                    duration,
                    params.intervalo_minutos,
                    exact_start,
                )
                if not windows:
                    continue  # no trabaja este día

                entry = {
                    "profesional_id": prof.id,
                    "nombre": prof.name,
                    "horario_laboral": {
                        "inicio": fmt_minutes(windows[0].start),
                        "fin": fmt_minutes(max(w.end for w in windows)),
                    },
                }

                if params.solo_disponibles:
                    visible = [s for s in slots if s.free]
                    if not visible:
                        continue
                else:
                    visible = slots
                if exact_start is not None:
                    entry["disponible"] = slots[0].free

                entry["slots"] = [render_slot(s, level) for s in visible]
                entry["total_slots_disponibles"] = sum(1 for s in visible if s.free)
                entries.append(entry)

            by_date.append(
                {
                    "fecha": day.isoformat(),
                    "dia_semana": _WEEKDAYS_ES[day.weekday()],
                    "profesionales": entries,
                    "total_slots_disponibles_dia": sum(e["total_slots_disponibles"] for e in entries),
                }
            )

        logger.info(
            f"Disponibilidad calculada: {len(by_date)} fechas, "
            f"{sum(d['total_slots_disponibles_dia'] for d in by_date)} slots libres"
        )

        return {
            "servicio": {
                "id": service.id,
                "nombre": service.name,
                "duracion_minutos": service.duration_minutes,
                "precio": float(service.price) if service.price is not None else None,
            },
            "disponibilidad_por_fecha": by_date,
            "metadata": {
                "total_profesionales": len(professionals),
                "rango_dias_solicitado": params.rango_dias,
                "rango_dias_aplicado": range_days,
                "rango_reducido": clamped,
                "nivel_detalle": level.label,
                "rango_fechas": {
                    "desde": start_date.isoformat(),
                    "hasta": end_date.isoformat(),
                },
                "duracion_minutos": duration,
                "intervalo_minutos": params.intervalo_minutos,
                "hora": params.hora.strftime("%H:%M") if params.hora else None,
            },
        }
