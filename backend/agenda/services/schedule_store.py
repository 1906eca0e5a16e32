"""
Lectura de horarios laborales y bloqueos.

ScheduleStore.load() trae en dos queries todo lo necesario para un rango de
fechas y un conjunto de profesionales; las consultas por día se resuelven
en memoria (nunca una query por profesional/día).
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from ..core.intervals import to_minutes
from ..models.professional import WorkSchedule
from ..models.schedule_exception import ScheduleException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeWindow:
    start: int  # minutos desde medianoche
    end: int


@dataclass(frozen=True)
class ExceptionBlock:
    exception_id: int
    title: str
    is_org_wide: bool
    start: int | None = None
    end: int | None = None

    @property
    def whole_day(self) -> bool:
        return self.start is None or self.end is None


def _shift_year(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        # 29 de febrero en año no bisiesto
        return d.replace(year=d.year + years, day=28)


def exception_applies_on(exc: ScheduleException, day: date) -> bool:
    """True si el bloqueo cubre `day` (considerando recurrencia anual)."""
    if not exc.is_recurring:
        return exc.start_date <= day <= exc.end_date

    if day < exc.start_date:
        return False
    if exc.recurrence_until and day > exc.recurrence_until:
        return False

    span = exc.end_date - exc.start_date
    # un tramo que cruza fin de año puede haber empezado el año anterior
    for offset in (day.year - exc.start_date.year, day.year - exc.start_date.year - 1):
        if offset < 0:
            continue
        start = _shift_year(exc.start_date, offset)
        if start <= day <= start + span:
            return True
    return False


def schedule_applies_on(schedule: WorkSchedule, day: date) -> bool:
    if schedule.day_of_week != day.weekday():
        return False
    if schedule.valid_from and day < schedule.valid_from:
        return False
    if schedule.valid_until and day > schedule.valid_until:
        return False
    return True


class ScheduleStore:
    def __init__(self, db: Session, organization_id: int):
        self.db = db
        self.organization_id = organization_id
        self._schedules: dict[int, list[WorkSchedule]] = {}
        self._exceptions: list[ScheduleException] = []

    def load(self, professional_ids: list[int], start_date: date, end_date: date) -> "ScheduleStore":
        ids = list(professional_ids)
        self._schedules = {pid: [] for pid in ids}
        self._exceptions = []
        if not ids:
            return self

        schedules = (
            self.db.query(WorkSchedule)
            .filter(
                WorkSchedule.organization_id == self.organization_id,
                WorkSchedule.professional_id.in_(ids),
                WorkSchedule.is_active == True,  # noqa: E712
                WorkSchedule.allows_booking == True,  # noqa: E712
                or_(WorkSchedule.valid_from.is_(None), WorkSchedule.valid_from <= end_date),
                or_(WorkSchedule.valid_until.is_(None), WorkSchedule.valid_until >= start_date),
            )
            .order_by(WorkSchedule.start_time.asc())
            .all()
        )
        for s in schedules:
            self._schedules[s.professional_id].append(s)

        self._exceptions = (
            self.db.query(ScheduleException)
            .filter(
                ScheduleException.organization_id == self.organization_id,
                ScheduleException.is_active == True,  # noqa: E712
                or_(
                    ScheduleException.professional_id.is_(None),
                    ScheduleException.professional_id.in_(ids),
                ),
                or_(
                    ScheduleException.is_recurring == True,  # noqa: E712
                    and_(
                        ScheduleException.start_date <= end_date,
                        ScheduleException.end_date >= start_date,
                    ),
                ),
            )
            .order_by(ScheduleException.id.asc())
            .all()
        )

        logger.debug(
            f"Horarios cargados: {len(schedules)} franjas, {len(self._exceptions)} bloqueos "
            f"para {len(ids)} profesionales ({start_date} .. {end_date})"
        )
        return self

    def work_windows(self, professional_id: int, day: date) -> list[TimeWindow]:
        """Franjas del día ordenadas por inicio; lista vacía si no trabaja."""
        windows = [
            TimeWindow(to_minutes(s.start_time), to_minutes(s.end_time))
            for s in self._schedules.get(professional_id, [])
            if schedule_applies_on(s, day)
        ]
        return sorted(windows, key=lambda w: (w.start, w.end))

    def exceptions(self, professional_id: int, day: date) -> list[ExceptionBlock]:
        out: list[ExceptionBlock] = []
        for exc in self._exceptions:
            if exc.professional_id is not None and exc.professional_id != professional_id:
                continue
            if not exception_applies_on(exc, day):
                continue
            timed = exc.start_time is not None and exc.end_time is not None
            out.append(
                ExceptionBlock(
                    exception_id=exc.id,
                    title=exc.title or "",
                    is_org_wide=exc.professional_id is None,
                    start=to_minutes(exc.start_time) if timed else None,
                    end=to_minutes(exc.end_time) if timed else None,
                )
            )
        return out


def date_range(start: date, days: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(days)]
