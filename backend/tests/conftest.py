import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DB_SLOW_QUERY_THRESHOLD", "0")

from datetime import date, time, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from agenda.core.clock import local_today  # noqa: E402
from agenda.core.security import create_access_token  # noqa: E402
from agenda.database import Base, get_db  # noqa: E402
from agenda.main import app  # noqa: E402
from agenda.models.appointment import Appointment, AppointmentService, AppointmentStatus  # noqa: E402
from agenda.models.client import Client  # noqa: E402
from agenda.models.organization import Organization  # noqa: E402
from agenda.models.professional import Professional, ProfessionalService, WorkSchedule  # noqa: E402
from agenda.models.schedule_exception import ScheduleException  # noqa: E402
from agenda.models.service import Service  # noqa: E402

# 2030-01-07 es lunes
MONDAY = date(2030, 1, 7)
TODAY = date(2030, 1, 1)


def hm(value: str) -> time:
    h, m = value.split(":")
    return time(int(h), int(m))


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def statements(engine):
    """Lista de sentencias SQL ejecutadas mientras el test corre."""
    seen: list[str] = []

    @event.listens_for(engine, "before_cursor_execute")
    def _count(conn, cursor, statement, parameters, context, executemany):
        seen.append(statement)

    yield seen
    event.remove(engine, "before_cursor_execute", _count)


class Seed:
    """Atajos para poblar la base en los tests."""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def organization(self, name="Org"):
        return self._save(Organization(name=name))

    def service(self, org, name="Corte", duration=30, price="100.00"):
        return self._save(
            Service(organization_id=org.id, name=name, duration_minutes=duration, price=Decimal(price))
        )

    def professional(self, org, name="Ana", services=(), is_active=True):
        prof = self._save(Professional(organization_id=org.id, name=name, is_active=is_active))
        self.offer(prof, *services)
        return prof

    def offer(self, prof, *services, is_active=True):
        for svc in services:
            self.db.add(ProfessionalService(professional_id=prof.id, service_id=svc.id, is_active=is_active))
        self.db.commit()

    def schedule(self, prof, weekday, start="09:00", end="18:00", **kw):
        return self._save(
            WorkSchedule(
                organization_id=prof.organization_id,
                professional_id=prof.id,
                day_of_week=weekday,
                start_time=hm(start),
                end_time=hm(end),
                **kw,
            )
        )

    def client(self, org, name="Juan Pérez"):
        return self._save(Client(organization_id=org.id, name=name))

    def appointment(self, prof, client, day, start, services=(), status=AppointmentStatus.CONFIRMADA):
        """services: iterable de (Service, duración_aplicada) o (Service, duración, cancelado)."""
        appt = Appointment(
            organization_id=prof.organization_id,
            professional_id=prof.id,
            client_id=client.id,
            date=day,
            start_time=hm(start),
            status=status,
        )
        for order, item in enumerate(services, start=1):
            svc, duration = item[0], item[1]
            cancelled = item[2] if len(item) > 2 else False
            appt.services.append(
                AppointmentService(
                    service_id=svc.id,
                    applied_duration_minutes=duration,
                    applied_price=svc.price,
                    execution_order=order,
                    is_cancelled=cancelled,
                )
            )
        appt = self._save(appt)
        appt.code = f"ORG{prof.organization_id:03d}-{appt.id:05d}"
        self.db.commit()
        return appt

    def exception(self, org, start_date, end_date=None, prof=None, start=None, end=None,
                  title="Bloqueo", **kw):
        return self._save(
            ScheduleException(
                organization_id=org.id,
                professional_id=prof.id if prof else None,
                start_date=start_date,
                end_date=end_date or start_date,
                start_time=hm(start) if start else None,
                end_time=hm(end) if end else None,
                title=title,
                **kw,
            )
        )


@pytest.fixture()
def seed(db):
    return Seed(db)


@pytest.fixture()
def basic_setup(seed):
    """Una organización, un servicio de 30', una profesional lunes 09-18."""
    org = seed.organization()
    svc = seed.service(org, duration=30)
    prof = seed.professional(org, services=[svc])
    seed.schedule(prof, MONDAY.weekday())
    client = seed.client(org)
    return {"org": org, "service": svc, "prof": prof, "client": client}


@pytest.fixture()
def api(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def upcoming_day():
    """Un día futuro cercano, dentro de los límites de fecha reales."""
    return local_today() + timedelta(days=7)


def auth_headers(org_id: int, role: str = "admin", sub: str = "u1") -> dict:
    return {"Authorization": f"Bearer {create_access_token(sub, org_id, role)}"}
