from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Time,
    Enum,
    Numeric,
    Boolean,
    ForeignKey,
    Text,
    Index,
)
from sqlalchemy.orm import relationship
import enum
from ..database import Base
from .client import Client
from .professional import Professional
from .service import Service


class AppointmentStatus(str, enum.Enum):
    PENDIENTE = "pendiente"
    CONFIRMADA = "confirmada"
    EN_CURSO = "en_curso"
    COMPLETADA = "completada"
    CANCELADA = "cancelada"
    NO_ASISTIO = "no_asistio"


# cancelada / no_asistio no ocupan la agenda; el resto sí
RELEASED_STATUSES = (AppointmentStatus.CANCELADA, AppointmentStatus.NO_ASISTIO)
HOLDING_STATUSES = tuple(s for s in AppointmentStatus if s not in RELEASED_STATUSES)


class Appointment(Base):
    """
    Cita. No tiene hora de fin almacenada: la ocupación efectiva es
    start_time + suma de las duraciones aplicadas de sus servicios.
    """

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    code = Column(String, nullable=True, unique=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    status = Column(Enum(AppointmentStatus), nullable=False, default=AppointmentStatus.PENDIENTE)
    notes = Column(Text, default="")

    professional = relationship(Professional)
    client = relationship(Client)
    services = relationship(
        "AppointmentService",
        back_populates="appointment",
        order_by="AppointmentService.execution_order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_appointments_org_prof_date", "organization_id", "professional_id", "date"),
    )


class AppointmentService(Base):
    """Servicio dentro de una cita, con precio y duración aplicados."""

    __tablename__ = "appointment_services"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    applied_price = Column(Numeric(10, 2), nullable=False, default=0)
    applied_duration_minutes = Column(Integer, nullable=False, default=0)
    execution_order = Column(Integer, nullable=False, default=1)
    discount = Column(Numeric(5, 2), nullable=False, default=0)
    is_cancelled = Column(Boolean, nullable=False, default=False)

    appointment = relationship("Appointment", back_populates="services")
    service = relationship(Service)
