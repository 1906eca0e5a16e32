from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Time,
    Boolean,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from ..database import Base
from .organization import Organization  # noqa: F401
from .service import Service


class Professional(Base):
    __tablename__ = "professionals"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    # baja lógica: nunca se borra mientras haya citas que lo referencien
    is_active = Column(Boolean, nullable=False, default=True)

    schedules = relationship("WorkSchedule", back_populates="professional")
    services = relationship("ProfessionalService", back_populates="professional")


class ProfessionalService(Base):
    """Servicios que ofrece cada profesional."""

    __tablename__ = "professional_services"

    id = Column(Integer, primary_key=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    professional = relationship("Professional", back_populates="services")
    service = relationship(Service)

    __table_args__ = (UniqueConstraint("professional_id", "service_id", name="uniq_prof_service"),)


class WorkSchedule(Base):
    """
    Franja laboral semanal. Puede haber varias por día (turno partido).
    day_of_week sigue date.weekday(): 0 = lunes ... 6 = domingo.
    Datos importados con 0 = domingo se convierten con (dia + 6) % 7,
    ver from_sunday_based().
    """

    __tablename__ = "work_schedules"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    valid_from = Column(Date, nullable=True)
    valid_until = Column(Date, nullable=True)
    allows_booking = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    label = Column(String, nullable=True)

    professional = relationship("Professional", back_populates="schedules")

    @staticmethod
    def from_sunday_based(day: int) -> int:
        """0 = domingo ... 6 = sábado (7 también es domingo) -> date.weekday()."""
        if not 0 <= day <= 7:
            raise ValueError(f"día de la semana fuera de rango: {day}")
        return (day + 6) % 7

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_schedule_start_before_end"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedule_day_of_week"),
    )
