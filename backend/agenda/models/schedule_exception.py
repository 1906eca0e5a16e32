from sqlalchemy import Column, Integer, String, Date, Time, Boolean, ForeignKey
from ..database import Base
from .professional import Professional  # noqa: F401


class ScheduleException(Base):
    """
    Bloqueo de agenda (vacaciones, feriado, ausencia puntual).

    professional_id NULL -> bloqueo organizacional, afecta a todos.
    start_time/end_time NULL -> bloquea el día completo.
    is_recurring -> se repite cada año en el mismo tramo mes/día
    hasta recurrence_until (si está definido).
    """

    __tablename__ = "schedule_exceptions"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=True, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    title = Column(String, nullable=False, default="")
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_until = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
