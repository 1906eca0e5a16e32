from sqlalchemy import Column, Integer, String, Numeric, Boolean, ForeignKey
from ..database import Base
from .organization import Organization  # noqa: F401  (registra la tabla FK)


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    duration_minutes = Column(Integer, nullable=False)  # duración canónica
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
