from sqlalchemy import Column, Integer, String, ForeignKey
from ..database import Base
from .organization import Organization  # noqa: F401


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
