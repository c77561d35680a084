from sqlalchemy import Column, String, Float, DateTime, Boolean
from sqlalchemy.sql import func
from ..core.config import settings
from ..core.database import Base


def city_id(name: str, state: str) -> str:
    return f"{name},{state}"


class City(Base):
    """Reference catalog of known cities"""
    __tablename__ = settings.CITIES_TABLE

    # Always "<name>,<state>", so a second insert of the same city conflicts
    id = Column(String, primary_key=True)

    name = Column(String, nullable=False)
    state = Column(String, nullable=False, index=True)

    # Optional location
    latitude = Column(Float)
    longitude = Column(Float)

    # Internal only, never serialized to clients
    verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
