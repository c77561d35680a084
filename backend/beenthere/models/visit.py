import uuid

from sqlalchemy import Column, String, DateTime
from ..core.config import settings
from ..core.database import Base


def new_visit_id() -> str:
    """Opaque id assigned by the store on insert."""
    return str(uuid.uuid4())


class Visit(Base):
    """One user having been to one city/state at a point in time. Immutable once stored."""
    __tablename__ = settings.VISITS_TABLE

    id = Column(String(36), primary_key=True, default=new_visit_id)

    city = Column(String, nullable=False)
    state = Column(String, nullable=False)  # uppercase two-letter code

    # Secondary index backing every per-user query
    user = Column(String, nullable=False, index=True)

    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
