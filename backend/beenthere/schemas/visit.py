from pydantic import BaseModel, field_validator
from datetime import datetime, timezone
from typing import List, Optional


class VisitBase(BaseModel):
    city: str = ""
    state: str = ""

    @field_validator("city", "state", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value


class VisitCreate(VisitBase):
    """Request body for a new visit. Anything besides city/state is ignored."""
    pass


class Visit(VisitBase):
    id: str = ""
    user: str = ""
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; everything is stored as UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class VisitList(BaseModel):
    visits: List[Visit]


class CityNameList(BaseModel):
    cities: List[str]


class StateNameList(BaseModel):
    states: List[str]
