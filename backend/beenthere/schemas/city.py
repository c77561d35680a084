from pydantic import BaseModel, Field
from typing import Optional


class GeoPoint(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class City(BaseModel):
    """Catalog entry as exposed to clients (no verification flag)."""
    id: str
    name: str
    state: str
    location: Optional[GeoPoint] = None

    @classmethod
    def from_model(cls, city) -> "City":
        location = None
        if city.latitude is not None and city.longitude is not None:
            location = GeoPoint(latitude=city.latitude, longitude=city.longitude)
        return cls(id=city.id, name=city.name, state=city.state, location=location)
