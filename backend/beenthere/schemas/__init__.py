from .visit import Visit, VisitCreate, VisitList, CityNameList, StateNameList
from .city import City, GeoPoint

__all__ = [
    "Visit",
    "VisitCreate",
    "VisitList",
    "CityNameList",
    "StateNameList",
    "City",
    "GeoPoint",
]
