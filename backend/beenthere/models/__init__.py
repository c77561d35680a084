from .visit import Visit
from .city import City

__all__ = [
    "Visit",
    "City",
]
