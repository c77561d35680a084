"""
City Catalog - reference data about known cities and states.

Visits are checked against the catalog before they are stored. Only the state
is verified; a visited city does not have to be in the catalog already.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.database import session_scope
from ..core.errors import CityAlreadyExists, NoSuchState, StoreFailure
from ..models.city import City as CityModel, city_id
from ..schemas.city import City
from ..schemas.visit import Visit
from .state_directory import StateDirectory

logger = logging.getLogger(__name__)


def city_from_visit(visit: Visit) -> CityModel:
    """Catalog entry implied by a visit. Not persisted."""
    return CityModel(
        id=city_id(visit.city, visit.state),
        name=visit.city,
        state=visit.state,
    )


class CityCatalog:

    def __init__(self, session_factory: sessionmaker, states: StateDirectory):
        self._sessions = session_factory
        self.states = states

    def validate_state(self, code: str) -> None:
        if self.states.name_of(code) == "":
            raise NoSuchState()

    def validate_city(self, city: CityModel) -> None:
        """Only the state of the city is checked."""
        self.validate_state(city.state)

    def city_names_in_state(self, code: str) -> List[str]:
        """Names of all catalog cities in a state; empty when there are none."""
        try:
            with session_scope(self._sessions) as db:
                rows = db.query(CityModel.name).filter(
                    CityModel.state == code.strip().upper()
                ).order_by(CityModel.name).all()
        except SQLAlchemyError as e:
            raise StoreFailure(f"unable to get cities: {e}") from e
        return [row.name for row in rows]

    def add_city(self, city: CityModel) -> City:
        """
        Insert a catalog entry.

        A city whose id is already present raises CityAlreadyExists so that
        callers can tell a repeated submission apart from a backend failure.
        """
        city.state = city.state.upper()
        city.id = city_id(city.name, city.state)
        try:
            with session_scope(self._sessions) as db:
                if db.get(CityModel, city.id) is not None:
                    raise CityAlreadyExists()
                db.add(city)
                try:
                    db.commit()
                except IntegrityError as e:
                    # Lost a race with a concurrent insert of the same city
                    raise CityAlreadyExists() from e
                stored = City.from_model(city)
        except SQLAlchemyError as e:
            raise StoreFailure(f"unable to add city: {e}") from e

        logger.info(f"Added city {city.id} to the catalog")
        return stored
