from fastapi import APIRouter, Depends, HTTPException, Request
import logging

from ..core.content import render
from ..core.errors import NoSuchState, StoreFailure
from ..schemas.visit import CityNameList
from ..services.city_catalog import CityCatalog
from .deps import get_city_catalog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{state}/cities", response_model=CityNameList)
def list_cities_in_state(
    state: str,
    request: Request,
    catalog: CityCatalog = Depends(get_city_catalog)
):
    """List the catalog cities of a state"""
    try:
        catalog.validate_state(state)
    except NoSuchState:
        raise HTTPException(status_code=404, detail="no such state")

    try:
        names = catalog.city_names_in_state(state)
    except StoreFailure as e:
        logger.error(f"Listing cities in {state} failed: {e}")
        raise HTTPException(status_code=500, detail="unable to get cities")

    return render(request, CityNameList(cities=names), item_tag="city")
