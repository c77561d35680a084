from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
import logging

from ..core.content import render
from ..core.errors import StoreFailure, ValidationFailure
from ..core.pagination import Page, get_page
from ..schemas.visit import Visit, VisitCreate, VisitList, CityNameList, StateNameList
from ..services.city_catalog import CityCatalog, city_from_visit
from ..services.state_directory import StateDirectory
from ..services.visit_store import VisitStore
from .deps import get_city_catalog, get_state_directory, get_visit_body, get_visit_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{user}/visits", response_model=Visit)
def create_user_visit(
    user: str,
    request: Request,
    body: VisitCreate = Depends(get_visit_body),
    visits: VisitStore = Depends(get_visit_store),
    catalog: CityCatalog = Depends(get_city_catalog)
):
    """Record a city/state the user has visited"""
    visit = Visit(city=body.city, state=body.state)
    try:
        visits.validate(visit)
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail={"message": "invalid visit", "invalid": str(e)})
    visit.user = user

    # Only the state has to be known; unknown cities are accepted as-is
    try:
        catalog.validate_city(city_from_visit(visit))
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail={"message": "invalid visit", "invalid": str(e)})

    try:
        visits.add(visit)
    except StoreFailure as e:
        logger.error(f"Saving visit for user {user} failed: {e}")
        raise HTTPException(status_code=500, detail="unable to save user visit")

    # Echo the stored entity with its id and timestamp
    return render(request, visit, root="visit")


@router.delete("/{user}/visits/{visit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_visit(
    user: str,
    visit_id: str,
    visits: VisitStore = Depends(get_visit_store)
):
    """Remove a previously recorded visit"""
    try:
        visits.delete(visit_id)
    except StoreFailure as e:
        logger.error(f"Deleting visit {visit_id} of user {user} failed: {e}")
        raise HTTPException(status_code=500, detail="unable to delete user visit")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user}/visits", response_model=VisitList)
def list_user_visits(
    user: str,
    request: Request,
    page: Page = Depends(get_page),
    visits: VisitStore = Depends(get_visit_store)
):
    """Get a page of the user's visits, newest first"""
    try:
        records = visits.get_visits(user, page.start, page.limit)
    except StoreFailure as e:
        logger.error(f"Listing visits of user {user} failed: {e}")
        raise HTTPException(status_code=500, detail="unable to get visits")

    return render(request, VisitList(visits=records), item_tag="visit")


@router.get("/{user}/visits/cities", response_model=CityNameList)
def list_user_cities(
    user: str,
    request: Request,
    visits: VisitStore = Depends(get_visit_store)
):
    """Get the unique cities a user has visited"""
    try:
        cities = visits.get_cities(user)
    except StoreFailure as e:
        logger.error(f"Listing cities of user {user} failed: {e}")
        raise HTTPException(status_code=500, detail="unable to get visited cities")

    return render(request, CityNameList(cities=cities), item_tag="city")


@router.get("/{user}/visits/states", response_model=StateNameList)
def list_user_states(
    user: str,
    request: Request,
    visits: VisitStore = Depends(get_visit_store),
    states: StateDirectory = Depends(get_state_directory)
):
    """Get the full names of the unique states a user has visited"""
    try:
        codes = visits.get_states(user)
    except StoreFailure as e:
        logger.error(f"Listing states of user {user} failed: {e}")
        raise HTTPException(status_code=500, detail="unable to get visited states")

    # Map abbreviations to names, keeping the code for anything unrecognised
    names = []
    for code in codes:
        name = states.name_of(code) or code
        if name not in names:
            names.append(name)

    return render(request, StateNameList(states=names), item_tag="state")
