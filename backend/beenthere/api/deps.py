from fastapi import HTTPException, Request

from ..core.content import decode_body
from ..core.errors import ValidationFailure
from ..schemas.visit import VisitCreate
from ..services.city_catalog import CityCatalog
from ..services.state_directory import StateDirectory
from ..services.visit_store import VisitStore


def get_visit_store(request: Request) -> VisitStore:
    return request.app.state.visits


def get_city_catalog(request: Request) -> CityCatalog:
    return request.app.state.cities


def get_state_directory(request: Request) -> StateDirectory:
    return request.app.state.states


async def get_visit_body(request: Request) -> VisitCreate:
    """Decode a JSON or XML visit body. Undecodable bodies are a client error."""
    try:
        data = await decode_body(request)
        return VisitCreate.model_validate(data)
    except ValidationFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        # pydantic.ValidationError
        raise HTTPException(status_code=400, detail=f"unable to parse body: {e}")
