from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Query, Request

# Largest OFFSET the database integer type can bind
MAX_START = 2**63 - 1


@dataclass(frozen=True)
class Page:
    start: int
    limit: int


def _parse(name: str, raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"invalid '{name}' parameter: {raw!r}")


def get_page(
    request: Request,
    start: Optional[str] = Query(None, description="Offset of the first record"),
    limit: Optional[str] = Query(None, description="Maximum number of records"),
) -> Page:
    """Read start/limit query parameters, applying the configured defaults."""
    settings = request.app.state.settings

    start_value = _parse("start", start)
    limit_value = _parse("limit", limit)

    if start_value is None:
        start_value = 0
    if limit_value is None:
        limit_value = settings.PAGE_DEFAULT_LIMIT

    if start_value < 0:
        raise HTTPException(status_code=400, detail="'start' must not be negative")
    if start_value > MAX_START:
        raise HTTPException(status_code=400, detail=f"'start' must not exceed {MAX_START}")
    if limit_value <= 0:
        raise HTTPException(status_code=400, detail="'limit' must be positive")

    return Page(start=start_value, limit=min(limit_value, settings.PAGE_MAX_LIMIT))
