"""
Live visit stream over Server Sent Events.

Each created visit is pushed as one ``data:`` record holding the visit JSON.
Idle periods are filled with keep-alive comments, which is also when a
vanished client is noticed. The change feed subscription is released on every
way out of the stream.
"""

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from ..core.errors import StoreFailure
from ..services.visit_store import VisitFeed, VisitStore
from .deps import get_visit_store

logger = logging.getLogger(__name__)

router = APIRouter()


async def visit_events(request: Request, feed: VisitFeed, heartbeat: float) -> AsyncIterator[str]:
    try:
        while True:
            try:
                visit = await feed.next(timeout=heartbeat)
            except asyncio.TimeoutError:
                if await request.is_disconnected():
                    logger.info("Visit stream client disconnected")
                    return
                yield ": keep-alive\n\n"
                continue

            if visit is None:
                logger.info("Visit stream ended")
                return
            yield f"data: {visit.model_dump_json()}\n\n"
    except StoreFailure as e:
        logger.error(f"Visit stream terminated: {e}")
        yield "event: error\ndata: visit stream interrupted\n\n"
    finally:
        feed.close()


@router.get("/visits")
async def stream_visits(
    request: Request,
    visits: VisitStore = Depends(get_visit_store)
):
    """Stream newly created visits as they are stored"""
    try:
        feed = visits.stream()
    except StoreFailure as e:
        logger.error(f"Opening visit stream failed: {e}")
        raise HTTPException(status_code=500, detail="unable to open visit stream")

    logger.info("Visit stream opened")
    heartbeat = request.app.state.settings.STREAM_HEARTBEAT_SECONDS
    return StreamingResponse(
        visit_events(request, feed, heartbeat),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
