"""
BeenThere API - record the cities and states users have visited.

``create_app`` wires every collaborator (engine, sessions, change feed, stores)
explicitly and hangs them off ``app.state``; routers reach them through
dependencies. ``app`` is the default instance for ASGI servers.
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .core.changefeed import ChangeFeedHub, capture_changes
from .core.content import http_error
from .core.config import Settings, settings as default_settings
from .core.database import build_engine, build_session_factory
from .core.request_logging import RequestLoggingMiddleware
from .api import cities, visits, stream
from .services.city_catalog import CityCatalog
from .services.state_directory import StateDirectory
from .services.visit_store import VisitStore
from .version import __version__

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    changefeed = ChangeFeedHub(max_pending=settings.STREAM_MAX_PENDING)
    capture_changes(session_factory, changefeed)
    states = StateDirectory()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.APP_NAME} {__version__} starting")
        yield
        # Shutdown: end live streams, then release pooled connections
        changefeed.close()
        engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Visited cities and states API",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.changefeed = changefeed
    app.state.states = states
    app.state.cities = CityCatalog(session_factory, states)
    app.state.visits = VisitStore(session_factory, changefeed)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Errors follow the same Accept negotiation as successful responses
    app.add_exception_handler(StarletteHTTPException, http_error)

    # Include routers
    app.include_router(cities.router, prefix="/states", tags=["Cities"])
    app.include_router(visits.router, prefix="/users", tags=["Visits"])
    app.include_router(stream.router, prefix="/stream", tags=["Stream"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/version")
    async def get_version():
        return {"version": __version__}

    return app


app = create_app()


def run() -> None:
    """Console entry point"""
    uvicorn.run(
        "beenthere.main:app",
        host=default_settings.SERVER_HOST,
        port=default_settings.SERVER_PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
