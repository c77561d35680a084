from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from beenthere.core.config import Settings
from beenthere.core.database import Base
from beenthere.main import create_app
from beenthere.models import City, Visit as VisitModel

FIRST_VISIT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        PAGE_DEFAULT_LIMIT=20,
        PAGE_MAX_LIMIT=50,
        STREAM_HEARTBEAT_SECONDS=0.1,
        STREAM_MAX_PENDING=16,
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    engine = app.state.engine
    Base.metadata.create_all(bind=engine)

    for name in ("Raleigh", "Charlotte"):
        app.state.cities.add_city(City(name=name, state="NC", verified=True))

    yield app

    app.state.changefeed.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def visits(app):
    return app.state.visits


@pytest.fixture
def catalog(app):
    return app.state.cities


@pytest.fixture
def insert_visit(app):
    """Write a visit row directly, with a chosen timestamp."""
    counter = {"n": 0}

    def _insert(user, city, state, timestamp=None):
        counter["n"] += 1
        visit_id = f"visit-{counter['n']:03d}"
        record = VisitModel(
            id=visit_id,
            user=user,
            city=city,
            state=state,
            timestamp=timestamp or FIRST_VISIT + timedelta(hours=counter["n"]),
        )
        with app.state.session_factory() as db:
            db.add(record)
            db.commit()
        return visit_id

    return _insert
