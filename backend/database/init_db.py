"""
Database initialization script
Creates the visits and cities tables and optionally seeds reference cities
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

# Add parent directory to path to import beenthere and the seed data
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy.engine import Engine
from beenthere.core.config import settings
from beenthere.core.database import Base, build_engine, build_session_factory
from beenthere.core.errors import CityAlreadyExists
from beenthere.models import City, Visit  # noqa: F401  (registers the tables)
from beenthere.services.city_catalog import CityCatalog
from beenthere.services.state_directory import StateDirectory
from database.seeds.cities import REFERENCE_CITIES


def init_db(engine: Engine, drop: bool = False) -> None:
    """Create all tables and their indexes"""
    if drop:
        Base.metadata.drop_all(bind=engine)
        print("Dropped existing tables")

    Base.metadata.create_all(bind=engine)
    print("All tables created successfully!")


def seed_cities(catalog: CityCatalog, cities: List[Tuple[str, str, float, float]] = REFERENCE_CITIES) -> Tuple[int, int]:
    """Insert reference cities, skipping the ones already present. Returns (added, skipped)."""
    added = skipped = 0
    for name, state, latitude, longitude in cities:
        city = City(name=name, state=state, latitude=latitude, longitude=longitude, verified=True)
        try:
            catalog.add_city(city)
            added += 1
        except CityAlreadyExists:
            skipped += 1
    print(f"Seeded {added} cities ({skipped} already present)")
    return added, skipped


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Initialize the BeenThere database")
    parser.add_argument("--database-url", default=settings.DATABASE_URL, help="Overrides DATABASE_URL")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    parser.add_argument("--seed", action="store_true", help="Load the reference cities")
    args = parser.parse_args(argv)

    print("Initializing database...")
    engine = build_engine(settings.model_copy(update={"DATABASE_URL": args.database_url}))
    try:
        init_db(engine, drop=args.drop)
        if args.seed:
            catalog = CityCatalog(build_session_factory(engine), StateDirectory())
            seed_cities(catalog)
    finally:
        engine.dispose()

    print("\nDatabase initialization complete!")
    print("You can now start the API server with: uvicorn beenthere.main:app --reload")


if __name__ == "__main__":
    main()
