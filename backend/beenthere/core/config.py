from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    APP_NAME: str = "BeenThere"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql+psycopg2://localhost:5432/been_there"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    # Read once, when the models are imported
    VISITS_TABLE: str = "visits"
    CITIES_TABLE: str = "cities"

    # Server (used by the console entry point only)
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8080

    # CORS
    CORS_ORIGINS: str = "*"

    # Pagination
    PAGE_DEFAULT_LIMIT: int = Field(default=20, gt=0)
    PAGE_MAX_LIMIT: int = Field(default=100, gt=0)

    # Live visit stream
    STREAM_HEARTBEAT_SECONDS: float = Field(default=15.0, gt=0)  # idle time before a keep-alive
    STREAM_MAX_PENDING: int = Field(default=256, gt=0)  # undelivered changes per subscriber

    class Config:
        env_file = ".env"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS_ORIGINS to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
