"""Database connection helper."""

import os
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

# Importing settings loads the project .env
from vancouver_accidents.config import settings  # noqa: F401


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    user = os.getenv("POSTGRES_USER", "accidents_user")
    password = os.getenv("POSTGRES_PASSWORD", "accidents_password")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "vancouver_accidents")
    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


@lru_cache(maxsize=None)
def get_engine(url: str | None = None) -> Engine:
    return create_engine(url or get_database_url())
