"""
Runtime configuration for the image gallery API.
"""
import os
from functools import lru_cache
from typing import Optional

import humanfriendly
from dotenv import load_dotenv
from pydantic import BaseModel
from sqlalchemy.engine import URL

load_dotenv()

DEFAULT_FRONTEND_URL = "http://localhost:5173"
DEFAULT_MAX_FILE_SIZE = "10MB"


class Settings(BaseModel):
    # Database
    DATABASE_URL: str

    # Object storage
    AWS_BUCKET_NAME: str
    AWS_REGION: str
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    S3_ENDPOINT_URL: Optional[str] = None

    # Uploads
    MAX_FILE_SIZE: int

    # HTTP
    FRONTEND_URL: str = DEFAULT_FRONTEND_URL
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"


def _build_database_url(env) -> Optional[str]:
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]

    parts = [env.get(name) for name in ("DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME")]
    if not all(parts):
        return None

    host, user, password, database = parts
    url = URL.create(
        "mysql+pymysql",
        username=user,
        password=password,
        host=host,
        port=int(env.get("DB_PORT", "3306")),
        database=database,
    )
    return url.render_as_string(hide_password=False)


def load_settings(env=None) -> Settings:
    """Read settings from the environment, refusing to continue when required values are missing."""
    env = os.environ if env is None else env

    database_url = _build_database_url(env)
    missing = []
    if not database_url:
        missing.append("DATABASE_URL (or DB_HOST, DB_USER, DB_PASSWORD, DB_NAME)")
    for name in ("AWS_BUCKET_NAME", "AWS_REGION"):
        if not env.get(name):
            missing.append(name)

    if missing:
        raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        DATABASE_URL=database_url,
        AWS_BUCKET_NAME=env["AWS_BUCKET_NAME"],
        AWS_REGION=env["AWS_REGION"],
        AWS_ACCESS_KEY_ID=env.get("AWS_ACCESS_KEY_ID") or None,
        AWS_SECRET_ACCESS_KEY=env.get("AWS_SECRET_ACCESS_KEY") or None,
        S3_ENDPOINT_URL=env.get("S3_ENDPOINT_URL") or None,
        MAX_FILE_SIZE=humanfriendly.parse_size(env.get("MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE)),
        FRONTEND_URL=env.get("FRONTEND_URL", DEFAULT_FRONTEND_URL),
        PORT=int(env.get("PORT", "3001")),
        LOG_LEVEL=env.get("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()


__all__ = ["Settings", "load_settings", "get_settings"]
