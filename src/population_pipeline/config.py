"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the MongoDB, DataUSA and cache settings from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_DATAUSA_URL = (
    "https://api.datausa.io/tesseract/data.jsonrecords"
    "?cube=pums_5&drilldowns=Year,Nation&measures=Total+Population"
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        mongo_uri: MongoDB connection URI.
        mongo_db: Target MongoDB database name.
        mongo_tls: Whether to connect with TLS using certifi's CA bundle.
        datausa_url: DataUSA `jsonrecords` endpoint for population by nation/year.
        data_dir: Local cache directory for downloaded payloads.
        request_timeout: HTTP timeout in seconds.
    """
    mongo_uri: str
    mongo_db: str
    mongo_tls: bool
    datausa_url: str
    data_dir: Path
    request_timeout: float


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `REQUEST_TIMEOUT` is not a positive number.
    """
    mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db = os.getenv("MONGO_DB", "population")
    mongo_tls = os.getenv("MONGO_TLS", "false").strip().lower() in _TRUTHY
    datausa_url = os.getenv("DATAUSA_URL", DEFAULT_DATAUSA_URL).strip()
    data_dir = Path(os.getenv("POPULATION_DATA_DIR", "data/datausa_cache"))

    raw_timeout = os.getenv("REQUEST_TIMEOUT", "60").strip()
    try:
        request_timeout = float(raw_timeout)
    except ValueError:
        raise RuntimeError(
            f"REQUEST_TIMEOUT must be a number of seconds, got {raw_timeout!r}."
        ) from None
    if request_timeout <= 0:
        raise RuntimeError("REQUEST_TIMEOUT must be positive.")

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        mongo_tls=mongo_tls,
        datausa_url=datausa_url or DEFAULT_DATAUSA_URL,
        data_dir=data_dir,
        request_timeout=request_timeout,
    )
