"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with no configuration at all; in a deployment you
override them via environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "People API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    port: int = int(os.getenv("SERVER_PORT", "8080"))

    # Path to the SQLite database file.  Relative paths are resolved
    # against the package root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "people.db")

    # Name-inference sources.  Each one is queried with ``?name=<name>``.
    age_api_url: str = os.getenv("AGE_API_URL", "https://api.agify.io/")
    gender_api_url: str = os.getenv("GENDER_API_URL", "https://api.genderize.io/")
    nationality_api_url: str = os.getenv("NATIONALITY_API_URL", "https://api.nationalize.io/")

    # Client-level timeout for every outbound enrichment request, seconds.
    enrich_timeout: float = float(os.getenv("ENRICH_TIMEOUT", "60"))

    # Storage watchdog used by ``run.py``.
    db_ping_interval: float = float(os.getenv("DB_PING_INTERVAL", "5"))
    db_ping_timeout: float = float(os.getenv("DB_PING_TIMEOUT", "10"))


# Environment variables must be set before this module is imported; tests
# patch attributes on this instance instead.
settings = Settings()
