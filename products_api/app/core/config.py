"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration on a developer machine.  In
a container deployment you should override ``DATABASE_URL`` and
``PORT`` via the environment.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def normalize_log_level(name: Optional[str], default: str = "INFO") -> str:
    """Return the canonical upper-case name for ``name``, or ``default`` if unknown."""
    level = (name or "").strip().upper()
    level = LOG_LEVEL_ALIASES.get(level, level)
    return level if level in LOG_LEVELS else default


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "Products API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    # Optional file the root logger also writes to.
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    # Address the uvicorn server binds to.  ``PORT`` keeps the same name
    # and default as the original Node deployment so existing container
    # port mappings keep working.
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "4000")))

    # Path of the SQLite file backing the document store, or ``:memory:``.
    # Relative paths are resolved against the working directory by
    # ``core.db``.
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "productsdb.sqlite3"))

    # Comma-separated list of origins allowed to call the API from a
    # browser.  ``*`` allows any origin.
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")))

    def __post_init__(self) -> None:
        self.log_level = normalize_log_level(self.log_level)


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Tests construct their own
# ``Settings`` instances instead of mutating this one.
settings = Settings()
