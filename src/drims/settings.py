"""Configuration helpers for DRIMS."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_DATA_ROOT = Path.home() / "drims-data"


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    data_dir: Path = Field(default_factory=lambda: DEFAULT_DATA_ROOT)
    db_filename: str = "drims.sqlite3"
    log_level: str = "INFO"
    email_domain: str = "drims.edu"
    seed_file: Path | None = None

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    def ensure_directories(self) -> None:
        """Create data directories if they are missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        data_dir = Path(os.environ.get("DRIMS_DATA_DIR", DEFAULT_DATA_ROOT))
        seed_file = os.environ.get("DRIMS_SEED_FILE")
        return cls(
            data_dir=data_dir,
            db_filename=os.environ.get("DRIMS_DB_FILENAME", "drims.sqlite3"),
            log_level=os.environ.get("DRIMS_LOG_LEVEL", "INFO"),
            email_domain=os.environ.get("DRIMS_EMAIL_DOMAIN", "drims.edu"),
            seed_file=Path(seed_file) if seed_file else None,
        )


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    settings = Settings.load()
    settings.ensure_directories()
    return settings


def configure_logging(level: str = "INFO") -> None:
    """Send structlog output to stderr, filtered by level."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
