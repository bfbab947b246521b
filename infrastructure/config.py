"""Service settings read from APP__* environment variables."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    service_name: str = "order-service"
    db_dsn: Optional[str] = None
    log_level: str = "INFO"
    create_schema: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            service_name=os.getenv("APP__SERVICE_NAME", "order-service"),
            db_dsn=os.getenv("APP__DB_DSN") or None,
            log_level=os.getenv("APP__LOG_LEVEL", "INFO").upper(),
            create_schema=os.getenv("APP__DB_CREATE_SCHEMA", "true").strip().lower() in _TRUTHY,
        )

    @property
    def log_level_value(self) -> int:
        """Numeric logging level; unknown names fall back to INFO."""
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> Settings:
    return Settings.from_env()
