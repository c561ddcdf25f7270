from __future__ import annotations

from datetime import timedelta
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Project-wide configuration loaded from environment variables (.env optional)."""

    # Retention
    CLEAN_BEFORE: int = Field(86400, ge=0, description="Seconds a vote is kept before it becomes eligible for deletion")
    CLEAN_TIMEOUT: int = Field(60, ge=0, description="Minimum seconds between two retention sweeps")

    # Database
    DATABASE_PATH: str = Field("database/monday.db", description="Path to the SQLite database that stores submissions")
    DB_POOL_SIZE: int = Field(5, ge=1, description="Number of pooled aiosqlite connections per database file")

    # HTTP
    HOST: str = Field("0.0.0.0:3000", description="host:port the HTTP server binds to")
    ALLOW_ORIGINS: str = Field("", description="Space-separated list of origins allowed by CORS")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level for Loguru")
    LOG_DIR: str = Field("logs", description="Directory for rotating log files")

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
        "env_prefix": "",
    }

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------
    @model_validator(mode="after")
    def _check_host(self):  # noqa: D401 – pydantic hook
        """Fail fast if HOST is not a usable ``host:port`` pair."""
        _, sep, port = self.HOST.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"HOST must look like 'host:port', got {self.HOST!r}")
        return self

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def retention_horizon(self) -> timedelta:
        return timedelta(seconds=self.CLEAN_BEFORE)

    @property
    def sweep_interval(self) -> timedelta:
        return timedelta(seconds=self.CLEAN_TIMEOUT)

    @property
    def allowed_origins(self) -> List[str]:
        return [origin for origin in self.ALLOW_ORIGINS.split(" ") if origin]

    @property
    def bind_host(self) -> str:
        return self.HOST.rpartition(":")[0] or "0.0.0.0"

    @property
    def bind_port(self) -> int:
        return int(self.HOST.rpartition(":")[2])


settings = Settings()
