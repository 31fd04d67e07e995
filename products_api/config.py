"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - mongodb_url is the only URI the gateway ever connects with

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works against a local mongod
    - DB_USER/DB_PASS/DB_HOST kept for Atlas deployments that configure credentials separately
"""

import json
from functools import lru_cache
from typing import Annotated
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Database
    mongodb_uri: str = "mongodb://localhost:27017"
    db_user: str | None = None
    db_pass: str | None = None
    db_host: str | None = None
    mongodb_database: str = "inventory"
    mongodb_collection: str = "products"
    mongodb_server_selection_timeout_ms: int = 5000
    # False = cold-start mode: no ping at startup, failures surface per request
    mongodb_connect_on_startup: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 5001

    # API
    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v):
        """Accept a JSON list or a comma-separated string."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def mongodb_url(self) -> str:
        """Atlas SRV URI when split credentials are set, else mongodb_uri."""
        if self.db_user and self.db_pass and self.db_host:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.db_host}/?retryWrites=true&w=majority"
            )
        return self.mongodb_uri


@lru_cache
def get_settings() -> Settings:
    return Settings()
