"""NetDrive configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "NetDrive"
    debug: bool = True
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Storage backend: "json" = metadata.json + blobs on disk, "database" = SQL tables
    storage_backend: Literal["json", "database"] = "json"

    # Storage paths (relative resolved from backend/ at runtime)
    data_dir: str = "./data"
    upload_dir: str = "./data/upload"
    metadata_file: str = "./data/metadata.json"
    audit_file: str = "./data/audit.json"

    # Relational variant, e.g. sqlite+aiosqlite:///./data/netdrive.db
    database_url: str = ""

    # Audit trail
    audit_retention: int = 1000  # JSON store keeps the newest N entries
    audit_read_limit: int = 100
    audit_default_ip: str = "192.168.1.100"  # placeholder, not captured per request
    audit_default_mac: str = "00:1B:44:11:3A:B7"
    audit_mutations: bool = True  # record UPLOAD/MOVE/DELETE server-side

    uvicorn_workers: int = 1

    @property
    def uses_database(self) -> bool:
        return self.storage_backend == "database"

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="NETDRIVE_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:3000"]

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure storage paths are absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        for field in ("data_dir", "upload_dir", "metadata_file", "audit_file"):
            val = getattr(self, field)
            if not Path(val).is_absolute():
                setattr(self, field, str(base / val))
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
