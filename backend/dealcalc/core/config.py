"""
Application configuration from environment variables.
Settings class using pydantic-settings; only JWT_SECRET is required.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env and default file locations from backend root so they work from backend/ or project root
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment and .env.
    Only JWT_SECRET is required; everything else has a local-dev default.
    """

    JWT_SECRET: str

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # HubSpot (accept both the private-app name and the OAuth-style name)
    hubspot_token: str = Field(
        default="",
        description="HubSpot Private App access token (Bearer auth)",
        validation_alias=AliasChoices("HUBSPOT_TOKEN", "HUBSPOT_ACCESS_TOKEN"),
    )
    hubspot_base_url: str = Field(
        default="https://api.hubapi.com",
        validation_alias="HUBSPOT_BASE_URL",
    )
    hubspot_timeout: float = Field(
        default=30.0,
        description="Per-request timeout for HubSpot calls, in seconds",
        validation_alias="HUBSPOT_TIMEOUT",
    )

    # Calculator
    calc_config_path: Path = Field(
        default=_BACKEND_ROOT / "calc-config.json",
        description="JSON file describing calculator features and line-item catalog",
        validation_alias="CALC_CONFIG_PATH",
    )
    calc_static_dir: Path = Field(
        default=_BACKEND_ROOT / "public",
        description="Directory holding the static calculator UI",
        validation_alias="CALC_STATIC_DIR",
    )
    calc_mount_path: str = Field(
        default="/hubspot/calc",
        validation_alias="CALC_MOUNT_PATH",
    )

    # Application
    port: int = Field(default=3000, validation_alias="PORT")
    # Store as string so env never triggers json.loads; parsed in cors_origins_list.
    cors_origins: str = Field(
        default="*",
        description="Comma-separated origins or JSON array",
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def normalize_cors_origins(cls, v: object) -> str:
        """Ensure we always have a string (avoid empty env causing json.loads in pydantic-settings)."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "*"
        if isinstance(v, list):
            return ",".join(str(x).strip() for x in v if str(x).strip())
        return str(v).strip()

    @field_validator("calc_mount_path", mode="before")
    @classmethod
    def normalize_mount_path(cls, v: object) -> str:
        path = str(v or "").strip().rstrip("/")
        if not path.startswith("/"):
            path = "/" + path
        return path

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS from comma-separated or JSON array string."""
        raw = (self.cors_origins or "").strip()
        if not raw:
            return ["*"]
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return [x.strip() for x in parsed if isinstance(x, str) and x.strip()]
        return [x.strip() for x in raw.split(",") if x.strip()] or ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
