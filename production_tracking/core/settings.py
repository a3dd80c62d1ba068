from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the tracking engine and its FastAPI surface.

    Engine defaults (courier, placeholders, numbering prefixes) live here so the
    services never hard-code them.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Production Tracking API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Stateless API over the production tracking engine. Aggregates samples, "
            "materials and parcels into tracker views and computes the replacement "
            "collections for dispatch, feedback, stage, work-order and PP-meeting actions."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    LOG_LEVEL: str = Field(default="INFO", description="Root log level name")

    # Dispatch defaults
    DEFAULT_COURIER: str = Field(default="DHL")
    PARCEL_NUMBER_PREFIX: str = Field(default="EXP")
    PENDING_COURIER_PLACEHOLDER: str = Field(
        default="TBD", description="Courier stored when shipment info is skipped"
    )
    PENDING_TRACKING_PLACEHOLDER: str = Field(
        default="PENDING", description="Tracking number stored when shipment info is skipped"
    )
    DEFAULT_SAMPLE_UNIT_VALUE: float = Field(
        default=10.0, ge=0, description="Declared unit value for a dispatched sample line"
    )

    # R&D numbering
    DEV_SAMPLE_PREFIX: str = Field(default="DEV")

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      A new instance is built on each call so tests can override env vars freely.
    """
    return AppSettings()
