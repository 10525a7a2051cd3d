"""Application configuration management using Pydantic Settings.

This module defines the `Settings` class, which loads configuration parameters
from environment variables and a `.env` file. Only the CLI and the shipper
read settings; the conversion itself takes no configuration.

The `get_settings` function provides a cached, singleton instance of the
configuration, ensuring consistent settings throughout the application.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict as _SettingsConfigDict

OTLP_TRACES_PATH = "/v1/traces"


class Settings(BaseSettings):
    """Defines all application configuration parameters.

    Exporter variables reuse the standard OpenTelemetry names so an existing
    collector configuration can be pointed at this tool unchanged.
    """

    model_config = _SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Logging & runtime behavior
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    DRY_RUN: bool = Field(
        default=True,
        description="Write OTLP/JSON instead of sending the request to the OTLP endpoint",
    )

    # OTLP/HTTP export
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = Field(
        default=None,
        description="OTLP/HTTP base URL or full traces URL (e.g. http://localhost:4318)",
    )
    OTEL_EXPORTER_OTLP_HEADERS: str = Field(
        default="", description="Extra request headers as comma separated key=value pairs"
    )
    OTEL_EXPORTER_OTLP_TIMEOUT: int = Field(
        default=30, description="Timeout (seconds) for OTLP HTTP export requests"
    )
    EXPORT_MAX_ATTEMPTS: int = Field(
        default=3, description="Attempts per export request on transport errors (1 = no retry)"
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Optional[str]) -> str:
        """Upper-case the level name; blank falls back to INFO."""
        if not isinstance(v, str) or not v.strip():
            return "INFO"
        return v.strip().upper()

    @field_validator("EXPORT_MAX_ATTEMPTS")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        return max(1, v)

    @model_validator(mode="after")
    def normalize_endpoint(self):  # type: ignore[override]
        """Append the OTLP traces path to a bare base URL.

        Users may provide either the collector base URL or the full traces
        URL; both end up as ``<base>/v1/traces``.
        """
        if self.OTEL_EXPORTER_OTLP_ENDPOINT:
            endpoint = self.OTEL_EXPORTER_OTLP_ENDPOINT.strip().rstrip("/")
            if not endpoint.endswith(OTLP_TRACES_PATH):
                endpoint = endpoint + OTLP_TRACES_PATH
            self.OTEL_EXPORTER_OTLP_ENDPOINT = endpoint
        else:
            self.OTEL_EXPORTER_OTLP_ENDPOINT = None
        return self

    def otlp_headers(self) -> Dict[str, str]:
        """Parse OTEL_EXPORTER_OTLP_HEADERS into a dict.

        Entries without ``=`` are ignored; keys and values are stripped.
        """
        headers: Dict[str, str] = {}
        for item in self.OTEL_EXPORTER_OTLP_HEADERS.split(","):
            key, sep, value = item.partition("=")
            if sep and key.strip():
                headers[key.strip()] = value.strip()
        return headers


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover - trivial
    """Return a cached, singleton instance of the application settings."""
    return Settings()
