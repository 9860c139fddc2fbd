"""HTTP settings for the delivery API.

List-valued options accept comma-separated environment values, e.g.
``APP_EXCLUDE_ENTRY_POINTS=taskiq,observability`` for an API node that
runs without a worker broker or trace exporter.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class CORSSettings(BaseSettings):
    """CORS policy (``CORS_*``).

    ``Retry-After`` is exposed by default: browser clients need it to back
    off after a transient CloudFront or Route 53 failure.
    """

    model_config = SettingsConfigDict(env_prefix="CORS_", extra="ignore")

    allow_origins: Annotated[list[str], NoDecode] = Field(default=["*"])
    allow_methods: Annotated[list[str], NoDecode] = Field(default=["*"])
    allow_headers: Annotated[list[str], NoDecode] = Field(default=["*"])
    allow_credentials: bool = Field(default=False)
    expose_headers: Annotated[list[str], NoDecode] = Field(
        default=["X-Request-ID", "Retry-After"]
    )

    @field_validator(
        "allow_origins", "allow_methods", "allow_headers", "expose_headers", mode="before"
    )
    @classmethod
    def _parse_lists(cls, value: Any) -> Any:
        return _split_csv(value)

    @model_validator(mode="after")
    def _validate_credentials_with_wildcard(self) -> CORSSettings:
        if self.allow_credentials and "*" in self.allow_origins:
            msg = (
                "CORS allow_credentials=True cannot be combined with a wildcard origin; "
                "list the dashboard origins explicitly."
            )
            raise ValueError(msg)
        return self


def _installed_version() -> str:
    try:
        return version("limen-delivery")
    except PackageNotFoundError:
        return "0.0.0"


class AppSettings(BaseSettings):
    """Application factory settings (``APP_*``).

    Attributes:
        root_path: Path prefix when the API is mounted behind a gateway.
        exclude_groups: Entry point groups the factory skips entirely.
        exclude_entry_points: Entry point names skipped across all groups.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    title: str = Field(default="Limen Delivery API")
    version: str = Field(default_factory=_installed_version)
    description: str = Field(default="Per-tenant CDN distribution provisioning")
    root_path: str = Field(default="")
    docs_url: str | None = Field(default="/docs")
    redoc_url: str | None = Field(default="/redoc")
    openapi_url: str | None = Field(default="/openapi.json")
    debug: bool = Field(default=False)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    exclude_groups: Annotated[frozenset[str], NoDecode] = Field(default=frozenset())
    exclude_entry_points: Annotated[frozenset[str], NoDecode] = Field(default=frozenset())

    @field_validator("exclude_groups", "exclude_entry_points", mode="before")
    @classmethod
    def _parse_exclusions(cls, value: Any) -> Any:
        return _split_csv(value)

    @field_validator("root_path")
    @classmethod
    def _normalize_root_path(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value
