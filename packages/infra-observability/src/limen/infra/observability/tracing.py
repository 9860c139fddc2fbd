"""OpenTelemetry tracing configuration for distributed tracing.

This module provides environment-aware distributed tracing with:
- Configurable exporters (OTLP, Console, None)
- Ratio-based sampling
- FastAPI auto-instrumentation for HTTP spans
- Service resource attributes (name, version)
- Graceful startup and shutdown

Usage:
    # During application startup (in lifespan handler)
    from limen.infra.observability.tracing import configure_tracing
    configure_tracing(app)

    # Shutdown during application shutdown
    from limen.infra.observability.tracing import shutdown_tracing
    shutdown_tracing()
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from fastapi import FastAPI

# Module-level variable for TracerProvider reference (needed for shutdown)
_tracer_provider: TracerProvider | None = None


class TracingSettings(BaseSettings):
    """OpenTelemetry tracing configuration from environment variables.

    Loads configuration from environment variables:
    - OTEL_SERVICE_NAME: Service name for traces (default: limen-delivery)
    - OTEL_SERVICE_VERSION: Service version (default: unknown)
    - OTEL_EXPORTER_TYPE: Exporter type - otlp, console, none (default: none)
    - OTEL_EXPORTER_OTLP_ENDPOINT: OTLP collector endpoint
    - OTEL_EXPORTER_OTLP_HEADERS: Auth headers as key1=val1,key2=val2
    - OTEL_TRACE_SAMPLE_RATE: Fraction of traces sampled, 0.0-1.0

    Example:
        >>> TracingSettings().is_enabled
        False
        >>> TracingSettings(exporter_type="console").is_enabled
        True
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    service_name: str = Field(
        default="limen-delivery",
        alias="OTEL_SERVICE_NAME",
        description="Service name for trace resource attributes",
    )
    service_version: str = Field(
        default="unknown",
        alias="OTEL_SERVICE_VERSION",
        description="Service version for trace resource attributes",
    )
    exporter_type: str = Field(
        default="none",
        alias="OTEL_EXPORTER_TYPE",
        description="Exporter type: otlp, console, none",
    )
    otlp_endpoint: str = Field(
        default="http://localhost:4317",
        alias="OTEL_EXPORTER_OTLP_ENDPOINT",
        description="OTLP collector gRPC endpoint",
    )
    otlp_headers: str = Field(
        default="",
        alias="OTEL_EXPORTER_OTLP_HEADERS",
        description="OTLP auth headers as key1=val1,key2=val2",
    )
    sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        alias="OTEL_TRACE_SAMPLE_RATE",
        description="Fraction of root traces to sample",
    )

    @field_validator("exporter_type", mode="before")
    @classmethod
    def normalize_exporter_type(cls, v: Any) -> str:
        """Normalize exporter type to lowercase."""
        if isinstance(v, str):
            return v.lower()
        return str(v)

    @field_validator("exporter_type")
    @classmethod
    def validate_exporter_type(cls, v: str) -> str:
        """Validate exporter type is a known type.

        Raises:
            ValueError: If exporter type is not valid.
        """
        valid_types = {"otlp", "console", "none"}
        if v not in valid_types:
            msg = f"exporter_type must be one of {valid_types}"
            raise ValueError(msg)
        return v

    @property
    def is_enabled(self) -> bool:
        """True if exporter_type is not "none"."""
        return self.exporter_type != "none"

    @property
    def otlp_headers_dict(self) -> dict[str, str]:
        """Parse OTLP headers from comma-separated key=value pairs.

        Example:
            >>> TracingSettings(otlp_headers="key1=val1,key2=val2").otlp_headers_dict
            {'key1': 'val1', 'key2': 'val2'}
        """
        if not self.otlp_headers:
            return {}
        result: dict[str, str] = {}
        for pair in self.otlp_headers.split(","):
            if "=" in pair:
                # Split on first = only to handle values with = in them
                key, value = pair.split("=", 1)
                result[key.strip()] = value.strip()
        return result


@lru_cache(maxsize=1)
def get_tracing_settings() -> TracingSettings:
    """Get cached TracingSettings instance.

    Clear cache with ``get_tracing_settings.cache_clear()`` for testing.
    """
    return TracingSettings()


def _create_exporter(settings: TracingSettings) -> SpanExporter:
    """Create span exporter based on settings.

    Raises:
        ValueError: If exporter_type is not recognized.
    """
    if settings.exporter_type == "otlp":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )

        return OTLPSpanExporter(
            endpoint=settings.otlp_endpoint,
            headers=settings.otlp_headers_dict if settings.otlp_headers_dict else None,
        )
    if settings.exporter_type == "console":
        return ConsoleSpanExporter()
    msg = f"Unknown exporter type: {settings.exporter_type}"
    raise ValueError(msg)


def configure_tracing(app: FastAPI, settings: TracingSettings | None = None) -> None:
    """Configure OpenTelemetry tracing for the FastAPI application.

    Initializes the OpenTelemetry SDK with:
    - TracerProvider with service resource attributes and ratio sampling
    - BatchSpanProcessor for async span export
    - Configured exporter (OTLP or Console)
    - FastAPI auto-instrumentation for HTTP spans

    Should be called once during application startup (in lifespan handler)
    AFTER configure_logging().

    Args:
        app: FastAPI application instance for instrumentation.
        settings: Optional TracingSettings. If None, loads from environment.

    Note:
        When exporter_type is "none", this function returns immediately
        without initializing any tracing infrastructure. Spans created by
        ``traced_operation`` and ``start_span`` are then non-recording.
    """
    global _tracer_provider

    if settings is None:
        settings = get_tracing_settings()

    if not settings.is_enabled:
        return

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": settings.service_version,
        }
    )

    provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(settings.sample_rate),
    )
    provider.add_span_processor(BatchSpanProcessor(_create_exporter(settings)))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider

    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(app)


def shutdown_tracing() -> None:
    """Flush pending spans and shut down the TracerProvider.

    Safe to call multiple times (idempotent).
    """
    global _tracer_provider

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
