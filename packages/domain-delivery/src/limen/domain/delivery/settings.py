"""Delivery configuration.

Every option degrades gracefully: a missing hosted zone or base domain turns
DNS automation into a no-op and a missing certificate keeps tenants on the
CDN domain. Only ``DNSOrchestrator.validate_configuration`` reports these as
errors.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeliverySettings(BaseSettings):
    """Tenant delivery configuration from environment variables.

    Environment Variables:
        DELIVERY_CUSTOM_DOMAIN_ENABLED: Bind ``{tenant}.{base_domain}`` aliases; takes effect
            only with DELIVERY_DNS_ENABLED (default: false)
        DELIVERY_BASE_DOMAIN: Base domain for tenant aliases (e.g. example.com)
        DELIVERY_DNS_ENABLED: Manage alias CNAME records in Route 53 (default: false)
        DELIVERY_HOSTED_ZONE_ID: Route 53 hosted zone holding the base domain
        DELIVERY_CERTIFICATE_ARN: ACM certificate (us-east-1) covering the aliases
        DELIVERY_ORIGIN_BUCKET: S3 bucket holding ``tenants/{tenant}/deployments``
        DELIVERY_PRICE_CLASS: CloudFront price class (default: PriceClass_100)
        DELIVERY_DNS_TTL: TTL for alias records in seconds (default: 300)
        DELIVERY_PROPAGATION_POLL_INTERVAL: Seconds between change status polls (default: 10)
        DELIVERY_PROPAGATION_TIMEOUT: Seconds to wait for INSYNC (default: 300)
    """

    model_config = SettingsConfigDict(
        env_prefix="DELIVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    custom_domain_enabled: bool = Field(default=False, description="Bind tenant aliases")
    base_domain: str = Field(default="", description="Base domain for tenant aliases")
    dns_enabled: bool = Field(default=False, description="Manage alias DNS records")
    hosted_zone_id: str | None = Field(default=None, description="Route 53 hosted zone id")
    certificate_arn: str | None = Field(default=None, description="ACM certificate ARN")
    origin_bucket: str = Field(default="", description="Origin S3 bucket name")
    price_class: str = Field(
        default="PriceClass_100",
        pattern="^PriceClass_(100|200|All)$",
        description="CloudFront price class",
    )
    dns_ttl: int = Field(default=300, ge=60, le=86400, description="Alias record TTL")
    propagation_poll_interval: float = Field(
        default=10.0, gt=0, description="Seconds between propagation polls"
    )
    propagation_timeout: float = Field(
        default=300.0, gt=0, description="Seconds to wait for propagation"
    )

    @field_validator("base_domain")
    @classmethod
    def _normalize_base_domain(cls, value: str) -> str:
        return value.strip().strip(".").lower()

    @field_validator("hosted_zone_id", "certificate_arn")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def get_delivery_settings() -> DeliverySettings:
    """Get cached DeliverySettings instance.

    Clear cache with ``get_delivery_settings.cache_clear()`` for testing.
    """
    return DeliverySettings()
