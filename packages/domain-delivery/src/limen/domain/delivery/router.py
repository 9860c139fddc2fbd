"""Tenant distribution REST API router.

Discovered by ``create_app()`` through the ``limen.routers`` entry point.
Endpoints are plain ``def`` functions: FastAPI runs them in its threadpool,
which keeps the blocking provider calls off the event loop.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from limen.domain.delivery.wiring import DeliveryServices, get_delivery_services
from limen.foundation.domain.exceptions import NotFoundError, ValidationError
from limen.foundation.domain.identifiers import TenantId

router = APIRouter(tags=["delivery"])


def get_services() -> DeliveryServices:
    """Delivery services dependency; overridden in tests."""
    return get_delivery_services()


Services = Annotated[DeliveryServices, Depends(get_services)]


# -- Request / Response models ------------------------------------------------


class DistributionResponse(BaseModel):
    distribution_id: str
    domain: str
    custom_domain: str | None
    deployment_url: str
    status: str


class InvalidationRequest(BaseModel):
    build_id: str | None = Field(default=None, min_length=1, max_length=128)


class InvalidationResponse(BaseModel):
    invalidation_id: str | None


class TeardownResponse(BaseModel):
    disabled: bool


class DnsValidationResponse(BaseModel):
    valid: bool
    enabled: bool
    hosted_zone_id: str | None
    domain: str | None
    hosted_zone_access: bool
    errors: list[str]
    warnings: list[str]


# -- Endpoints ----------------------------------------------------------------


@router.put("/tenants/{tenant_id}/distribution")
def provision_distribution(tenant_id: str, services: Services) -> DistributionResponse:
    """Get or create the tenant's distribution."""
    record = services.provisioner.get_or_create(_tenant(tenant_id))
    return DistributionResponse(**record.to_summary())


@router.get("/tenants/{tenant_id}/distribution")
def get_distribution(tenant_id: str, services: Services) -> DistributionResponse:
    """Return the tenant's last recorded distribution."""
    tenant = _tenant(tenant_id)
    record = services.provisioner.get_record(tenant)
    if record is None:
        raise NotFoundError("TenantDistribution", tenant)
    return DistributionResponse(**record.to_summary())


@router.post("/tenants/{tenant_id}/distribution/invalidations", status_code=202)
def invalidate_distribution_cache(
    tenant_id: str,
    services: Services,
    body: InvalidationRequest | None = None,
) -> InvalidationResponse:
    """Invalidate cached deployment paths of the tenant's distribution."""
    build_id = body.build_id if body is not None else None
    invalidation_id = services.provisioner.invalidate_cache(_tenant(tenant_id), build_id)
    return InvalidationResponse(invalidation_id=invalidation_id)


@router.delete("/tenants/{tenant_id}/distribution", status_code=202)
def teardown_distribution(tenant_id: str, services: Services) -> TeardownResponse:
    """Remove the tenant's alias record and disable its distribution."""
    return TeardownResponse(disabled=services.provisioner.delete(_tenant(tenant_id)))


@router.get("/admin/dns/validation")
def validate_dns_configuration(services: Services) -> DnsValidationResponse:
    """Report on the DNS automation configuration."""
    report = services.dns.validate_configuration()
    return DnsValidationResponse(
        valid=report.valid,
        enabled=report.enabled,
        hosted_zone_id=report.hosted_zone_id,
        domain=report.domain,
        hosted_zone_access=report.hosted_zone_access,
        errors=list(report.errors),
        warnings=list(report.warnings),
    )


# -- Helpers ------------------------------------------------------------------


def _tenant(tenant_id: str) -> str:
    try:
        return TenantId(tenant_id).value
    except ValueError as exc:
        raise ValidationError("tenant_id", str(exc)) from exc