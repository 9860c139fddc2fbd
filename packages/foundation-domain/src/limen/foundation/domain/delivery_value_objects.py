"""Value objects for tenant edge delivery.

Immutable domain primitives shared by the conflict resolver, the DNS
orchestrator and the distribution provisioner. Provider-facing shapes
(``Distribution``, ``DNSRecord``) are normalized by the adapters so that
domain code never handles raw SDK responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class DistributionStatus(StrEnum):
    """Lifecycle of a tenant's distribution record.

    Absent -> Provisioning -> Deployed -> Disabled -> Provisioning (re-enable).
    Absence is modelled as "no record", never as a status value.
    """

    PROVISIONING = "Provisioning"
    DEPLOYED = "Deployed"
    DISABLED = "Disabled"

    @classmethod
    def from_provider(cls, provider_status: str, *, enabled: bool) -> DistributionStatus:
        """Map a CDN provider status onto the record lifecycle.

        A disabled distribution is ``Disabled`` regardless of whether the
        provider has finished propagating the change.
        """
        if not enabled:
            return cls.DISABLED
        if provider_status == "Deployed":
            return cls.DEPLOYED
        return cls.PROVISIONING


class ResolutionStrategy(StrEnum):
    """Outcome of alias conflict resolution, in ladder priority order."""

    NO_CONFLICT = "no_conflict"
    REUSE_EXISTING = "reuse_existing"
    ALTERNATIVE_ALIAS = "alternative_alias"
    CDN_DOMAIN_ONLY = "cdn_domain_only"


class DNSChangeAction(StrEnum):
    """Record change actions understood by the DNS control plane."""

    CREATE = "CREATE"
    UPSERT = "UPSERT"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class Distribution:
    """Provider view of a CDN distribution.

    Attributes:
        id: Provider distribution identifier.
        arn: Resource name used for tag lookups.
        domain_name: Provider-assigned hostname (e.g. ``d111.cloudfront.net``).
        status: Raw provider deployment status (``InProgress`` / ``Deployed``).
        enabled: Whether the distribution serves traffic.
        aliases: Alternate hostnames bound to the distribution.
        comment: Free-form comment, part of the ownership contract.
        origin_paths: Origin path of every configured origin.
    """

    id: str
    arn: str
    domain_name: str
    status: str
    enabled: bool
    aliases: tuple[str, ...] = ()
    comment: str = ""
    origin_paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AliasConflict:
    """Result of a fleet-wide alias lookup. Never persisted.

    Attributes:
        alias: Hostname that was looked up.
        has_conflict: Whether any distribution already binds the alias.
        conflicting_distribution_id: Id of the binding distribution.
        conflicting_status: Provider status of the binding distribution.
        conflicting_domain: Provider hostname of the binding distribution.
        distribution: The binding distribution, for ownership checks.
    """

    alias: str
    has_conflict: bool
    conflicting_distribution_id: str | None = None
    conflicting_status: str | None = None
    conflicting_domain: str | None = None
    distribution: Distribution | None = None

    @classmethod
    def none(cls, alias: str) -> AliasConflict:
        return cls(alias=alias, has_conflict=False)

    @classmethod
    def with_distribution(cls, alias: str, distribution: Distribution) -> AliasConflict:
        return cls(
            alias=alias,
            has_conflict=True,
            conflicting_distribution_id=distribution.id,
            conflicting_status=distribution.status,
            conflicting_domain=distribution.domain_name,
            distribution=distribution,
        )


@dataclass(frozen=True, slots=True)
class ResolutionDecision:
    """Chosen way forward for a requested alias. Never persisted.

    Attributes:
        strategy: Which rung of the resolution ladder applied.
        resulting_alias: Alias to bind, or None to serve on the CDN domain.
        resulting_distribution_id: Existing distribution to reuse, if any.
        resulting_domain: Provider hostname of the reused distribution.
    """

    strategy: ResolutionStrategy
    resulting_alias: str | None = None
    resulting_distribution_id: str | None = None
    resulting_domain: str | None = None


@dataclass(frozen=True, slots=True)
class DNSRecord:
    """A CNAME record as stored by the DNS control plane.

    ``name`` is kept without the trailing dot.
    """

    name: str
    target: str
    ttl: int = 300
    type: str = "CNAME"


@dataclass(frozen=True, slots=True)
class DNSChange:
    """A single change in a DNS change batch."""

    action: DNSChangeAction
    record: DNSRecord


@dataclass(frozen=True, slots=True)
class TenantDistributionRecord:
    """Persisted per-tenant CDN state, keyed by tenant id.

    Attributes:
        tenant_id: Owning tenant (unique key).
        distribution_id: Provider distribution identifier.
        cdn_domain: Provider-assigned hostname.
        custom_alias: Alias bound to the distribution, if any.
        status: Record lifecycle status.
        unique_token: Opaque token stamped at creation time.
        dns_change_ref: Change id of the last DNS upsert, if any.
        created_at: Creation timestamp (UTC).
    """

    tenant_id: str
    distribution_id: str
    cdn_domain: str
    status: DistributionStatus
    unique_token: str
    custom_alias: str | None = None
    dns_change_ref: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def primary_domain(self) -> str:
        """Hostname tenants are served on: the alias when bound, else the CDN domain."""
        return self.custom_alias or self.cdn_domain

    @property
    def deployment_url(self) -> str:
        return f"https://{self.primary_domain}"

    def with_status(self, status: DistributionStatus) -> TenantDistributionRecord:
        return replace(self, status=status)

    def to_summary(self) -> dict[str, Any]:
        """Public view returned by the provisioner's callers."""
        return {
            "distribution_id": self.distribution_id,
            "domain": self.cdn_domain,
            "custom_domain": self.custom_alias,
            "deployment_url": self.deployment_url,
            "status": str(self.status),
        }


@dataclass(frozen=True, slots=True)
class DnsValidationReport:
    """Admin-time report on DNS automation configuration."""

    enabled: bool
    hosted_zone_id: str | None
    domain: str | None
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    hosted_zone_access: bool = False

    @property
    def valid(self) -> bool:
        return not self.errors
