"""Per-tenant distribution provisioning.

The provisioner reconciles three eventually-consistent systems (CloudFront,
Route 53 and the record store) without a distributed transaction. The
provider is the source of truth for existence; the record store only caches
what was last observed:

- A record pointing at a missing distribution is purged and recreated.
- A distribution whose record write was lost is found again by its
  ownership tag and adopted.
- A tenant's own distribution already holding the requested alias is
  reused instead of duplicated.

Record lifecycle::

    Absent -> Provisioning -> Deployed -> Disabled -> Provisioning (re-enable)
    any -> Absent (stale purge, full teardown)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from limen.domain.delivery.creation_strategies import OutcomeKind
from limen.domain.delivery.distribution_config import unique_token, with_enabled
from limen.foundation.domain.delivery_value_objects import (
    DistributionStatus,
    ResolutionStrategy,
    TenantDistributionRecord,
)
from limen.foundation.domain.exceptions import (
    DomainError,
    NotFoundError,
    ProviderError,
    ProvisioningError,
)
from limen.infra.observability.instrumentation import start_span

if TYPE_CHECKING:
    from collections.abc import Callable

    from limen.domain.delivery.conflict_resolver import ConflictResolver
    from limen.domain.delivery.creation_strategies import DistributionCreator
    from limen.domain.delivery.dns_orchestrator import DNSOrchestrator
    from limen.foundation.domain.delivery_value_objects import Distribution
    from limen.foundation.domain.ports import CDNControlPlanePort, DistributionRecordStorePort

logger = logging.getLogger(__name__)

DEPLOYMENTS_WILDCARD = "/deployments/*"
CURRENT_DEPLOYMENT_WILDCARD = "/deployments/current/*"


def invalidation_paths(build_id: str | None = None) -> list[str]:
    """Paths to invalidate after a deployment."""
    if build_id:
        return [f"/deployments/{build_id}/*", CURRENT_DEPLOYMENT_WILDCARD]
    return [DEPLOYMENTS_WILDCARD]


class DistributionProvisioner:
    """Creates, reuses and tears down tenant CDN distributions.

    All methods block on provider calls and are meant to run on background
    workers. No in-process state is shared between calls.

    Args:
        cdn: CDN control plane.
        records: Record store for ``TenantDistributionRecord``.
        resolver: Fleet-wide alias conflict resolver.
        dns: DNS orchestrator.
        creator: Bounded distribution creation strategies.
        custom_domain_enabled: Whether tenants get ``{tenant}.{base_domain}``.
        base_domain: Base domain of tenant aliases.
        clock: UTC clock, injected by tests.
    """

    def __init__(
        self,
        *,
        cdn: CDNControlPlanePort,
        records: DistributionRecordStorePort,
        resolver: ConflictResolver,
        dns: DNSOrchestrator,
        creator: DistributionCreator,
        custom_domain_enabled: bool = False,
        base_domain: str | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._cdn = cdn
        self._records = records
        self._resolver = resolver
        self._dns = dns
        self._creator = creator
        self._custom_domain_enabled = custom_domain_enabled
        self._base_domain = (base_domain or "").strip(".").lower() or None
        self._clock = clock

    def desired_alias(self, tenant_id: str) -> str | None:
        """Alias to request for ``tenant_id``.

        None unless custom domains and DNS automation are both on: an alias
        without a CNAME behind it would not resolve, so the tenant is served
        on the provider domain instead.
        """
        if not self._custom_domain_enabled or not self._base_domain or not self._dns.enabled:
            return None
        return f"{tenant_id}.{self._base_domain}"

    def get_record(self, tenant_id: str) -> TenantDistributionRecord | None:
        """Last persisted record, without consulting the provider."""
        return self._records.get(tenant_id)

    def get_or_create(self, tenant_id: str) -> TenantDistributionRecord:
        """Return the tenant's distribution, creating it if needed.

        Idempotent: repeated calls return the same distribution and only the
        first one creates anything.

        Raises:
            ProvisioningError: When the provider rejects creation for a
                reason unrelated to aliasing.
            ProviderError: When the fleet or an existing distribution cannot
                be read.
        """
        with start_span("delivery.get_or_create", {"tenant.id": tenant_id}) as span:
            record = self._revalidate(tenant_id)
            if record is not None:
                span.set_attribute("delivery.outcome", "existing")
                return record

            alias = self.desired_alias(tenant_id)
            if alias is not None:
                conflict = self._resolver.check_alias_conflict(alias)
                decision = self._resolver.resolve(tenant_id, alias, conflict)
                if (
                    decision.strategy is ResolutionStrategy.REUSE_EXISTING
                    and conflict.distribution is not None
                ):
                    span.set_attribute("delivery.outcome", "reused")
                    return self._adopt(tenant_id, conflict.distribution, alias=alias)
                alias = decision.resulting_alias

            orphan = self._resolver.find_owned_distribution(tenant_id)
            if orphan is not None:
                span.set_attribute("delivery.outcome", "adopted")
                return self._adopt_orphan(tenant_id, orphan, alias)

            span.set_attribute("delivery.outcome", "created")
            return self._create(tenant_id, alias)

    def invalidate_cache(self, tenant_id: str, build_id: str | None = None) -> str | None:
        """Invalidate cached deployment paths. Never raises.

        Args:
            tenant_id: Tenant whose distribution to invalidate.
            build_id: Build just deployed; invalidates only that build and
                the ``current`` pointer when given.

        Returns:
            Invalidation id, or None if there is no record or the request failed.
        """
        try:
            record = self._records.get(tenant_id)
            if record is None:
                logger.info("cache_invalidation_skipped", extra={"tenant_id": tenant_id})
                return None
            invalidation_id = self._cdn.create_invalidation(
                record.distribution_id,
                invalidation_paths(build_id),
                f"{tenant_id}-{int(self._clock().timestamp() * 1000)}",
            )
        except DomainError as exc:
            logger.warning(
                "cache_invalidation_failed",
                extra={"tenant_id": tenant_id, "build_id": build_id, "error": exc.message},
            )
            return None

        logger.info(
            "cache_invalidated",
            extra={
                "tenant_id": tenant_id,
                "build_id": build_id,
                "invalidation_id": invalidation_id,
            },
        )
        return invalidation_id

    def delete(self, tenant_id: str) -> bool:
        """Best-effort teardown: drop the alias record and disable the distribution.

        The distribution is disabled, not deleted, because CloudFront only
        deletes distributions that are disabled and fully deployed; see
        ``purge``.

        Returns:
            True once the disable request is accepted or there is nothing
            to delete, False on provider failure.
        """
        try:
            record = self._records.get(tenant_id)
        except DomainError as exc:
            logger.warning(
                "distribution_delete_failed", extra={"tenant_id": tenant_id, "error": exc.message}
            )
            return False
        if record is None:
            return True

        if record.custom_alias:
            self._dns.delete(tenant_id, record.cdn_domain, alias=record.custom_alias)

        try:
            config, etag = self._cdn.get_distribution_config(record.distribution_id)
            if config.get("Enabled", True):
                self._cdn.update_distribution(
                    record.distribution_id, with_enabled(config, False), etag
                )
        except NotFoundError:
            logger.info(
                "distribution_already_gone",
                extra={"tenant_id": tenant_id, "distribution_id": record.distribution_id},
            )
            self._clear(tenant_id)
            return True
        except ProviderError as exc:
            logger.warning(
                "distribution_disable_failed",
                extra={
                    "tenant_id": tenant_id,
                    "distribution_id": record.distribution_id,
                    "error": exc.message,
                },
            )
            return False

        self._persist(record.with_status(DistributionStatus.DISABLED))
        logger.info(
            "distribution_disabled",
            extra={"tenant_id": tenant_id, "distribution_id": record.distribution_id},
        )
        return True

    def purge(self, tenant_id: str) -> bool:
        """Permanently delete a disabled, deployed distribution and its record.

        Returns:
            True when the distribution and record are gone, False while the
            distribution is still enabled or propagating, or on failure.
        """
        try:
            record = self._records.get(tenant_id)
            if record is None:
                return True
            distribution = self._cdn.get_distribution(record.distribution_id)
            if distribution.enabled or distribution.status != "Deployed":
                logger.info(
                    "distribution_purge_deferred",
                    extra={
                        "tenant_id": tenant_id,
                        "distribution_id": distribution.id,
                        "enabled": distribution.enabled,
                        "provider_status": distribution.status,
                    },
                )
                return False
            _, etag = self._cdn.get_distribution_config(distribution.id)
            self._cdn.delete_distribution(distribution.id, etag)
        except NotFoundError:
            pass
        except DomainError as exc:
            logger.warning(
                "distribution_purge_failed", extra={"tenant_id": tenant_id, "error": exc.message}
            )
            return False

        self._clear(tenant_id)
        logger.info("distribution_purged", extra={"tenant_id": tenant_id})
        return True

    def _revalidate(self, tenant_id: str) -> TenantDistributionRecord | None:
        """Refresh the stored record from the provider; purge it if stale."""
        record = self._records.get(tenant_id)
        if record is None:
            return None

        try:
            distribution = self._cdn.get_distribution(record.distribution_id)
        except NotFoundError:
            logger.warning(
                "stale_distribution_record",
                extra={"tenant_id": tenant_id, "distribution_id": record.distribution_id},
            )
            self._clear(tenant_id)
            return None

        dns_change_ref = record.dns_change_ref
        if not distribution.enabled:
            distribution = self._reenable(tenant_id, distribution)
            if record.custom_alias:
                dns_change_ref = (
                    self._dns.upsert(
                        tenant_id, distribution.domain_name, alias=record.custom_alias
                    )
                    or dns_change_ref
                )

        refreshed = replace(
            record,
            cdn_domain=distribution.domain_name,
            status=DistributionStatus.from_provider(
                distribution.status, enabled=distribution.enabled
            ),
            dns_change_ref=dns_change_ref,
        )
        if refreshed != record:
            self._persist(refreshed)
        return refreshed

    def _reenable(self, tenant_id: str, distribution: Distribution) -> Distribution:
        try:
            config, etag = self._cdn.get_distribution_config(distribution.id)
            enabled = self._cdn.update_distribution(
                distribution.id, with_enabled(config, True), etag
            )
        except ProviderError as exc:
            raise ProvisioningError(
                tenant_id, exc.message, distribution_id=distribution.id
            ) from exc
        logger.info(
            "distribution_reenabled",
            extra={"tenant_id": tenant_id, "distribution_id": distribution.id},
        )
        return enabled

    def _adopt(
        self,
        tenant_id: str,
        distribution: Distribution,
        alias: str | None = None,
        dns_change_ref: str | None = None,
    ) -> TenantDistributionRecord:
        """Record an existing distribution owned by the tenant."""
        if not distribution.enabled:
            distribution = self._reenable(tenant_id, distribution)
        record = TenantDistributionRecord(
            tenant_id=tenant_id,
            distribution_id=distribution.id,
            cdn_domain=distribution.domain_name,
            status=DistributionStatus.from_provider(
                distribution.status, enabled=distribution.enabled
            ),
            unique_token=unique_token(tenant_id, self._clock()),
            custom_alias=alias or next(iter(distribution.aliases), None),
            dns_change_ref=dns_change_ref,
            created_at=self._clock(),
        )
        self._persist(record)
        logger.info(
            "distribution_adopted",
            extra={"tenant_id": tenant_id, "distribution_id": distribution.id},
        )
        return record

    def _adopt_orphan(
        self, tenant_id: str, orphan: Distribution, alias: str | None
    ) -> TenantDistributionRecord:
        """Adopt an untracked distribution, finishing an interrupted alias bind.

        A run that died between creation and alias attachment leaves an
        alias-less distribution behind. The resolved alias is bound to it so
        the retry ends where a clean run would have.
        """
        if orphan.aliases or alias is None:
            return self._adopt(tenant_id, orphan)

        if not orphan.enabled:
            orphan = self._reenable(tenant_id, orphan)
        outcome = self._creator.attach_alias(tenant_id, orphan, alias)
        if outcome.kind is OutcomeKind.FAILED:
            raise ProvisioningError(
                tenant_id,
                outcome.error.message if outcome.error else "alias attachment failed",
                distribution_id=orphan.id,
            ) from outcome.error
        if outcome.kind is OutcomeKind.ALIAS_REJECTED:
            logger.warning(
                "orphan_alias_rejected",
                extra={
                    "tenant_id": tenant_id,
                    "distribution_id": orphan.id,
                    "alias": alias,
                    "error": outcome.error.message if outcome.error else None,
                },
            )
            return self._adopt(tenant_id, orphan)
        return self._adopt(
            tenant_id,
            outcome.distribution or orphan,
            alias=outcome.alias,
            dns_change_ref=outcome.dns_change_ref,
        )

    def _create(self, tenant_id: str, alias: str | None) -> TenantDistributionRecord:
        outcome = self._creator.create(tenant_id, alias)
        distribution = outcome.distribution
        if distribution is None:
            raise ProvisioningError(tenant_id, "creation returned no distribution")

        record = TenantDistributionRecord(
            tenant_id=tenant_id,
            distribution_id=distribution.id,
            cdn_domain=distribution.domain_name,
            status=DistributionStatus.from_provider(
                distribution.status, enabled=distribution.enabled
            ),
            unique_token=unique_token(tenant_id, self._clock()),
            custom_alias=outcome.alias,
            dns_change_ref=outcome.dns_change_ref,
            created_at=self._clock(),
        )
        self._persist(record)
        logger.info(
            "distribution_provisioned",
            extra={
                "tenant_id": tenant_id,
                "distribution_id": distribution.id,
                "domain": record.primary_domain,
                "strategy": str(outcome.strategy),
            },
        )
        return record

    def _persist(self, record: TenantDistributionRecord) -> None:
        """Save ``record``; a failed write leaves the remote side untouched.

        The distribution is tagged with its tenant, so the next
        ``get_or_create`` adopts it again through the ownership scan.
        """
        try:
            self._records.save(record)
        except DomainError as exc:
            logger.error(
                "distribution_record_persist_failed",
                extra={
                    "tenant_id": record.tenant_id,
                    "distribution_id": record.distribution_id,
                    "error": exc.message,
                },
            )

    def _clear(self, tenant_id: str) -> None:
        try:
            self._records.clear(tenant_id)
        except DomainError as exc:
            logger.warning(
                "distribution_record_clear_failed",
                extra={"tenant_id": tenant_id, "error": exc.message},
            )
