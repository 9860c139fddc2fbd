"""Tenant alias DNS orchestration.

DNS is an enhancement, not a hard dependency: every mutating operation
returns ``None`` instead of raising so that a Route 53 outage degrades a
tenant to its CDN domain rather than failing provisioning. Configuration
problems only surface through ``validate_configuration``.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from limen.foundation.domain.delivery_value_objects import (
    DNSChange,
    DNSChangeAction,
    DNSRecord,
    DnsValidationReport,
)
from limen.foundation.domain.exceptions import DomainError

if TYPE_CHECKING:
    from collections.abc import Callable

    from limen.domain.delivery.settings import DeliverySettings
    from limen.foundation.domain.ports import DNSControlPlanePort

logger = logging.getLogger(__name__)

INSYNC = "INSYNC"
DEFAULT_TTL = 300
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_PROPAGATION_TIMEOUT = 300.0


class DNSOrchestrator:
    """Manages the CNAME record of each tenant alias.

    Args:
        dns: DNS control plane.
        enabled: Whether DNS automation is on.
        hosted_zone_id: Zone holding tenant aliases.
        base_domain: Base domain of canonical aliases.
        ttl: TTL of upserted records.
        poll_interval: Seconds between propagation polls.
        sleep: Sleep function, injected by tests.
        clock: Monotonic clock, injected by tests.
    """

    def __init__(
        self,
        dns: DNSControlPlanePort,
        *,
        enabled: bool,
        hosted_zone_id: str | None,
        base_domain: str | None,
        ttl: int = DEFAULT_TTL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._dns = dns
        self._enabled = enabled
        self._zone_id = hosted_zone_id
        self._base_domain = (base_domain or "").strip(".").lower() or None
        self._ttl = ttl
        self._poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(
        cls, dns: DNSControlPlanePort, settings: DeliverySettings
    ) -> DNSOrchestrator:
        return cls(
            dns,
            enabled=settings.dns_enabled,
            hosted_zone_id=settings.hosted_zone_id,
            base_domain=settings.base_domain,
            ttl=settings.dns_ttl,
            poll_interval=settings.propagation_poll_interval,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    def alias_for(self, tenant_id: str) -> str | None:
        """Canonical alias ``{tenant_id}.{base_domain}``."""
        if not self._base_domain:
            return None
        return f"{tenant_id}.{self._base_domain}"

    def upsert(self, tenant_id: str, target: str, alias: str | None = None) -> str | None:
        """Point the tenant alias at ``target``.

        Args:
            tenant_id: Owning tenant.
            target: CDN hostname the CNAME resolves to.
            alias: Alias to manage; defaults to the canonical alias.

        Returns:
            Change id, or None when DNS automation is disabled, not
            configured, or the provider call failed.
        """
        name = self._target_name(tenant_id, alias, operation="upsert")
        if name is None:
            return None

        # UPSERT always runs so the caller gets a change id to poll
        existing = self._read(name)
        record = DNSRecord(name=name, target=target, ttl=self._ttl)
        try:
            change_id = self._dns.change_record_sets(
                self._zone_id,  # type: ignore[arg-type]
                [DNSChange(DNSChangeAction.UPSERT, record)],
                comment=f"CNAME for tenant {tenant_id}",
            )
        except DomainError as exc:
            logger.warning(
                "dns_upsert_failed",
                extra={"tenant_id": tenant_id, "name": name, "error": exc.message},
            )
            return None

        logger.info(
            "dns_record_upserted",
            extra={
                "tenant_id": tenant_id,
                "name": name,
                "target": target,
                "change_id": change_id,
                "previous_target": existing.target if existing else None,
            },
        )
        return change_id

    def delete(
        self, tenant_id: str, target: str | None = None, alias: str | None = None
    ) -> str | None:
        """Remove the tenant alias record. Deleting an absent record is a no-op.

        The DELETE change must match the stored record exactly, so TTL and
        target are taken from the provider rather than from arguments;
        ``target`` is only used when the stored record cannot be read back.

        Returns:
            Change id, or None when nothing was deleted.
        """
        name = self._target_name(tenant_id, alias, operation="delete")
        if name is None:
            return None

        existing = self._read(name)
        if existing is None:
            logger.info("dns_record_absent", extra={"tenant_id": tenant_id, "name": name})
            return None

        record = DNSRecord(
            name=name,
            target=existing.target or (target or ""),
            ttl=existing.ttl,
            type=existing.type,
        )
        try:
            change_id = self._dns.change_record_sets(
                self._zone_id,  # type: ignore[arg-type]
                [DNSChange(DNSChangeAction.DELETE, record)],
                comment=f"Remove CNAME for tenant {tenant_id}",
            )
        except DomainError as exc:
            logger.warning(
                "dns_delete_failed",
                extra={"tenant_id": tenant_id, "name": name, "error": exc.message},
            )
            return None

        logger.info(
            "dns_record_deleted",
            extra={"tenant_id": tenant_id, "name": name, "change_id": change_id},
        )
        return change_id

    def get(self, tenant_id: str, alias: str | None = None) -> DNSRecord | None:
        if not self._enabled or not self._zone_id:
            return None
        name = alias or self.alias_for(tenant_id)
        if name is None:
            return None
        return self._read(name)

    def exists(self, tenant_id: str, alias: str | None = None) -> bool:
        return self.get(tenant_id, alias) is not None

    def list_records(self) -> list[DNSRecord]:
        """All record sets of the hosted zone; empty when disabled or on error."""
        if not self._enabled or not self._zone_id:
            return []
        try:
            return self._dns.list_record_sets(self._zone_id)
        except DomainError as exc:
            logger.warning("dns_list_failed", extra={"error": exc.message})
            return []

    def wait_for_propagation(
        self, change_ref: str | None, timeout_seconds: float = DEFAULT_PROPAGATION_TIMEOUT
    ) -> bool:
        """Poll ``change_ref`` until it is INSYNC.

        Returns:
            True once INSYNC; False on timeout, provider error, missing
            change ref or disabled DNS automation. Never raises.
        """
        if not self._enabled or not change_ref:
            return False

        deadline = self._clock() + timeout_seconds
        while True:
            try:
                status = self._dns.get_change(change_ref)
            except DomainError as exc:
                logger.warning(
                    "dns_propagation_check_failed",
                    extra={"change_id": change_ref, "error": exc.message},
                )
                return False

            if status == INSYNC:
                logger.info("dns_propagated", extra={"change_id": change_ref})
                return True

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(self._poll_interval, remaining))

        logger.warning(
            "dns_propagation_timeout",
            extra={"change_id": change_ref, "timeout_seconds": timeout_seconds},
        )
        return False

    def validate_configuration(self) -> DnsValidationReport:
        """Admin-time check of the DNS automation configuration."""
        if not self._enabled:
            return DnsValidationReport(
                enabled=False,
                hosted_zone_id=self._zone_id,
                domain=self._base_domain,
                warnings=("Route 53 DNS automation is disabled",),
            )

        errors: list[str] = []
        warnings: list[str] = []
        if not self._zone_id:
            errors.append("Hosted zone id is not configured")
        if not self._base_domain:
            errors.append("Base domain is not configured")

        hosted_zone_access = False
        if self._zone_id:
            try:
                zone_name = self._dns.get_hosted_zone(self._zone_id).lower()
            except DomainError as exc:
                errors.append(f"Cannot access hosted zone {self._zone_id}: {exc.message}")
            else:
                hosted_zone_access = True
                if self._base_domain and not (
                    self._base_domain == zone_name or self._base_domain.endswith(f".{zone_name}")
                ):
                    warnings.append(
                        f"Base domain {self._base_domain} is outside hosted zone {zone_name}"
                    )

        return DnsValidationReport(
            enabled=True,
            hosted_zone_id=self._zone_id,
            domain=self._base_domain,
            errors=tuple(errors),
            warnings=tuple(warnings),
            hosted_zone_access=hosted_zone_access,
        )

    def _target_name(self, tenant_id: str, alias: str | None, *, operation: str) -> str | None:
        if not self._enabled:
            logger.debug(
                "dns_automation_disabled", extra={"tenant_id": tenant_id, "operation": operation}
            )
            return None
        if not self._zone_id:
            logger.warning(
                "dns_hosted_zone_not_configured",
                extra={"tenant_id": tenant_id, "operation": operation},
            )
            return None
        name = alias or self.alias_for(tenant_id)
        if name is None:
            logger.warning(
                "dns_base_domain_not_configured",
                extra={"tenant_id": tenant_id, "operation": operation},
            )
        return name

    def _read(self, name: str) -> DNSRecord | None:
        try:
            records = self._dns.list_record_sets(
                self._zone_id,  # type: ignore[arg-type]
                start_name=name,
                start_type="CNAME",
                max_items=1,
            )
        except DomainError as exc:
            logger.warning("dns_read_failed", extra={"name": name, "error": exc.message})
            return None
        for record in records:
            if record.name.lower() == name.lower() and record.type == "CNAME":
                return record
        return None
