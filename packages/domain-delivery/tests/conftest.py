"""Shared fixtures for domain-delivery tests: in-memory control planes."""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

import pytest

from limen.domain.delivery.conflict_resolver import ConflictResolver
from limen.domain.delivery.creation_strategies import DistributionCreator
from limen.domain.delivery.distribution_config import build_distribution_config
from limen.domain.delivery.distribution_provisioner import DistributionProvisioner
from limen.domain.delivery.dns_orchestrator import DNSOrchestrator
from limen.foundation.domain.delivery_value_objects import (
    Distribution,
    DNSChange,
    DNSChangeAction,
    DNSRecord,
    TenantDistributionRecord,
)
from limen.foundation.domain.exceptions import (
    AliasRejectedError,
    NotFoundError,
    ProviderError,
)

BASE_DOMAIN = "example.com"
ZONE_ID = "Z0123456789"
CERTIFICATE_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/abc"
ORIGIN_BUCKET = "tenant-sites"
FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class FakeCDN:
    """In-memory CDN control plane recording every call by name."""

    def __init__(self) -> None:
        self.distributions: dict[str, Distribution] = {}
        self.configs: dict[str, dict[str, Any]] = {}
        self.tags: dict[str, dict[str, str]] = {}
        self.etags: dict[str, int] = {}
        self.invalidations: list[tuple[str, list[str], str]] = []
        self.calls: list[str] = []
        self.rejected_aliases: set[str] = set()
        self.failures: dict[str, ProviderError] = {}
        self._counter = 0

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def _next_id(self) -> str:
        self._counter += 1
        return f"E{self._counter:04d}"

    def add(
        self,
        *,
        aliases: tuple[str, ...] = (),
        tenant_id: str | None = None,
        comment: str = "",
        status: str = "Deployed",
        enabled: bool = True,
        tags: dict[str, str] | None = None,
    ) -> Distribution:
        """Seed an existing distribution."""
        dist_id = self._next_id()
        config = build_distribution_config(
            tenant_id or "other",
            origin_bucket=ORIGIN_BUCKET,
            price_class="PriceClass_100",
            caller_ref=f"seed-{dist_id}",
        )
        config["Comment"] = comment
        config["Enabled"] = enabled
        if aliases:
            config["Aliases"] = {"Quantity": len(aliases), "Items": list(aliases)}
        distribution = Distribution(
            id=dist_id,
            arn=f"arn:aws:cloudfront::123456789012:distribution/{dist_id}",
            domain_name=f"{dist_id.lower()}.cloudfront.net",
            status=status,
            enabled=enabled,
            aliases=aliases,
            comment=comment,
            origin_paths=(f"/tenants/{tenant_id}",) if tenant_id else ("/shared",),
        )
        self.distributions[dist_id] = distribution
        self.configs[dist_id] = config
        self.etags[dist_id] = 1
        self.tags[distribution.arn] = dict(tags or {})
        return distribution

    def set_status(self, dist_id: str, status: str) -> None:
        self.distributions[dist_id] = replace(self.distributions[dist_id], status=status)

    def list_distributions(self):  # type: ignore[no-untyped-def]
        self._call("list_distributions")
        yield from list(self.distributions.values())

    def get_distribution(self, distribution_id: str) -> Distribution:
        self._call("get_distribution")
        if distribution_id not in self.distributions:
            raise NotFoundError("Distribution", distribution_id)
        return self.distributions[distribution_id]

    def get_distribution_config(self, distribution_id: str) -> tuple[dict[str, Any], str]:
        self._call("get_distribution_config")
        if distribution_id not in self.configs:
            raise NotFoundError("Distribution", distribution_id)
        return copy.deepcopy(self.configs[distribution_id]), f"ETAG{self.etags[distribution_id]}"

    def create_distribution(self, config: Any, tags: Any) -> Distribution:
        self._call("create_distribution")
        dist_id = self._next_id()
        aliases = tuple(config.get("Aliases", {}).get("Items", []))
        distribution = Distribution(
            id=dist_id,
            arn=f"arn:aws:cloudfront::123456789012:distribution/{dist_id}",
            domain_name=f"{dist_id.lower()}.cloudfront.net",
            status="InProgress",
            enabled=config["Enabled"],
            aliases=aliases,
            comment=config["Comment"],
            origin_paths=tuple(o["OriginPath"] for o in config["Origins"]["Items"]),
        )
        self.distributions[dist_id] = distribution
        self.configs[dist_id] = copy.deepcopy(dict(config))
        self.etags[dist_id] = 1
        self.tags[distribution.arn] = dict(tags)
        return distribution

    def update_distribution(self, distribution_id: str, config: Any, if_match: str) -> Distribution:
        self._call("update_distribution")
        if distribution_id not in self.distributions:
            raise NotFoundError("Distribution", distribution_id)
        assert if_match == f"ETAG{self.etags[distribution_id]}"
        aliases = tuple(config.get("Aliases", {}).get("Items", []))
        for alias in aliases:
            taken = any(
                alias in other.aliases
                for other_id, other in self.distributions.items()
                if other_id != distribution_id
            )
            if taken or alias in self.rejected_aliases:
                raise AliasRejectedError(
                    "cloudfront",
                    "update_distribution",
                    "One or more of the CNAMEs you provided are already associated",
                    provider_code="CNAMEAlreadyExists",
                )
        updated = replace(
            self.distributions[distribution_id],
            aliases=aliases,
            enabled=config["Enabled"],
            status="InProgress",
        )
        self.distributions[distribution_id] = updated
        self.configs[distribution_id] = copy.deepcopy(dict(config))
        self.etags[distribution_id] += 1
        return updated

    def delete_distribution(self, distribution_id: str, if_match: str) -> None:
        self._call("delete_distribution")
        assert if_match == f"ETAG{self.etags[distribution_id]}"
        distribution = self.distributions.pop(distribution_id)
        self.configs.pop(distribution_id)
        self.tags.pop(distribution.arn, None)

    def create_invalidation(self, distribution_id: str, paths: Any, caller_reference: str) -> str:
        self._call("create_invalidation")
        self.invalidations.append((distribution_id, list(paths), caller_reference))
        return f"I{len(self.invalidations):04d}"

    def get_tags(self, arn: str) -> dict[str, str]:
        self._call("get_tags")
        return dict(self.tags.get(arn, {}))


class FakeDNS:
    """In-memory hosted zone."""

    def __init__(self, zone_name: str = BASE_DOMAIN) -> None:
        self.zone_name = zone_name
        self.records: dict[str, DNSRecord] = {}
        self.batches: list[list[DNSChange]] = []
        self.calls: list[str] = []
        self.change_statuses: dict[str, list[str]] = {}
        self.failures: dict[str, ProviderError] = {}

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def change_record_sets(self, zone_id: str, changes: Any, comment: str) -> str:
        self._call("change_record_sets")
        self.batches.append(list(changes))
        for change in changes:
            if change.action is DNSChangeAction.DELETE:
                self.records.pop(change.record.name, None)
            else:
                self.records[change.record.name] = change.record
        return f"C{len(self.batches):04d}"

    def get_change(self, change_id: str) -> str:
        self._call("get_change")
        statuses = self.change_statuses.get(change_id)
        if statuses:
            return statuses.pop(0)
        return "INSYNC"

    def list_record_sets(
        self,
        zone_id: str,
        start_name: str | None = None,
        start_type: str | None = None,
        max_items: int | None = None,
    ) -> list[DNSRecord]:
        self._call("list_record_sets")
        names = sorted(n for n in self.records if start_name is None or n >= start_name)
        records = [self.records[n] for n in names]
        return records[:max_items] if max_items is not None else records

    def get_hosted_zone(self, zone_id: str) -> str:
        self._call("get_hosted_zone")
        if zone_id != ZONE_ID:
            raise ProviderError("route53", "get_hosted_zone", "No hosted zone found")
        return self.zone_name


class FakeRecordStore:
    """In-memory record store."""

    def __init__(self) -> None:
        self.records: dict[str, TenantDistributionRecord] = {}
        self.fail_save = False
        self.saves = 0

    def get(self, tenant_id: str) -> TenantDistributionRecord | None:
        return self.records.get(tenant_id)

    def save(self, record: TenantDistributionRecord) -> None:
        self.saves += 1
        if self.fail_save:
            raise ProviderError("record_store", "save", "connection refused", transient=True)
        self.records[record.tenant_id] = record

    def clear(self, tenant_id: str) -> None:
        self.records.pop(tenant_id, None)


@pytest.fixture()
def cdn() -> FakeCDN:
    return FakeCDN()


@pytest.fixture()
def dns() -> FakeDNS:
    return FakeDNS()


@pytest.fixture()
def records() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def make_orchestrator(dns: FakeDNS) -> Callable[..., DNSOrchestrator]:
    def factory(**overrides: Any) -> DNSOrchestrator:
        options: dict[str, Any] = {
            "enabled": True,
            "hosted_zone_id": ZONE_ID,
            "base_domain": BASE_DOMAIN,
            "sleep": lambda _: None,
        }
        options.update(overrides)
        return DNSOrchestrator(dns, **options)

    return factory


@pytest.fixture()
def make_provisioner(
    cdn: FakeCDN,
    records: FakeRecordStore,
    make_orchestrator: Callable[..., DNSOrchestrator],
) -> Callable[..., DistributionProvisioner]:
    """Build a provisioner over the fakes.

    Keyword overrides: ``custom_domain_enabled``, ``dns_enabled``,
    ``certificate_arn``, ``base_domain``, ``suffix``.
    """

    def factory(
        *,
        custom_domain_enabled: bool = True,
        dns_enabled: bool = True,
        certificate_arn: str | None = CERTIFICATE_ARN,
        base_domain: str | None = BASE_DOMAIN,
        suffix: str = "r4nd0m",
    ) -> DistributionProvisioner:
        orchestrator = make_orchestrator(enabled=dns_enabled, base_domain=base_domain)
        return DistributionProvisioner(
            cdn=cdn,
            records=records,
            resolver=ConflictResolver(cdn, suffix_source=lambda: suffix),
            dns=orchestrator,
            creator=DistributionCreator(
                cdn,
                orchestrator,
                origin_bucket=ORIGIN_BUCKET,
                certificate_arn=certificate_arn,
                clock=lambda: FIXED_NOW,
            ),
            custom_domain_enabled=custom_domain_enabled,
            base_domain=base_domain,
            clock=lambda: FIXED_NOW,
        )

    return factory