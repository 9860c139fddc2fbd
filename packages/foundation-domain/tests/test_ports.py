"""Tests for port protocol conformance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from limen.foundation.domain.ports import (
    CDNControlPlanePort,
    DistributionRecordStorePort,
    DNSControlPlanePort,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from limen.foundation.domain.delivery_value_objects import (
        Distribution,
        DNSChange,
        DNSRecord,
        TenantDistributionRecord,
    )


class _FakeCDN:
    """Fake CDN control plane that conforms to CDNControlPlanePort."""

    def list_distributions(self) -> Iterator[Distribution]:
        return iter(())

    def get_distribution(self, distribution_id: str) -> Distribution:
        raise NotImplementedError

    def get_distribution_config(self, distribution_id: str) -> tuple[dict[str, Any], str]:
        return {}, "etag"

    def create_distribution(
        self, config: Mapping[str, Any], tags: Mapping[str, str]
    ) -> Distribution:
        raise NotImplementedError

    def update_distribution(
        self, distribution_id: str, config: Mapping[str, Any], if_match: str
    ) -> Distribution:
        raise NotImplementedError

    def delete_distribution(self, distribution_id: str, if_match: str) -> None:
        return None

    def create_invalidation(
        self, distribution_id: str, paths: Sequence[str], caller_reference: str
    ) -> str:
        return "I1"

    def get_tags(self, arn: str) -> dict[str, str]:
        return {}


class _FakeDNS:
    """Fake DNS control plane that conforms to DNSControlPlanePort."""

    def change_record_sets(self, zone_id: str, changes: Sequence[DNSChange], comment: str) -> str:
        return "C1"

    def get_change(self, change_id: str) -> str:
        return "INSYNC"

    def list_record_sets(
        self,
        zone_id: str,
        start_name: str | None = None,
        start_type: str | None = None,
        max_items: int | None = None,
    ) -> list[DNSRecord]:
        return []

    def get_hosted_zone(self, zone_id: str) -> str:
        return "example.com"


class _FakeStore:
    """Fake record store that conforms to DistributionRecordStorePort."""

    def get(self, tenant_id: str) -> TenantDistributionRecord | None:
        return None

    def save(self, record: TenantDistributionRecord) -> None:
        return None

    def clear(self, tenant_id: str) -> None:
        return None


class _NotAPort:
    """Class that does NOT conform to any port protocol."""

    def unrelated_method(self) -> None:
        pass


@pytest.mark.unit
class TestPortConformance:
    """runtime_checkable isinstance checks against fakes."""

    def test_cdn_port(self) -> None:
        assert isinstance(_FakeCDN(), CDNControlPlanePort)

    def test_dns_port(self) -> None:
        assert isinstance(_FakeDNS(), DNSControlPlanePort)

    def test_store_port(self) -> None:
        assert isinstance(_FakeStore(), DistributionRecordStorePort)

    @pytest.mark.parametrize(
        "port", [CDNControlPlanePort, DNSControlPlanePort, DistributionRecordStorePort]
    )
    def test_non_conforming(self, port: type) -> None:
        assert not isinstance(_NotAPort(), port)
