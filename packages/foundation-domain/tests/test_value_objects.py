"""Tests for delivery value objects."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from limen.foundation.domain.delivery_value_objects import (
    AliasConflict,
    Distribution,
    DistributionStatus,
    DnsValidationReport,
    TenantDistributionRecord,
)


def _record(**overrides: object) -> TenantDistributionRecord:
    values: dict[str, object] = {
        "tenant_id": "acme",
        "distribution_id": "E1",
        "cdn_domain": "d111.cloudfront.net",
        "status": DistributionStatus.DEPLOYED,
        "unique_token": "acme-abc-xyz123",
    }
    values.update(overrides)
    return TenantDistributionRecord(**values)  # type: ignore[arg-type]


@pytest.mark.unit
class TestDistributionStatus:
    """Tests for DistributionStatus."""

    def test_values(self) -> None:
        assert DistributionStatus.PROVISIONING == "Provisioning"
        assert DistributionStatus.DEPLOYED == "Deployed"
        assert DistributionStatus.DISABLED == "Disabled"

    def test_from_provider_deployed(self) -> None:
        status = DistributionStatus.from_provider("Deployed", enabled=True)
        assert status is DistributionStatus.DEPLOYED

    def test_from_provider_in_progress(self) -> None:
        status = DistributionStatus.from_provider("InProgress", enabled=True)
        assert status is DistributionStatus.PROVISIONING

    def test_from_provider_disabled_wins(self) -> None:
        status = DistributionStatus.from_provider("Deployed", enabled=False)
        assert status is DistributionStatus.DISABLED


@pytest.mark.unit
class TestTenantDistributionRecord:
    """Tests for TenantDistributionRecord."""

    def test_primary_domain_prefers_alias(self) -> None:
        record = _record(custom_alias="acme.example.com")
        assert record.primary_domain == "acme.example.com"
        assert record.deployment_url == "https://acme.example.com"

    def test_primary_domain_falls_back_to_cdn(self) -> None:
        record = _record()
        assert record.primary_domain == "d111.cloudfront.net"
        assert record.deployment_url == "https://d111.cloudfront.net"

    def test_created_at_is_utc(self) -> None:
        assert _record().created_at.tzinfo is UTC

    def test_with_status_returns_copy(self) -> None:
        record = _record()
        disabled = record.with_status(DistributionStatus.DISABLED)
        assert disabled.status is DistributionStatus.DISABLED
        assert record.status is DistributionStatus.DEPLOYED

    def test_to_summary(self) -> None:
        record = _record(
            custom_alias="acme.example.com",
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert record.to_summary() == {
            "distribution_id": "E1",
            "domain": "d111.cloudfront.net",
            "custom_domain": "acme.example.com",
            "deployment_url": "https://acme.example.com",
            "status": "Deployed",
        }


@pytest.mark.unit
class TestAliasConflict:
    """Tests for AliasConflict constructors."""

    def test_none(self) -> None:
        conflict = AliasConflict.none("acme.example.com")
        assert conflict.has_conflict is False
        assert conflict.conflicting_distribution_id is None
        assert conflict.distribution is None

    def test_with_distribution(self) -> None:
        dist = Distribution(
            id="E9",
            arn="arn:aws:cloudfront::1:distribution/E9",
            domain_name="d9.cloudfront.net",
            status="Deployed",
            enabled=True,
            aliases=("acme.example.com",),
        )
        conflict = AliasConflict.with_distribution("acme.example.com", dist)
        assert conflict.has_conflict is True
        assert conflict.conflicting_distribution_id == "E9"
        assert conflict.conflicting_status == "Deployed"
        assert conflict.conflicting_domain == "d9.cloudfront.net"
        assert conflict.distribution is dist


@pytest.mark.unit
class TestDnsValidationReport:
    """Tests for DnsValidationReport."""

    def test_valid_without_errors(self) -> None:
        report = DnsValidationReport(enabled=True, hosted_zone_id="Z1", domain="example.com")
        assert report.valid is True

    def test_invalid_with_errors(self) -> None:
        report = DnsValidationReport(
            enabled=True, hosted_zone_id=None, domain=None, errors=("missing zone",)
        )
        assert report.valid is False
