"""Unit tests for limen.domain.delivery.dns_orchestrator."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from limen.domain.delivery.dns_orchestrator import DNSOrchestrator
from limen.domain.delivery.settings import DeliverySettings
from limen.foundation.domain.delivery_value_objects import DNSChangeAction, DNSRecord
from limen.foundation.domain.exceptions import ProviderError

TARGET = "d111.cloudfront.net"


@pytest.mark.unit
class TestUpsert:
    def test_creates_cname_for_canonical_alias(self, dns: Any, make_orchestrator: Any) -> None:
        change_id = make_orchestrator().upsert("acme", TARGET)
        assert change_id == "C0001"
        assert dns.records["acme.example.com"] == DNSRecord(
            name="acme.example.com", target=TARGET, ttl=300
        )
        assert dns.batches[0][0].action is DNSChangeAction.UPSERT

    def test_explicit_alias_overrides_canonical(self, dns: Any, make_orchestrator: Any) -> None:
        make_orchestrator().upsert("acme", TARGET, alias="acme-v2.example.com")
        assert list(dns.records) == ["acme-v2.example.com"]

    def test_upsert_is_idempotent(self, dns: Any, make_orchestrator: Any) -> None:
        orchestrator = make_orchestrator()
        orchestrator.upsert("acme", TARGET)
        orchestrator.upsert("acme", TARGET)
        assert list(dns.records.values()) == [
            DNSRecord(name="acme.example.com", target=TARGET, ttl=300)
        ]

    def test_upsert_repoints_existing_record(self, dns: Any, make_orchestrator: Any) -> None:
        orchestrator = make_orchestrator()
        orchestrator.upsert("acme", "old.cloudfront.net")
        orchestrator.upsert("acme", TARGET)
        assert dns.records["acme.example.com"].target == TARGET

    def test_identical_record_still_returns_change_id(
        self, dns: Any, make_orchestrator: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        orchestrator = make_orchestrator()
        orchestrator.upsert("acme", TARGET)
        with caplog.at_level("INFO", logger="limen.domain.delivery.dns_orchestrator"):
            assert orchestrator.upsert("acme", TARGET) == "C0002"
        upserted = [r for r in caplog.records if r.getMessage() == "dns_record_upserted"]
        assert upserted[0].previous_target == TARGET
        assert len(dns.batches) == 2

    def test_uses_configured_ttl(self, dns: Any, make_orchestrator: Any) -> None:
        make_orchestrator(ttl=60).upsert("acme", TARGET)
        assert dns.records["acme.example.com"].ttl == 60

    def test_disabled_makes_no_calls(self, dns: Any, make_orchestrator: Any) -> None:
        assert make_orchestrator(enabled=False).upsert("acme", TARGET) is None
        assert dns.calls == []

    def test_missing_zone_makes_no_calls(self, dns: Any, make_orchestrator: Any) -> None:
        assert make_orchestrator(hosted_zone_id=None).upsert("acme", TARGET) is None
        assert dns.calls == []

    def test_missing_base_domain_without_alias(self, dns: Any, make_orchestrator: Any) -> None:
        assert make_orchestrator(base_domain=None).upsert("acme", TARGET) is None
        assert dns.calls == []

    def test_provider_failure_returns_none(self, dns: Any, make_orchestrator: Any) -> None:
        dns.failures["change_record_sets"] = ProviderError(
            "route53", "change_resource_record_sets", "Throttling", transient=True
        )
        assert make_orchestrator().upsert("acme", TARGET) is None

    def test_read_failure_still_upserts(self, dns: Any, make_orchestrator: Any) -> None:
        dns.failures["list_record_sets"] = ProviderError(
            "route53", "list_resource_record_sets", "denied"
        )
        assert make_orchestrator().upsert("acme", TARGET) == "C0001"


@pytest.mark.unit
class TestDelete:
    def test_deletes_existing_record_with_stored_values(
        self, dns: Any, make_orchestrator: Any
    ) -> None:
        dns.records["acme.example.com"] = DNSRecord(
            name="acme.example.com", target=TARGET, ttl=600
        )
        change_id = make_orchestrator().delete("acme", "ignored.cloudfront.net")
        assert change_id == "C0001"
        deleted = dns.batches[0][0]
        assert deleted.action is DNSChangeAction.DELETE
        assert deleted.record.ttl == 600
        assert deleted.record.target == TARGET
        assert dns.records == {}

    def test_absent_record_is_noop(self, dns: Any, make_orchestrator: Any) -> None:
        assert make_orchestrator().delete("acme", TARGET) is None
        assert "change_record_sets" not in dns.calls

    def test_disabled_makes_no_calls(self, dns: Any, make_orchestrator: Any) -> None:
        assert make_orchestrator(enabled=False).delete("acme", TARGET) is None
        assert dns.calls == []

    def test_provider_failure_returns_none(self, dns: Any, make_orchestrator: Any) -> None:
        dns.records["acme.example.com"] = DNSRecord(name="acme.example.com", target=TARGET)
        dns.failures["change_record_sets"] = ProviderError("route53", "change", "denied")
        assert make_orchestrator().delete("acme") is None


@pytest.mark.unit
class TestQueries:
    def test_get_and_exists(self, dns: Any, make_orchestrator: Any) -> None:
        orchestrator = make_orchestrator()
        assert orchestrator.exists("acme") is False
        orchestrator.upsert("acme", TARGET)
        assert orchestrator.exists("acme") is True
        assert orchestrator.get("acme") == DNSRecord(name="acme.example.com", target=TARGET)

    def test_get_ignores_neighbouring_record(self, dns: Any, make_orchestrator: Any) -> None:
        dns.records["acme2.example.com"] = DNSRecord(name="acme2.example.com", target=TARGET)
        assert make_orchestrator().get("acme") is None

    def test_list_records(self, dns: Any, make_orchestrator: Any) -> None:
        orchestrator = make_orchestrator()
        orchestrator.upsert("a-tenant", TARGET)
        orchestrator.upsert("b-tenant", TARGET)
        assert [r.name for r in orchestrator.list_records()] == [
            "a-tenant.example.com",
            "b-tenant.example.com",
        ]

    def test_list_records_empty_when_disabled_or_failing(
        self, dns: Any, make_orchestrator: Any
    ) -> None:
        assert make_orchestrator(enabled=False).list_records() == []
        dns.failures["list_record_sets"] = ProviderError("route53", "list", "denied")
        assert make_orchestrator().list_records() == []

    def test_alias_for(self, make_orchestrator: Any) -> None:
        assert make_orchestrator().alias_for("acme") == "acme.example.com"
        assert make_orchestrator(base_domain=None).alias_for("acme") is None


@pytest.mark.unit
class TestWaitForPropagation:
    def test_returns_true_once_insync(self, dns: Any, make_orchestrator: Any) -> None:
        dns.change_statuses["C1"] = ["PENDING", "PENDING", "INSYNC"]
        sleeps: list[float] = []
        orchestrator = make_orchestrator(sleep=sleeps.append, clock=lambda: 0.0)
        assert orchestrator.wait_for_propagation("C1") is True
        assert dns.calls.count("get_change") == 3
        assert sleeps == [10.0, 10.0]

    def test_times_out(self, dns: Any, make_orchestrator: Any) -> None:
        dns.change_statuses["C1"] = ["PENDING"] * 10
        ticks = itertools.count(0, 10)
        orchestrator = make_orchestrator(clock=lambda: float(next(ticks)))
        assert orchestrator.wait_for_propagation("C1", timeout_seconds=30) is False
        assert dns.calls.count("get_change") == 3

    def test_last_sleep_is_capped_by_remaining_time(
        self, dns: Any, make_orchestrator: Any
    ) -> None:
        dns.change_statuses["C1"] = ["PENDING"] * 10
        ticks = iter([0.0, 25.0, 40.0])
        sleeps: list[float] = []
        orchestrator = make_orchestrator(sleep=sleeps.append, clock=lambda: next(ticks))
        assert orchestrator.wait_for_propagation("C1", timeout_seconds=30) is False
        assert sleeps == [5.0]

    def test_provider_error_returns_false(self, dns: Any, make_orchestrator: Any) -> None:
        dns.failures["get_change"] = ProviderError("route53", "get_change", "NoSuchChange")
        assert make_orchestrator().wait_for_propagation("C1") is False

    def test_disabled_or_missing_ref(self, dns: Any, make_orchestrator: Any) -> None:
        assert make_orchestrator(enabled=False).wait_for_propagation("C1") is False
        assert make_orchestrator().wait_for_propagation(None) is False
        assert dns.calls == []


@pytest.mark.unit
class TestValidateConfiguration:
    def test_disabled_reports_warning(self, dns: Any, make_orchestrator: Any) -> None:
        report = make_orchestrator(enabled=False).validate_configuration()
        assert report.enabled is False
        assert report.valid is True
        assert report.warnings == ("Route 53 DNS automation is disabled",)
        assert dns.calls == []

    def test_valid_configuration(self, make_orchestrator: Any) -> None:
        report = make_orchestrator().validate_configuration()
        assert report.valid is True
        assert report.hosted_zone_access is True
        assert report.domain == "example.com"
        assert report.errors == ()

    def test_missing_zone_and_domain(self, make_orchestrator: Any) -> None:
        report = make_orchestrator(hosted_zone_id=None, base_domain=None).validate_configuration()
        assert report.valid is False
        assert "Hosted zone id is not configured" in report.errors
        assert "Base domain is not configured" in report.errors

    def test_inaccessible_zone(self, make_orchestrator: Any) -> None:
        report = make_orchestrator(hosted_zone_id="ZUNKNOWN").validate_configuration()
        assert report.valid is False
        assert report.hosted_zone_access is False
        assert report.errors[0].startswith("Cannot access hosted zone ZUNKNOWN")

    def test_base_domain_outside_zone(self, make_orchestrator: Any) -> None:
        report = make_orchestrator(base_domain="other.org").validate_configuration()
        assert report.valid is True
        assert report.warnings == ("Base domain other.org is outside hosted zone example.com",)

    def test_subdomain_of_zone_is_accepted(self, make_orchestrator: Any) -> None:
        report = make_orchestrator(base_domain="sites.example.com").validate_configuration()
        assert report.warnings == ()


@pytest.mark.unit
class TestFromSettings:
    def test_reads_delivery_settings(self, dns: Any) -> None:
        settings = DeliverySettings(
            dns_enabled=True,
            hosted_zone_id="Z0123456789",
            base_domain="Example.com.",
            dns_ttl=120,
        )
        orchestrator = DNSOrchestrator.from_settings(dns, settings)
        assert orchestrator.enabled is True
        orchestrator.upsert("acme", TARGET)
        assert dns.records["acme.example.com"].ttl == 120
