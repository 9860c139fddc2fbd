"""Unit tests for limen.domain.delivery.tasks."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from limen.domain.delivery.settings import get_delivery_settings
from limen.domain.delivery.tasks import (
    invalidate_tenant_cache,
    provision_tenant_distribution,
    teardown_tenant_distribution,
    wait_for_dns_propagation,
)
from limen.infra.taskiq import TaskIQSerializationError

SUMMARY = {
    "distribution_id": "E0001",
    "domain": "e0001.cloudfront.net",
    "custom_domain": "acme.example.com",
    "deployment_url": "https://acme.example.com",
    "status": "InProgress",
}


@pytest.mark.unit
class TestProvisionTask:
    @pytest.mark.asyncio
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_returns_summary(self, mock_services: MagicMock) -> None:
        record = MagicMock(distribution_id="E0001")
        record.to_summary.return_value = SUMMARY
        mock_services.return_value.provisioner.get_or_create.return_value = record

        result = await provision_tenant_distribution("acme")

        assert result == SUMMARY
        mock_services.return_value.provisioner.get_or_create.assert_called_once_with("acme")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tenant_id", ["Acme", "", "acme_corp", 42])
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_invalid_tenant_rejected(
        self, mock_services: MagicMock, tenant_id: object
    ) -> None:
        with pytest.raises(TaskIQSerializationError, match="Invalid tenant id"):
            await provision_tenant_distribution(tenant_id)  # type: ignore[arg-type]
        mock_services.assert_not_called()


@pytest.mark.unit
class TestInvalidateTask:
    @pytest.mark.asyncio
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_forwards_build_id(self, mock_services: MagicMock) -> None:
        mock_services.return_value.provisioner.invalidate_cache.return_value = "I0001"

        assert await invalidate_tenant_cache("acme", "build-7") == "I0001"
        mock_services.return_value.provisioner.invalidate_cache.assert_called_once_with(
            "acme", "build-7"
        )


@pytest.mark.unit
class TestTeardownTask:
    @pytest.mark.asyncio
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_disables_by_default(self, mock_services: MagicMock) -> None:
        provisioner = mock_services.return_value.provisioner
        provisioner.delete.return_value = True

        assert await teardown_tenant_distribution("acme") is True
        provisioner.delete.assert_called_once_with("acme")
        provisioner.purge.assert_not_called()

    @pytest.mark.asyncio
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_purge(self, mock_services: MagicMock) -> None:
        provisioner = mock_services.return_value.provisioner
        provisioner.purge.return_value = False

        assert await teardown_tenant_distribution("acme", purge=True) is False
        provisioner.purge.assert_called_once_with("acme")
        provisioner.delete.assert_not_called()


@pytest.mark.unit
class TestWaitForPropagationTask:
    @pytest.mark.asyncio
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_timeout_defaults_to_settings(self, mock_services: MagicMock) -> None:
        mock_services.return_value.dns.wait_for_propagation.return_value = True
        get_delivery_settings.cache_clear()
        try:
            with patch.dict("os.environ", {"DELIVERY_PROPAGATION_TIMEOUT": "45"}, clear=True):
                assert await wait_for_dns_propagation("C0001") is True
        finally:
            get_delivery_settings.cache_clear()
        mock_services.return_value.dns.wait_for_propagation.assert_called_once_with(
            "C0001", 45.0
        )

    @pytest.mark.asyncio
    @patch("limen.domain.delivery.tasks.get_delivery_services")
    async def test_explicit_timeout(self, mock_services: MagicMock) -> None:
        mock_services.return_value.dns.wait_for_propagation.return_value = False

        assert await wait_for_dns_propagation("C0001", 5.0) is False
        mock_services.return_value.dns.wait_for_propagation.assert_called_once_with(
            "C0001", 5.0
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("change_ref", ["", None])
    async def test_invalid_change_ref(self, change_ref: object) -> None:
        with pytest.raises(TaskIQSerializationError):
            await wait_for_dns_propagation(change_ref)  # type: ignore[arg-type]
