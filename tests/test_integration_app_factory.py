"""Integration tests: create_app() auto-discovery with the delivery API."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest


@pytest.mark.integration
class TestAutoDiscovery:
    """Prove create_app() discovers and wires contributions from installed packages."""

    @patch("limen.infra.fastapi._health._check_database", new_callable=AsyncMock)
    def test_health_endpoint_discovered(self, mock_check, client) -> None:
        """Auto-discovered health router serves /healthz."""
        mock_check.return_value = {"status": "ok"}
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "checks": {"database": {"status": "ok"}}}

    @patch("limen.infra.fastapi._health._check_database", new_callable=AsyncMock)
    def test_health_degraded(self, mock_check, client) -> None:
        mock_check.return_value = {"status": "error", "detail": "connection refused"}
        resp = client.get("/healthz")
        assert resp.status_code == 503
        assert resp.json()["status"] == "degraded"

    def test_delivery_router_discovered(self, client, services, summary) -> None:
        """The delivery entry point mounts the tenant distribution routes."""
        services.provisioner.get_or_create.return_value.to_summary.return_value = summary
        resp = client.put("/tenants/acme/distribution")
        assert resp.status_code == 200
        assert resp.json() == summary
        services.provisioner.get_or_create.assert_called_once_with("acme")

    def test_error_handlers_produce_problem_json(self, client, services) -> None:
        """Auto-discovered RFC 7807 error handlers set correct content type."""
        services.provisioner.get_record.return_value = None
        resp = client.get("/tenants/acme/distribution")
        assert resp.status_code == 404
        assert "application/problem+json" in resp.headers["content-type"]

    def test_cors_headers_on_preflight(self, client) -> None:
        """CORS middleware is applied (default: allow all origins)."""
        resp = client.options(
            "/healthz",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert "access-control-allow-origin" in resp.headers
