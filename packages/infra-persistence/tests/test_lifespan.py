"""Unit tests for limen.infra.persistence.lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from limen.foundation.application import LifespanContribution
from limen.infra.persistence.lifespan import (
    _persistence_lifespan,
    lifespan_contribution,
)


def _mock_manager(budget: int = 12) -> tuple[MagicMock, AsyncMock]:
    """Create a mock DatabaseManager with async engine.connect() context manager."""
    mock_conn = AsyncMock()

    @asynccontextmanager
    async def _connect():  # type: ignore[no-untyped-def]
        yield mock_conn

    mock_engine = MagicMock()
    mock_engine.connect = _connect

    mock_mgr = MagicMock()
    mock_mgr.get_engine.return_value = mock_engine
    mock_mgr.settings.connection_budget = budget
    mock_mgr.dispose = AsyncMock()
    return mock_mgr, mock_conn


@pytest.mark.unit
class TestLifespanContribution:
    def test_is_lifespan_contribution(self) -> None:
        assert isinstance(lifespan_contribution, LifespanContribution)
        assert lifespan_contribution.priority == 75


@pytest.mark.unit
class TestPersistenceLifespan:
    @pytest.mark.asyncio
    @patch("limen.infra.persistence.lifespan.get_database_manager")
    async def test_startup_runs_health_check(self, mock_get_manager: MagicMock) -> None:
        mock_mgr, mock_conn = _mock_manager()
        mock_get_manager.return_value = mock_mgr

        async with _persistence_lifespan(MagicMock()):
            mock_conn.execute.assert_called_once()

    @pytest.mark.asyncio
    @patch("limen.infra.persistence.lifespan.get_database_manager")
    async def test_shutdown_disposes_engines(self, mock_get_manager: MagicMock) -> None:
        mock_mgr, _ = _mock_manager()
        mock_get_manager.return_value = mock_mgr

        async with _persistence_lifespan(MagicMock()):
            mock_mgr.dispose.assert_not_called()

        mock_mgr.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("limen.infra.persistence.lifespan.get_database_manager")
    async def test_large_budget_warns(
        self, mock_get_manager: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_mgr, _ = _mock_manager(budget=120)
        mock_get_manager.return_value = mock_mgr

        with caplog.at_level("WARNING"):
            async with _persistence_lifespan(MagicMock()):
                pass

        assert any("exceeds" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    @patch("limen.infra.persistence.lifespan.get_database_manager")
    async def test_health_check_failure_propagates(self, mock_get_manager: MagicMock) -> None:
        mock_mgr, mock_conn = _mock_manager()
        mock_conn.execute.side_effect = ConnectionError("db down")
        mock_get_manager.return_value = mock_mgr

        with pytest.raises(ConnectionError):
            async with _persistence_lifespan(MagicMock()):
                pass
