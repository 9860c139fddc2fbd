"""Unit tests for limen.infra.taskiq.settings."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from limen.infra.taskiq.settings import TaskIQSettings, get_taskiq_settings


@pytest.mark.unit
class TestTaskIQSettings:
    def test_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            settings = TaskIQSettings()  # type: ignore[call-arg]
            assert settings.redis_url == "redis://localhost:6379/1"
            assert settings.result_ttl == 3600
            assert settings.stream_prefix == "limen-delivery"

    def test_env_var_override(self) -> None:
        env = {
            "TASKIQ_REDIS_URL": "redis://custom-host:6380/2",
            "TASKIQ_RESULT_TTL": "7200",
            "TASKIQ_STREAM_PREFIX": "staging-delivery",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = TaskIQSettings()  # type: ignore[call-arg]
            assert settings.redis_url == "redis://custom-host:6380/2"
            assert settings.result_ttl == 7200
            assert settings.stream_prefix == "staging-delivery"

    def test_result_ttl_bounds(self) -> None:
        with patch.dict("os.environ", {"TASKIQ_RESULT_TTL": "10"}, clear=True):
            with pytest.raises(ValidationError):
                TaskIQSettings()  # type: ignore[call-arg]


@pytest.mark.unit
class TestGetTaskIQSettings:
    def test_cached_returns_same_instance(self) -> None:
        get_taskiq_settings.cache_clear()
        with patch.dict("os.environ", {}, clear=True):
            assert get_taskiq_settings() is get_taskiq_settings()
