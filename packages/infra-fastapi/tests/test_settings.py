"""Unit tests for limen.infra.fastapi.settings."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from limen.infra.fastapi.settings import AppSettings, CORSSettings


class TestCORSSettings:
    @pytest.mark.unit
    def test_defaults_expose_retry_after(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            settings = CORSSettings()
        assert settings.allow_origins == ["*"]
        assert settings.expose_headers == ["X-Request-ID", "Retry-After"]

    @pytest.mark.unit
    def test_comma_separated_env(self) -> None:
        env = {"CORS_ALLOW_ORIGINS": "https://admin.example.com, https://ops.example.com"}
        with patch.dict("os.environ", env, clear=True):
            settings = CORSSettings()
        assert settings.allow_origins == [
            "https://admin.example.com",
            "https://ops.example.com",
        ]

    @pytest.mark.unit
    def test_credentials_with_wildcard_rejected(self) -> None:
        with pytest.raises(ValidationError, match="wildcard origin"):
            CORSSettings(allow_credentials=True, allow_origins=["*"])


class TestAppSettings:
    @pytest.mark.unit
    def test_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            settings = AppSettings()
        assert settings.title == "Limen Delivery API"
        assert settings.root_path == ""
        assert settings.exclude_entry_points == frozenset()

    @pytest.mark.unit
    def test_exclusions_from_env(self) -> None:
        env = {"APP_EXCLUDE_ENTRY_POINTS": "taskiq,observability"}
        with patch.dict("os.environ", env, clear=True):
            settings = AppSettings()
        assert settings.exclude_entry_points == frozenset({"taskiq", "observability"})

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("raw", "expected"), [("api", "/api"), ("/api/", "/api"), ("  ", "")]
    )
    def test_root_path_normalized(self, raw: str, expected: str) -> None:
        assert AppSettings(root_path=raw).root_path == expected
