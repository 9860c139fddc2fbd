"""Shared fixtures for AWS adapter tests."""

from __future__ import annotations

from typing import Any

import pytest
from botocore.exceptions import ClientError


def make_client_error(code: str, message: str = "error", operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def client_error() -> Any:
    return make_client_error
