"""Middleware components for the Limen FastAPI integration."""

from limen.infra.fastapi.middleware.request_id import (
    RequestIdMiddleware,
    get_request_id,
)

__all__ = [
    "RequestIdMiddleware",
    "get_request_id",
]
