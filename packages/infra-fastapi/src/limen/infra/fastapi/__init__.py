"""Limen Infra FastAPI — app factory, error handlers, middleware and health."""

from limen.infra.fastapi.app_factory import create_app
from limen.infra.fastapi.error_handlers import (
    ProblemDetail,
    register_exception_handlers,
)
from limen.infra.fastapi.middleware.request_id import (
    RequestIdMiddleware,
    get_request_id,
)
from limen.infra.fastapi.settings import AppSettings, CORSSettings

__all__ = [
    "AppSettings",
    "CORSSettings",
    "ProblemDetail",
    "RequestIdMiddleware",
    "create_app",
    "get_request_id",
    "register_exception_handlers",
]
