"""Limen Foundation Application — application composition primitives."""

from limen.foundation.application.contributions import (
    LIFESPAN_PRIORITY_DELIVERY,
    LIFESPAN_PRIORITY_OBSERVABILITY,
    LIFESPAN_PRIORITY_PERSISTENCE,
    LIFESPAN_PRIORITY_TASKIQ,
    ErrorHandlerContribution,
    LifespanContribution,
    MiddlewareContribution,
)
from limen.foundation.application.discovery import (
    GROUP_ERROR_HANDLERS,
    GROUP_LIFESPAN,
    GROUP_MIDDLEWARE,
    GROUP_ROUTERS,
    DiscoveredContribution,
    discover,
)

__all__ = [
    "GROUP_ERROR_HANDLERS",
    "GROUP_LIFESPAN",
    "GROUP_MIDDLEWARE",
    "GROUP_ROUTERS",
    "LIFESPAN_PRIORITY_DELIVERY",
    "LIFESPAN_PRIORITY_OBSERVABILITY",
    "LIFESPAN_PRIORITY_PERSISTENCE",
    "LIFESPAN_PRIORITY_TASKIQ",
    "DiscoveredContribution",
    "ErrorHandlerContribution",
    "LifespanContribution",
    "MiddlewareContribution",
    "discover",
]
