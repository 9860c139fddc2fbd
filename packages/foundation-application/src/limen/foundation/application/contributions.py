"""Contribution types the app factory composes into one application.

Installed packages advertise these through ``limen.*`` entry points. The
types carry no framework imports so that domain packages can declare a
lifespan hook without depending on FastAPI.

Startup order matters for delivery: traces must be exporting before the
database is probed, and the record table can only be created once the
database answers. Lifespan priorities encode that order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

MIDDLEWARE_PRIORITY_MIN = 0
MIDDLEWARE_PRIORITY_MAX = 499

LIFESPAN_PRIORITY_OBSERVABILITY = 50
LIFESPAN_PRIORITY_PERSISTENCE = 75
LIFESPAN_PRIORITY_TASKIQ = 150
LIFESPAN_PRIORITY_DELIVERY = 200


@dataclass(frozen=True, slots=True)
class MiddlewareContribution:
    """An ASGI middleware for the app factory to install.

    Attributes:
        middleware_class: The ASGI middleware class.
        priority: Lower numbers wrap outermost. Request correlation sits in
            0-99 so every log line and problem document carries the id.
        kwargs: Keyword arguments forwarded to ``add_middleware()``.
    """

    middleware_class: type[Any]
    priority: int = 400
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not MIDDLEWARE_PRIORITY_MIN <= self.priority <= MIDDLEWARE_PRIORITY_MAX:
            msg = (
                f"Middleware priority must be between {MIDDLEWARE_PRIORITY_MIN} "
                f"and {MIDDLEWARE_PRIORITY_MAX}, got {self.priority}"
            )
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class ErrorHandlerContribution:
    """An exception handler ``(Request, Exception) -> Response`` for one type."""

    exception_class: type[BaseException]
    handler: Any


@dataclass(frozen=True, slots=True)
class LifespanContribution:
    """A startup/shutdown hook composed into the application lifespan.

    Attributes:
        hook: Async context manager factory ``(app) -> AsyncContextManager[None]``.
        priority: Lower priorities start first and shut down last.
        name: Label used in startup logs; defaults to the hook's qualified name.
        required: When False, a hook that fails on startup is logged and
            skipped instead of aborting the application.
    """

    hook: Any
    priority: int = 500
    name: str | None = None
    required: bool = True

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        return getattr(self.hook, "__qualname__", repr(self.hook))
