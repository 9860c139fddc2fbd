"""FastAPI application factory for the delivery API.

``create_app()`` assembles the API from installed ``limen`` packages: the
delivery router, the health router, RFC 7807 handlers, request ids and the
lifespan hooks of persistence, tracing and the job broker. Nodes opt out of
pieces with ``APP_EXCLUDE_ENTRY_POINTS`` rather than with code changes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from limen.foundation.application import (
    GROUP_ERROR_HANDLERS,
    GROUP_LIFESPAN,
    GROUP_MIDDLEWARE,
    GROUP_ROUTERS,
    ErrorHandlerContribution,
    LifespanContribution,
    MiddlewareContribution,
    discover,
)
from limen.infra.fastapi.lifespan import compose_lifespan
from limen.infra.fastapi.settings import AppSettings

if TYPE_CHECKING:
    from fastapi import APIRouter

logger = logging.getLogger(__name__)


def _lifespan_hooks(
    extra: list[LifespanContribution], exclude_names: frozenset[str]
) -> list[LifespanContribution]:
    hooks = list(extra)
    for contrib in discover(GROUP_LIFESPAN, exclude_names=exclude_names):
        value = contrib.value
        if not isinstance(value, LifespanContribution):
            value = LifespanContribution(hook=value, name=contrib.name)
        hooks.append(value)
    return hooks


def _install_middleware(
    app: FastAPI,
    extra: list[MiddlewareContribution],
    exclude_names: frozenset[str],
    *,
    discovered: bool,
) -> None:
    contributions = list(extra)
    if discovered:
        for contrib in discover(GROUP_MIDDLEWARE, exclude_names=exclude_names):
            if isinstance(contrib.value, MiddlewareContribution):
                contributions.append(contrib.value)
            else:
                logger.warning("middleware_entry_point_invalid", extra={"name": contrib.name})

    # Starlette wraps in reverse order of registration: lowest priority ends outermost.
    for mw in sorted(contributions, key=lambda m: m.priority, reverse=True):
        app.add_middleware(mw.middleware_class, **mw.kwargs)
        logger.debug(
            "middleware_installed",
            extra={"middleware": mw.middleware_class.__name__, "priority": mw.priority},
        )


def _install_error_handlers(
    app: FastAPI,
    extra: list[ErrorHandlerContribution],
    exclude_names: frozenset[str],
    *,
    discovered: bool,
) -> None:
    handlers = list(extra)
    if discovered:
        for contrib in discover(GROUP_ERROR_HANDLERS, exclude_names=exclude_names):
            value = contrib.value
            if isinstance(value, ErrorHandlerContribution):
                handlers.append(value)
            elif callable(value):
                value(app)
            else:
                logger.warning("error_handler_entry_point_invalid", extra={"name": contrib.name})

    for handler in handlers:
        app.add_exception_handler(handler.exception_class, handler.handler)


def create_app(
    settings: AppSettings | None = None,
    *,
    extra_routers: list[APIRouter] | None = None,
    extra_middleware: list[MiddlewareContribution] | None = None,
    extra_lifespan_hooks: list[LifespanContribution] | None = None,
    extra_error_handlers: list[ErrorHandlerContribution] | None = None,
    exclude_groups: frozenset[str] | None = None,
    exclude_names: frozenset[str] | None = None,
) -> FastAPI:
    """Create the delivery API.

    Args:
        settings: Application settings. If ``None``, loaded from environment.
        extra_routers: Routers mounted in addition to discovered ones.
        extra_middleware: Middleware installed in addition to discovered ones.
        extra_lifespan_hooks: Lifespan hooks composed with discovered ones.
        extra_error_handlers: Exception handlers registered with discovered ones.
        exclude_groups: Entry point groups to skip; defaults to settings.
        exclude_names: Entry point names to skip in every group; defaults to settings.
    """
    settings = settings or AppSettings()
    groups = exclude_groups if exclude_groups is not None else settings.exclude_groups
    names = exclude_names if exclude_names is not None else settings.exclude_entry_points

    hooks = list(extra_lifespan_hooks or [])
    if GROUP_LIFESPAN not in groups:
        hooks = _lifespan_hooks(hooks, names)

    app = FastAPI(
        title=settings.title,
        version=settings.version,
        description=settings.description,
        root_path=settings.root_path,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        debug=settings.debug,
        lifespan=compose_lifespan(hooks),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
        expose_headers=settings.cors.expose_headers,
    )
    _install_middleware(
        app, extra_middleware or [], names, discovered=GROUP_MIDDLEWARE not in groups
    )
    _install_error_handlers(
        app, extra_error_handlers or [], names, discovered=GROUP_ERROR_HANDLERS not in groups
    )

    routers = list(extra_routers or [])
    if GROUP_ROUTERS not in groups:
        routers.extend(c.value for c in discover(GROUP_ROUTERS, exclude_names=names))
    for router in routers:
        app.include_router(router)

    logger.info(
        "application_created",
        extra={
            "routes": len(app.routes),
            "lifespan_hooks": len(hooks),
            "excluded_entry_points": sorted(names),
        },
    )
    return app
