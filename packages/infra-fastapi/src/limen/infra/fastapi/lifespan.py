"""Composite lifespan for the delivery API.

Hooks enter in ascending priority and exit in reverse. A hook marked
``required=False`` may fail on startup without stopping the API: the
provisioning endpoints then report the missing dependency per request.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from contextlib import AbstractAsyncContextManager

    from fastapi import FastAPI

    from limen.foundation.application import LifespanContribution

logger = logging.getLogger(__name__)


async def _enter(
    stack: AsyncExitStack, contribution: LifespanContribution, app: FastAPI
) -> bool:
    try:
        await stack.enter_async_context(contribution.hook(app))
    except Exception:
        if contribution.required:
            raise
        logger.exception(
            "lifespan_hook_skipped",
            extra={"hook": contribution.label, "priority": contribution.priority},
        )
        return False
    return True


def compose_lifespan(
    hooks: list[LifespanContribution],
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the FastAPI ``lifespan`` from ``hooks``."""
    ordered = sorted(hooks, key=lambda h: h.priority)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        started: list[str] = []
        async with AsyncExitStack() as stack:
            for contribution in ordered:
                if await _enter(stack, contribution, app):
                    started.append(contribution.label)
            logger.info("application_started", extra={"lifespan_hooks": started})
            yield
        logger.info("application_stopped", extra={"lifespan_hooks": started[::-1]})

    return lifespan
