"""Entry-point discovery for application contributions.

The delivery API is assembled from whatever ``limen`` packages are
installed: an API node without a worker extra simply has no TaskIQ hook.
Entry points are loaded in name order so that router and middleware
registration is the same on every node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib.metadata import EntryPoint, entry_points
from typing import Any

logger = logging.getLogger(__name__)

GROUP_ROUTERS = "limen.routers"
GROUP_MIDDLEWARE = "limen.middleware"
GROUP_ERROR_HANDLERS = "limen.error_handlers"
GROUP_LIFESPAN = "limen.lifespan"


@dataclass(frozen=True, slots=True)
class DiscoveredContribution:
    """A loaded entry point: its ``name``, ``group`` and the loaded ``value``."""

    name: str
    group: str
    value: Any


def _load(ep: EntryPoint, group: str) -> DiscoveredContribution | None:
    try:
        value = ep.load()
    except Exception:
        # One broken optional package must not take the whole API down.
        logger.exception("entry_point_load_failed", extra={"group": group, "name": ep.name})
        return None
    return DiscoveredContribution(name=ep.name, group=group, value=value)


def discover(
    group: str,
    *,
    exclude_names: frozenset[str] = frozenset(),
) -> list[DiscoveredContribution]:
    """Load every entry point of ``group`` not named in ``exclude_names``.

    Entry points that fail to import are logged and skipped.

    Returns:
        Loaded contributions, sorted by entry point name.
    """
    found: list[DiscoveredContribution] = []
    skipped: list[str] = []

    for ep in sorted(entry_points(group=group), key=lambda e: e.name):
        if ep.name in exclude_names:
            skipped.append(ep.name)
            continue
        contribution = _load(ep, group)
        if contribution is not None:
            found.append(contribution)

    logger.info(
        "entry_points_discovered",
        extra={
            "group": group,
            "loaded": [c.name for c in found],
            "excluded": skipped,
        },
    )
    return found
