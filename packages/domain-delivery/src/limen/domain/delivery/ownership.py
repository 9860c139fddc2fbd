"""Tenant ownership contract for CDN distributions.

Ownership is read in this order:

1. The ``limen:tenant-id`` resource tag. When present it is final, even if
   the comment says otherwise.
2. The distribution comment, which must match exactly
   ``Distribution for tenant: {tenant_id}``.
3. An origin path equal to ``/tenants/{tenant_id}``.

Every distribution created by the provisioner carries both the tag and the
comment, so the fallbacks only matter for distributions created before
tagging or when the tag lookup fails.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from limen.foundation.domain.delivery_value_objects import Distribution

TENANT_TAG_KEY = "limen:tenant-id"

COMMENT_PATTERN = re.compile(r"^Distribution for tenant: (?P<tenant_id>[a-z0-9-]+)$")
ORIGIN_PATH_PATTERN = re.compile(r"^/tenants/(?P<tenant_id>[a-z0-9-]+)$")


def ownership_comment(tenant_id: str) -> str:
    return f"Distribution for tenant: {tenant_id}"


def ownership_tags(tenant_id: str) -> dict[str, str]:
    return {TENANT_TAG_KEY: tenant_id}


def tenant_origin_path(tenant_id: str) -> str:
    return f"/tenants/{tenant_id}"


def owner_from_metadata(distribution: Distribution) -> str | None:
    """Owner encoded in the comment or origin path, if any."""
    match = COMMENT_PATTERN.match(distribution.comment or "")
    if match:
        return match.group("tenant_id")
    for origin_path in distribution.origin_paths:
        match = ORIGIN_PATH_PATTERN.match(origin_path or "")
        if match:
            return match.group("tenant_id")
    return None


def resolve_owner(
    distribution: Distribution, tags: Mapping[str, str] | None = None
) -> str | None:
    """Owning tenant of a distribution.

    Args:
        distribution: Distribution to inspect.
        tags: Resource tags, or None when they could not be read.

    Returns:
        Tenant id, or None when the distribution carries no ownership marker.
    """
    if tags and tags.get(TENANT_TAG_KEY):
        return tags[TENANT_TAG_KEY]
    return owner_from_metadata(distribution)
