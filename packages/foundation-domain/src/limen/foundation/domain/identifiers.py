"""Identifier value objects for type-safe identifier handling.

Example:
    >>> from limen.foundation.domain import TenantId
    >>> tenant = TenantId("acme-corp")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

# A tenant id becomes a DNS label ({tenant_id}.{base_domain}).
MAX_TENANT_ID_LENGTH = 63


@dataclass(frozen=True)
class TenantId:
    """Tenant identifier with format validation.

    A value object that wraps a tenant identifier string and validates
    that it conforms to the lowercase alphanumeric slug format and fits
    in a single DNS label.

    Attributes:
        value: Lowercase alphanumeric slug with optional hyphens.

    Raises:
        ValueError: If value doesn't match lowercase slug format.

    Example:
        >>> TenantId("acme-corp")
        TenantId(value='acme-corp')
        >>> TenantId("t1")
        TenantId(value='t1')
    """

    value: str

    _PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

    def __post_init__(self) -> None:
        """Validate tenant ID format on construction."""
        if not self._PATTERN.match(self.value):
            msg = (
                f"Invalid tenant ID format: {self.value!r}. "
                "Must be lowercase alphanumeric with hyphens."
            )
            raise ValueError(msg)
        if len(self.value) > MAX_TENANT_ID_LENGTH:
            msg = f"Tenant ID too long: {self.value!r} (max {MAX_TENANT_ID_LENGTH} chars)"
            raise ValueError(msg)

    def __str__(self) -> str:
        """Return tenant ID string for serialization."""
        return self.value
