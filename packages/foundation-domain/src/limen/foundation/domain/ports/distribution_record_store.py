"""Port interface for persisted tenant distribution records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from limen.foundation.domain.delivery_value_objects import TenantDistributionRecord


@runtime_checkable
class DistributionRecordStorePort(Protocol):
    """Port for the per-tenant distribution record store.

    One record per tenant. ``save`` is an upsert keyed by tenant id and
    ``clear`` removing an absent record is a no-op.
    """

    def get(self, tenant_id: str) -> TenantDistributionRecord | None:
        """Return the tenant's record, or None if none is stored."""
        ...

    def save(self, record: TenantDistributionRecord) -> None:
        """Insert or replace the tenant's record."""
        ...

    def clear(self, tenant_id: str) -> None:
        """Remove the tenant's record."""
        ...
