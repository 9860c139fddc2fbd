"""Port interface for the DNS control plane.

This module defines the DNSControlPlanePort protocol used by the DNS
orchestrator to manage tenant alias records in a hosted zone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from limen.foundation.domain.delivery_value_objects import DNSChange, DNSRecord


@runtime_checkable
class DNSControlPlanePort(Protocol):
    """Port for hosted-zone record management.

    Implementations raise ``ProviderError`` for remote failures. Record
    names are exchanged without the trailing dot.
    """

    def change_record_sets(
        self,
        zone_id: str,
        changes: Sequence[DNSChange],
        comment: str,
    ) -> str:
        """Submit a change batch.

        Args:
            zone_id: Hosted zone identifier.
            changes: Changes applied atomically.
            comment: Human-readable comment stored with the batch.

        Returns:
            Change identifier, usable with ``get_change``.
        """
        ...

    def get_change(self, change_id: str) -> str:
        """Return the propagation status of a change (``PENDING`` / ``INSYNC``)."""
        ...

    def list_record_sets(
        self,
        zone_id: str,
        start_name: str | None = None,
        start_type: str | None = None,
        max_items: int | None = None,
    ) -> list[DNSRecord]:
        """List record sets of a zone in provider order.

        Args:
            zone_id: Hosted zone identifier.
            start_name: Record name to start listing from.
            start_type: Record type to start listing from.
            max_items: Maximum number of records to return; all when None.
        """
        ...

    def get_hosted_zone(self, zone_id: str) -> str:
        """Return the zone's domain name, raising if it is not accessible."""
        ...
