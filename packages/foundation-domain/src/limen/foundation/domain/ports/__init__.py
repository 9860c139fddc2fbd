"""Domain port interfaces for hexagonal architecture.

Ports define abstract interfaces that the domain layer uses to interact
with external services. Implementations (adapters) live in infrastructure.
"""

from limen.foundation.domain.ports.cdn_control_plane import CDNControlPlanePort
from limen.foundation.domain.ports.distribution_record_store import (
    DistributionRecordStorePort,
)
from limen.foundation.domain.ports.dns_control_plane import DNSControlPlanePort

__all__ = ["CDNControlPlanePort", "DNSControlPlanePort", "DistributionRecordStorePort"]
