"""Infrastructure adapters for tenant delivery."""

from limen.domain.delivery.infrastructure.record_repository import (
    DistributionRecordRepository,
)

__all__ = ["DistributionRecordRepository"]
