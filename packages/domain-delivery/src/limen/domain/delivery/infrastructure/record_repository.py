"""Record store for tenant distribution records.

Sync repository over textual SQL; the provisioner runs in worker threads.
Unfiltered: distribution records are a control-plane concern.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from limen.foundation.domain.delivery_value_objects import (
    DistributionStatus,
    TenantDistributionRecord,
)
from limen.foundation.domain.exceptions import ProviderError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

PROVIDER = "record_store"

CREATE_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS tenant_distributions ("
    "tenant_id VARCHAR(63) PRIMARY KEY, "
    "distribution_id VARCHAR(64) NOT NULL, "
    "cdn_domain VARCHAR(255) NOT NULL, "
    "custom_alias VARCHAR(255), "
    "status VARCHAR(32) NOT NULL, "
    "unique_token VARCHAR(64) NOT NULL, "
    "dns_change_ref VARCHAR(64), "
    "created_at TIMESTAMPTZ NOT NULL, "
    "updated_at TIMESTAMPTZ NOT NULL DEFAULT now()"
    ")"
)

_COLUMNS = (
    "tenant_id, distribution_id, cdn_domain, custom_alias, "
    "status, unique_token, dns_change_ref, created_at"
)


def _row_to_record(row: Any) -> TenantDistributionRecord:
    return TenantDistributionRecord(
        tenant_id=row[0],
        distribution_id=row[1],
        cdn_domain=row[2],
        custom_alias=row[3],
        status=DistributionStatus(row[4]),
        unique_token=row[5],
        dns_change_ref=row[6],
        created_at=row[7],
    )


class DistributionRecordRepository:
    """Read/write access to the ``tenant_distributions`` table.

    Implements ``DistributionRecordStorePort``. Database failures are raised
    as ``ProviderError`` so callers can treat them like any other remote
    failure.

    Args:
        session_factory: Callable returning a SQLAlchemy Session context manager.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str, tenant_id: str | None = None) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise ProviderError(
                PROVIDER,
                operation,
                str(getattr(exc, "orig", None) or exc),
                transient=True,
                tenant_id=tenant_id,
            ) from exc

    def ensure_schema(self) -> None:
        """Create the table if it does not exist."""
        with self._session("ensure_schema") as session:
            session.execute(text(CREATE_TABLE_SQL))
            session.commit()

    def get(self, tenant_id: str) -> TenantDistributionRecord | None:
        """Read the record of a tenant.

        Args:
            tenant_id: Tenant identifier.

        Returns:
            The record, or None if the tenant has none.
        """
        with self._session("get", tenant_id) as session:
            result = session.execute(
                text(f"SELECT {_COLUMNS} FROM tenant_distributions WHERE tenant_id = :tenant_id"),
                {"tenant_id": tenant_id},
            )
            row = result.fetchone()
            if row is None:
                return None
            return _row_to_record(row)

    def save(self, record: TenantDistributionRecord) -> None:
        """Insert or update a record.

        Uses PostgreSQL UPSERT so repeated saves are idempotent. ``created_at``
        is kept from the first insert.
        """
        with self._session("save", record.tenant_id) as session:
            session.execute(
                text(
                    f"INSERT INTO tenant_distributions ({_COLUMNS}) "
                    "VALUES (:tenant_id, :distribution_id, :cdn_domain, :custom_alias, "
                    ":status, :unique_token, :dns_change_ref, :created_at) "
                    "ON CONFLICT (tenant_id) DO UPDATE SET "
                    "distribution_id = EXCLUDED.distribution_id, "
                    "cdn_domain = EXCLUDED.cdn_domain, "
                    "custom_alias = EXCLUDED.custom_alias, "
                    "status = EXCLUDED.status, "
                    "unique_token = EXCLUDED.unique_token, "
                    "dns_change_ref = EXCLUDED.dns_change_ref, "
                    "updated_at = now()"
                ),
                {
                    "tenant_id": record.tenant_id,
                    "distribution_id": record.distribution_id,
                    "cdn_domain": record.cdn_domain,
                    "custom_alias": record.custom_alias,
                    "status": str(record.status),
                    "unique_token": record.unique_token,
                    "dns_change_ref": record.dns_change_ref,
                    "created_at": record.created_at,
                },
            )
            session.commit()
        logger.debug(
            "distribution_record_saved",
            extra={"tenant_id": record.tenant_id, "status": str(record.status)},
        )

    def clear(self, tenant_id: str) -> None:
        """Delete the record of a tenant. Deleting a missing record is a no-op."""
        with self._session("clear", tenant_id) as session:
            session.execute(
                text("DELETE FROM tenant_distributions WHERE tenant_id = :tenant_id"),
                {"tenant_id": tenant_id},
            )
            session.commit()
