"""Limen Infra Persistence — SQLAlchemy engines and session factories."""

from limen.infra.persistence.database import (
    DatabaseManager,
    DatabaseSettings,
    get_database_manager,
    get_engine,
    get_sync_session_factory,
)
from limen.infra.persistence.lifespan import lifespan_contribution

__all__ = [
    "DatabaseManager",
    "DatabaseSettings",
    "get_database_manager",
    "get_engine",
    "get_sync_session_factory",
    "lifespan_contribution",
]
