"""Limen Infra TaskIQ — background job broker for provisioning work."""

from limen.infra.taskiq.broker import (
    broker,
    get_broker,
    get_result_backend,
    get_scheduler,
    scheduler,
)
from limen.infra.taskiq.errors import (
    TaskIQBrokerError,
    TaskIQError,
    TaskIQSerializationError,
)
from limen.infra.taskiq.lifespan import lifespan_contribution
from limen.infra.taskiq.settings import TaskIQSettings, get_taskiq_settings

__all__ = [
    "TaskIQBrokerError",
    "TaskIQError",
    "TaskIQSerializationError",
    "TaskIQSettings",
    "broker",
    "get_broker",
    "get_result_backend",
    "get_scheduler",
    "get_taskiq_settings",
    "lifespan_contribution",
    "scheduler",
]
