"""TaskIQ broker and scheduler backed by Redis Streams.

Provisioning jobs call CloudFront and Route 53 and may run for minutes, so
they never execute inside an HTTP request. Redis Streams give at-least-once
delivery with acknowledgements; the delivery services are idempotent, which
makes redelivery safe.

Usage:
    from limen.infra.taskiq import broker

    @broker.task
    async def provision(tenant_id: str) -> dict[str, str]:
        ...

    # Worker
    # taskiq worker limen.infra.taskiq.broker:broker limen.domain.delivery.tasks

    # Scheduler (single instance only)
    # taskiq scheduler limen.infra.taskiq.broker:scheduler --skip-first-run
"""

from __future__ import annotations

from functools import lru_cache

from taskiq import TaskiqScheduler
from taskiq.schedule_sources import LabelScheduleSource
from taskiq_redis import (
    ListRedisScheduleSource,
    RedisAsyncResultBackend,
    RedisStreamBroker,
)

from limen.infra.taskiq.settings import get_taskiq_settings


@lru_cache(maxsize=1)
def get_result_backend() -> RedisAsyncResultBackend[str]:
    """Get or create the TaskIQ result backend."""
    settings = get_taskiq_settings()
    return RedisAsyncResultBackend(
        redis_url=settings.redis_url,
        result_ex_time=settings.result_ttl,
    )


@lru_cache(maxsize=1)
def get_broker() -> RedisStreamBroker:
    """Get or create the TaskIQ broker.

    Returns:
        RedisStreamBroker on the configured stream, with result backend.
    """
    settings = get_taskiq_settings()
    return RedisStreamBroker(
        url=settings.redis_url,
        queue_name=settings.stream_prefix,
    ).with_result_backend(get_result_backend())


@lru_cache(maxsize=1)
def get_scheduler() -> TaskiqScheduler:
    """Get or create the TaskIQ scheduler.

    Uses two schedule sources:
    - LabelScheduleSource: ``@broker.task(schedule=[...])`` declarations
    - ListRedisScheduleSource: runtime schedules stored in Redis

    Only run ONE scheduler instance per deployment.
    """
    settings = get_taskiq_settings()
    _broker = get_broker()
    return TaskiqScheduler(
        broker=_broker,
        sources=[
            LabelScheduleSource(_broker),
            ListRedisScheduleSource(settings.redis_url),
        ],
    )


# The taskiq CLI expects `module:broker` and `module:scheduler` attributes.
# They are proxies so that importing task modules never connects to Redis.


class _LazyBroker:
    """Lazy proxy that defers broker creation until first attribute access."""

    _instance: RedisStreamBroker | None = None

    def _get(self) -> RedisStreamBroker:
        if self._instance is None:
            self._instance = get_broker()
        return self._instance

    def __getattr__(self, name: str) -> object:
        return getattr(self._get(), name)


class _LazyScheduler:
    """Lazy proxy that defers scheduler creation until first attribute access."""

    _instance: TaskiqScheduler | None = None

    def _get(self) -> TaskiqScheduler:
        if self._instance is None:
            self._instance = get_scheduler()
        return self._instance

    def __getattr__(self, name: str) -> object:
        return getattr(self._get(), name)


broker: RedisStreamBroker = _LazyBroker()  # type: ignore[assignment]
scheduler: TaskiqScheduler = _LazyScheduler()  # type: ignore[assignment]
