"""Manual instrumentation utilities for OpenTelemetry tracing.

This module provides utilities for manual span instrumentation:
- @traced_operation decorator for control plane calls
- start_span context manager for provisioning steps
- Helper functions for span management

Usage:
    from limen.infra.observability.instrumentation import traced_operation

    @traced_operation("cloudfront.create_invalidation", rpc_system="aws-api")
    def create_invalidation(distribution_id: str, paths: list[str]) -> str:
        ...

    from limen.infra.observability.instrumentation import start_span

    with start_span("delivery.resolve_alias", {"tenant.id": tenant_id}) as span:
        decision = resolver.resolve(tenant_id, alias, conflict)
        span.set_attribute("resolution.strategy", decision.strategy)
"""

from __future__ import annotations

import inspect
from contextlib import contextmanager
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar, cast

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


# Type variable for decorated functions
F = TypeVar("F", bound="Callable[..., Any]")


def get_tracer(name: str) -> trace.Tracer:
    """Get a named tracer instance.

    Returns a NoOp tracer if tracing is not configured.
    """
    return trace.get_tracer(name)


def set_span_error(span: trace.Span, exc: BaseException) -> None:
    """Record an exception in a span and set error status."""
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.record_exception(exc)


def traced_operation(
    name: str,
    *,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **span_attributes: Any,
) -> Callable[[F], F]:
    """Decorator to create a span for an operation.

    Creates a child span for the decorated function, automatically:
    - Sets span name and initial attributes
    - Sets span status to OK on success
    - Records exceptions and sets ERROR status on failure
    - Supports both sync and async functions

    Args:
        name: Span name (e.g., "route53.change_record_sets").
        kind: Span kind (default: INTERNAL). Remote calls use CLIENT.
        **span_attributes: Initial span attributes (e.g., rpc_system="aws-api").

    Returns:
        Decorated function with automatic span instrumentation.
    """

    def decorator(func: F) -> F:
        tracer = trace.get_tracer(func.__module__)

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in span_attributes.items():
                    span.set_attribute(key, value)

                try:
                    result = await func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as exc:
                    set_span_error(span, exc)
                    raise

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in span_attributes.items():
                    span.set_attribute(key, value)

                try:
                    result = func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as exc:
                    set_span_error(span, exc)
                    raise

        if inspect.iscoroutinefunction(func):
            return cast("F", async_wrapper)
        return cast("F", sync_wrapper)

    return decorator


@contextmanager
def start_span(
    name: str,
    attributes: dict[str, Any] | None = None,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
) -> Iterator[trace.Span]:
    """Context manager to create a nested span.

    Creates a child span for the code block, automatically setting status
    to OK on success or ERROR on exception.

    Args:
        name: Span name.
        attributes: Optional initial span attributes.
        kind: Span kind (default: INTERNAL).

    Yields:
        Active Span for adding attributes or events.
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)

        try:
            yield span
            span.set_status(Status(StatusCode.OK))
        except Exception as exc:
            set_span_error(span, exc)
            raise
