"""Span helpers for blob-store and cache operations.

Spans are no-ops until TelemetryConfig installs a tracer provider, so
decorated methods cost almost nothing when telemetry is disabled.
"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")

# Argument names recorded on spans; payloads and credentials never are.
_RECORDED_ARGS = frozenset({"path", "key", "max_bytes", "content_type", "namespace"})


def _record_args(span: trace.Span, signature: inspect.Signature, args, kwargs) -> None:
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return
    for name, value in bound.arguments.items():
        if name in _RECORDED_ARGS:
            span.set_attribute(f"asset.{name}", value if isinstance(value, int) else str(value))


def traced(
    operation_name: str | None = None,
    attributes: dict[str, str | int | float | bool] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Wrap an async function in a span named operation_name.

    Arguments named path, key, max_bytes, content_type or namespace are
    recorded as 'asset.<name>' whether passed by position or keyword.
    An exception marks the span as failed and is re-raised unchanged.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        tracer = trace.get_tracer(func.__module__)
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            with tracer.start_as_current_span(
                span_name, record_exception=False, set_status_on_exception=False
            ) as span:
                if attributes:
                    span.set_attributes(attributes)
                _record_args(span, signature, args, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    set_span_error(e, span)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)


def set_span_error(exception: Exception, span: trace.Span | None = None) -> None:
    """Mark span (default: the current one) as failed and record the exception."""
    span = span or trace.get_current_span()
    if span.is_recording():
        span.set_status(Status(StatusCode.ERROR, str(exception)))
        span.record_exception(exception)
