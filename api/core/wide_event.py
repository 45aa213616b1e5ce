"""Request-scoped context for canonical log lines.

RequestLoggingMiddleware creates the dict at request start and emits it as a
single ``request.completed`` line at request end. Anything in between can add
fields:

    from core.wide_event import set_wide_event_fields

    set_wide_event_fields(laundry_id=laundry.id, canceled_orders=2)
"""

from contextvars import ContextVar
from typing import Any

_wide_event: ContextVar[dict[str, Any]] = ContextVar("wide_event")


def init_wide_event() -> dict[str, Any]:
    """Start a fresh event for the current async context."""
    event: dict[str, Any] = {}
    _wide_event.set(event)
    return event


def get_wide_event() -> dict[str, Any]:
    """Current event, or an empty dict outside a request."""
    try:
        return _wide_event.get()
    except LookupError:
        return {}


def set_wide_event_fields(**kwargs: Any) -> None:
    """Add fields to the current event.

    No-op outside a request context (CLI, tests without the fixture).
    """
    try:
        event = _wide_event.get()
    except LookupError:
        return
    event.update(kwargs)


def clear_wide_event() -> None:
    _wide_event.set({})
