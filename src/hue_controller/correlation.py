"""
Correlation IDs for tracing one command or bridge notification through logs.

A contextvar keeps the ID task-local, so the alert-restore callback and a
concurrent command on another group never share an ID.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Generator
from contextlib import contextmanager

__all__ = [
    "correlation_context",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)


def generate_correlation_id() -> str:
    """Return a new UUID4 hex correlation ID."""
    return uuid.uuid4().hex


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str]:
    """
    Scope a correlation ID, restoring the previous one on exit.

    An enclosing ID is reused when ``correlation_id`` is not given, so a
    notification handled inside a command keeps the command's ID.

    Args:
        correlation_id: Specific correlation ID to use

    Yields:
        The correlation ID active inside the block
    """
    previous_id = get_correlation_id()
    active_id = correlation_id or previous_id or generate_correlation_id()
    token = _correlation_id.set(active_id)
    try:
        yield active_id
    finally:
        _correlation_id.reset(token)
