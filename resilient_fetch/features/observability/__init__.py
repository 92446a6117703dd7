"""Observability module for logging."""

from resilient_fetch.features.observability.logging import (
    bind_fetch_context,
    clear_fetch_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_fetch_context",
    "clear_fetch_context",
    "configure_logging",
    "get_logger",
]
