"""Logging setup for the tagchart command line and embedding applications."""

from tagchart.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    configure_structlog,
    get_active_logging_handle,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "configure_structlog",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
