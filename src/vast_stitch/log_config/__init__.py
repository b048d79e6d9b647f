"""Logging configuration package."""

from .context import LoggingContext, clear_context
from .main import configure_logging, get_context_logger


__all__ = [
    "get_context_logger",
    "configure_logging",
    "LoggingContext",
    "clear_context",
]
