"""
Utility helpers for flexiring.
"""

from .logging import configure_logging, configure_logging_from_env, get_logger, log_context

__all__ = [
    "configure_logging",
    "configure_logging_from_env",
    "get_logger",
    "log_context",
]
