"""Public logging API for configuration evaluation.

This package wraps Python's ``logging`` module with stream defaults and an
evaluation-scoped context.
"""

from .config import configure_logging, get_logger
from .context import bind_context, clear_context, evaluation_fields, get_context, log_context

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "evaluation_fields",
    "get_context",
    "get_logger",
    "log_context",
]
