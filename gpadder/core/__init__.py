"""
Core infrastructure: logging and error handling
"""

from .exceptions import GPadderError, ErrorSeverity, handle_error
from .logging import get_logger, configure_logging

__all__ = [
    "GPadderError",
    "ErrorSeverity",
    "handle_error",
    "get_logger",
    "configure_logging",
]
