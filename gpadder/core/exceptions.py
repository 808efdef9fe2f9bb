"""
Exception handling framework for GPadder.

Provides custom exception classes and error handling utilities for
consistent error management throughout the application.
"""

import sys
import traceback
from typing import Any, Dict, Optional, Type
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GPadderError(Exception):
    """
    Base exception class for all GPadder-specific errors.

    Provides structured error information including severity, error codes,
    and additional context data.
    """

    def __init__(self,
                 message: str,
                 error_code: Optional[str] = None,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        """
        Initialize GPadder error.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier
            severity: Error severity level
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"{self.error_code}: {self.message}"]

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


# Configuration errors
class ConfigurationError(GPadderError):
    """Raised when there's a configuration-related error."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if config_key:
            context['config_key'] = config_key
        kwargs['context'] = context
        super().__init__(message, **kwargs)


class InvalidConfigValueError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, expected: str, **kwargs):
        message = f"Invalid value '{value}' for config key '{key}'. Expected: {expected}"
        super().__init__(message, config_key=key, **kwargs)


# Input system errors
class InputError(GPadderError):
    """Base class for input-related errors."""
    pass


class DeviceError(InputError):
    """Raised when there's a device-related error."""

    def __init__(self, message: str, device_index: Optional[int] = None, **kwargs):
        context = kwargs.get('context', {})
        if device_index is not None:
            context['device_index'] = device_index
        kwargs['context'] = context
        super().__init__(message, **kwargs)


class DriverError(InputError):
    """Raised when the device driver backend cannot be brought up."""

    def __init__(self, message: str, backend: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if backend:
            context['backend'] = backend
        kwargs['context'] = context
        kwargs.setdefault('severity', ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class ErrorHandler:
    """
    Centralized error handling and reporting system.

    Provides utilities for error logging and crash reporting.
    """

    def __init__(self):
        self._error_callbacks = []
        self._crash_handlers = []

    def handle_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Handle an error with appropriate logging.

        Args:
            error: The exception to handle
            context: Additional context information
        """
        # Import here to avoid circular imports
        from .logging import get_logger

        logger = get_logger("error_handler")

        error_context = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "traceback": traceback.format_exc(),
        }

        if context:
            error_context.update(context)

        if isinstance(error, GPadderError):
            error_context.update({
                "error_code": error.error_code,
                "severity": error.severity.value,
                "gpadder_context": error.context,
            })

            # Log with appropriate level based on severity
            if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
                logger.error("GPadder error occurred", extra=error_context)
            else:
                logger.warning("GPadder error occurred", extra=error_context)
        else:
            logger.error("Unexpected error occurred", extra=error_context)

        for callback in self._error_callbacks:
            try:
                callback(error, error_context)
            except Exception as callback_error:
                logger.error(f"Error in error callback: {callback_error}")

    def handle_crash(self, error: Exception) -> None:
        """
        Handle a critical error that might cause the application to crash.

        Args:
            error: The critical exception
        """
        from .logging import get_logger

        logger = get_logger("crash_handler")
        logger.critical("Critical error - application may crash", extra={
            "error_type": type(error).__name__,
            "error_message": str(error),
            "traceback": traceback.format_exc(),
        })

        for handler in self._crash_handlers:
            try:
                handler(error)
            except Exception as handler_error:
                logger.critical(f"Error in crash handler: {handler_error}")

    def register_error_callback(self, callback) -> None:
        """Register a callback to be called when errors occur."""
        self._error_callbacks.append(callback)

    def register_crash_handler(self, handler) -> None:
        """Register a handler to be called during critical errors."""
        self._crash_handlers.append(handler)

    def setup_global_exception_handler(self) -> None:
        """Set up global exception handler for unhandled exceptions."""
        def exception_handler(exc_type: Type[BaseException],
                            exc_value: BaseException,
                            exc_traceback) -> None:
            if issubclass(exc_type, KeyboardInterrupt):
                sys.__excepthook__(exc_type, exc_value, exc_traceback)
                return

            self.handle_crash(exc_value)
            sys.__excepthook__(exc_type, exc_value, exc_traceback)

        sys.excepthook = exception_handler


# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def handle_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Handle an error using the global error handler.

    Args:
        error: The exception to handle
        context: Additional context information
    """
    get_error_handler().handle_error(error, context)


def handle_crash(error: Exception) -> None:
    """Handle a critical error using the global error handler."""
    get_error_handler().handle_crash(error)


def setup_exception_handling() -> None:
    """Set up global exception handling."""
    get_error_handler().setup_global_exception_handler()
