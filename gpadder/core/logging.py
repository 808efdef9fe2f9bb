"""
Structured logging system for GPadder.

Provides centralized logging configuration for console and rotating file
output, with structured ``extra`` fields rendered by a shared formatter.
"""

import logging
import logging.handlers
import sys
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union
from datetime import datetime


# LogRecord attributes that are not user supplied ``extra`` fields
_RESERVED_ATTRS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'getMessage', 'taskName', 'message',
})

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET_COLOR = "\033[0m"


class StructuredFormatter(logging.Formatter):
    """
    Formatter that renders log records with their structured extra fields.

    Supports both JSON and human-readable output.
    """

    def __init__(self, fmt_type: str = "human", include_extra: bool = True):
        """
        Initialize structured formatter.

        Args:
            fmt_type: Format type ("human" or "json")
            include_extra: Include extra fields in output
        """
        self.fmt_type = fmt_type
        self.include_extra = include_extra
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_fields = {}
            for key, value in record.__dict__.items():
                if key in _RESERVED_ATTRS:
                    continue
                try:
                    json.dumps(value)
                    extra_fields[key] = value
                except (TypeError, ValueError):
                    extra_fields[key] = str(value)

            if extra_fields:
                log_data["extra"] = extra_fields

        if self.fmt_type == "json":
            return json.dumps(log_data, ensure_ascii=False)
        return self._format_human_readable(log_data)

    def _format_human_readable(self, log_data: Dict[str, Any]) -> str:
        """Format log data as a single human-readable line."""
        timestamp = log_data["timestamp"][:19]
        level = log_data["level"]

        use_colors = hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()
        if use_colors and level in _LEVEL_COLORS:
            level_str = f"{_LEVEL_COLORS[level]}{level:<8}{_RESET_COLOR}"
        else:
            level_str = f"{level:<8}"

        formatted = f"{timestamp} {level_str} {log_data['logger']:<24} {log_data['message']}"

        if level == "DEBUG":
            formatted += f" [{log_data['module']}:{log_data['function']}:{log_data['line']}]"

        if "exception" in log_data:
            formatted += f"\n{log_data['exception']}"

        if log_data.get("extra"):
            extra_str = ", ".join(f"{k}={v}" for k, v in log_data["extra"].items())
            formatted += f" | {extra_str}"

        return formatted


class LoggerManager:
    """
    Centralized logger management for GPadder.

    Handles configuration of the root handlers and hands out component
    loggers under the ``gpadder`` namespace.
    """

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._configured = False
        self._log_dir: Optional[Path] = None

    def configure(self,
                  log_level: str = "INFO",
                  log_dir: Optional[Union[str, Path]] = None,
                  console_output: bool = True,
                  file_output: bool = True,
                  json_format: bool = False,
                  max_file_size: int = 5 * 1024 * 1024,  # 5MB
                  backup_count: int = 3) -> None:
        """
        Configure the logging system.

        Args:
            log_level: Minimum log level to output
            log_dir: Directory for log files (creates if doesn't exist)
            console_output: Enable console output
            file_output: Enable file output
            json_format: Use JSON format for file output
            max_file_size: Maximum size of each log file
            backup_count: Number of backup files to keep
        """
        if self._configured:
            return

        level = getattr(logging, log_level.upper())
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        if console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(StructuredFormatter("human"))
            root_logger.addHandler(console_handler)

        if file_output:
            self._log_dir = Path(log_dir) if log_dir else Path.home() / ".gpadder" / "logs"
            self._log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                self._log_dir / "gpadder.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)  # File gets all messages
            if json_format:
                file_handler.setFormatter(StructuredFormatter("json"))
            else:
                file_handler.setFormatter(StructuredFormatter("human", include_extra=False))
            root_logger.addHandler(file_handler)

        self._configured = True

        self.get_logger("logging").info("Logging system configured", extra={
            "log_level": log_level,
            "log_dir": str(self._log_dir) if self._log_dir else None,
            "console_output": console_output,
            "file_output": file_output,
            "json_format": json_format
        })

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get or create a logger with the given name.

        Args:
            name: Logger name (typically component name)

        Returns:
            Logger under the ``gpadder`` namespace
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(f"gpadder.{name}")
        return self._loggers[name]

    def set_level(self, level: str) -> None:
        """Set log level for the root logger and its console handlers."""
        log_level = getattr(logging, level.upper())
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        for handler in root_logger.handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(log_level)

    def shutdown(self) -> None:
        """Shutdown the logging system gracefully."""
        self.get_logger("logging").info("Shutting down logging system")
        logging.shutdown()

    @property
    def log_directory(self) -> Optional[Path]:
        """Get the log directory path."""
        return self._log_dir


# Global logger manager instance
_logger_manager: Optional[LoggerManager] = None


def get_logger_manager() -> LoggerManager:
    """Get the global logger manager instance."""
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    return _logger_manager


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given component."""
    return get_logger_manager().get_logger(name)


def configure_logging(log_level: Optional[str] = None, **kwargs) -> None:
    """
    Configure the logging system with the given parameters.

    Args:
        log_level: Minimum log level, defaults to the configured one
        **kwargs: Additional LoggerManager.configure options
    """
    # Import here to avoid circular imports
    from ..config import get_settings

    settings = get_settings()

    kwargs.setdefault('file_output', not settings.is_development_mode())
    get_logger_manager().configure(
        log_level=log_level or settings.log_level,
        **kwargs
    )


def shutdown_logging() -> None:
    """Shutdown the logging system."""
    get_logger_manager().shutdown()
