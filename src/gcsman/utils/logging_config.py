"""Logging configuration for gcsman."""

import json
import logging
import logging.handlers
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


@dataclass
class LoggingConfig:
    """Configuration for the logging system."""

    level: LogLevel = LogLevel.WARNING
    format_type: LogFormat = LogFormat.DETAILED
    enable_file_logging: bool = False
    enable_console_logging: bool = True
    log_directory: str = os.path.expanduser("~/.gcsman/logs")
    log_filename: str = "gcsman.log"
    max_file_size_mb: int = 10
    backup_count: int = 5
    console_colors: bool = True
    log_http_requests: bool = False
    sensitive_data_patterns: List[str] = field(
        default_factory=lambda: [
            r"Bearer\s+[A-Za-z0-9._~+/=-]+",
            r"(?<=access_token=)[^&\s]+",
            r"(?<=key=)[^&\s]+",
        ]
    )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "LoggingConfig":
        """
        Build a LoggingConfig from the ``logging`` section of the config file.

        Unknown levels and formats fall back to the defaults.
        """
        config = cls()
        level = str(values.get("level", config.level.value)).upper()
        if level in LogLevel.__members__:
            config.level = LogLevel(level)
        format_type = str(values.get("format", config.format_type.value)).lower()
        if format_type in {item.value for item in LogFormat}:
            config.format_type = LogFormat(format_type)
        if "enable_file_logging" in values:
            config.enable_file_logging = bool(values["enable_file_logging"])
        if values.get("log_directory"):
            config.log_directory = os.path.expanduser(values["log_directory"])
        return config


class SensitiveDataFilter(logging.Filter):
    """Filter to redact tokens and keys from log messages."""

    def __init__(self, patterns: List[str]) -> None:
        """
        Initialize the filter with sensitive data patterns.

        Args:
            patterns: List of regex patterns to match sensitive data
        """
        super().__init__()
        self.patterns = patterns
        self.compiled_patterns = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact sensitive data in place.

        Returns:
            bool: Always True (records are modified, never dropped)
        """
        if isinstance(record.msg, str):
            record.msg = self._redact_sensitive_data(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._redact_sensitive_data(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True

    def _redact_sensitive_data(self, text: str) -> str:
        for pattern in self.compiled_patterns:
            text = pattern.sub("[REDACTED]", text)
        return text


_STANDARD_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record."""

    def __init__(self, include_extra: bool = True) -> None:
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as structured JSON.

        Args:
            record: Log record to format

        Returns:
            str: JSON formatted log message
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_data = {}
            for key, value in record.__dict__.items():
                if key in _STANDARD_RECORD_ATTRS or key.startswith("_"):
                    continue
                try:
                    json.dumps(value)
                    extra_data[key] = value
                except (TypeError, ValueError):
                    extra_data[key] = str(value)
            if extra_data:
                log_data["extra"] = extra_data

        return json.dumps(log_data, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Console formatter with color support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and self._supports_color()

    def _supports_color(self) -> bool:
        """Check if the terminal supports colors."""
        return (
            hasattr(sys.stderr, "isatty")
            and sys.stderr.isatty()
            and os.environ.get("TERM") != "dumb"
        )

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            reset = self.COLORS["RESET"]
            formatted = (
                f"{color}[{timestamp}] {record.levelname:<8}{reset} - "
                f"{record.name} - {record.getMessage()}"
            )
        else:
            formatted = f"[{timestamp}] {record.levelname:<8} - {record.name} - {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


class LoggingManager:
    """
    Centralized logging setup for the ``gcsman`` logger tree.

    Library modules only call ``logging.getLogger(__name__)``; the CLI calls
    ``setup_logging`` once to attach handlers.
    """

    ROOT_LOGGER = "gcsman"

    def __init__(self, config: Optional[LoggingConfig] = None):
        self.config = config or LoggingConfig()
        self._handlers_configured = False

    def setup_logging(self) -> None:
        """Set up handlers on the ``gcsman`` logger."""
        if self._handlers_configured:
            return

        if self.config.enable_file_logging:
            Path(self.config.log_directory).mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger(self.ROOT_LOGGER)
        root_logger.setLevel(getattr(logging, self.config.level.value))
        root_logger.handlers.clear()

        if self.config.enable_console_logging:
            root_logger.addHandler(self._create_console_handler())

        if self.config.enable_file_logging:
            root_logger.addHandler(self._create_file_handler())

        self._configure_third_party_logging()
        self._handlers_configured = True

    def _create_console_handler(self) -> logging.Handler:
        """Create a stderr handler so command output on stdout stays clean."""
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(getattr(logging, self.config.level.value))

        formatter: logging.Formatter
        if self.config.format_type == LogFormat.JSON:
            formatter = StructuredFormatter()
        elif self.config.format_type == LogFormat.SIMPLE:
            formatter = logging.Formatter("%(levelname)s: %(message)s")
        else:
            formatter = ColoredConsoleFormatter(use_colors=self.config.console_colors)

        handler.setFormatter(formatter)
        if self.config.sensitive_data_patterns:
            handler.addFilter(SensitiveDataFilter(self.config.sensitive_data_patterns))
        return handler

    def _create_file_handler(self) -> logging.Handler:
        """Create rotating file handler."""
        log_file = Path(self.config.log_directory) / self.config.log_filename

        handler = logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=self.config.max_file_size_mb * 1024 * 1024,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(getattr(logging, self.config.level.value))
        handler.setFormatter(StructuredFormatter())
        if self.config.sensitive_data_patterns:
            handler.addFilter(SensitiveDataFilter(self.config.sensitive_data_patterns))
        return handler

    def _configure_third_party_logging(self) -> None:
        """Reduce noise from the HTTP stack."""
        for logger_name in ("httpx", "httpcore"):
            logger = logging.getLogger(logger_name)
            if self.config.log_http_requests:
                logger.setLevel(logging.DEBUG)
            else:
                logger.setLevel(logging.WARNING)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger under the ``gcsman`` tree."""
        if not self._handlers_configured:
            self.setup_logging()
        full_name = name if name.startswith(self.ROOT_LOGGER) else f"{self.ROOT_LOGGER}.{name}"
        return logging.getLogger(full_name)


# Global logging manager instance
_global_logging_manager: Optional[LoggingManager] = None


def get_logging_manager() -> LoggingManager:
    """Get the global logging manager instance."""
    global _global_logging_manager
    if _global_logging_manager is None:
        _global_logging_manager = LoggingManager()
    return _global_logging_manager


def setup_logging(config: Optional[LoggingConfig] = None, verbose: bool = False) -> LoggingManager:
    """
    Configure gcsman logging.

    Args:
        config: Logging configuration (defaults to LoggingConfig())
        verbose: Force DEBUG level regardless of configuration

    Returns:
        The global LoggingManager
    """
    global _global_logging_manager
    config = config or LoggingConfig()
    if verbose:
        config.level = LogLevel.DEBUG
    _global_logging_manager = LoggingManager(config)
    _global_logging_manager.setup_logging()
    return _global_logging_manager
