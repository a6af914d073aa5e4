# common/logger/logger.py
"""
Seeder logger with explicit initialization.

Usage:
    from common.logger import get_app_logger

    logger = get_app_logger(__name__)
    logger.info("Seeded", table="accounts", rows=200)

    # Context shared by every line of one load
    load_logger = logger.bind(source="accounts.csv")
"""

from typing import Any, Dict, Optional
import structlog

from common.config.structlog_config import get_logger as _get_structlog_logger


class AppLogger:
    """
    Logger wrapper.

    Provides a type-safe interface to structlog. The underlying logger is
    resolved on first use, so modules can create their logger at import
    time, before configure_structlog() runs.
    """

    def __init__(
        self, name: str = "csv_seeder", context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._name = name
        self._context: Dict[str, Any] = dict(context or {})
        self._logger_instance: Optional[structlog.typing.FilteringBoundLogger] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def _logger(self) -> structlog.typing.FilteringBoundLogger:
        """
        Lazy-load logger instance.
        This ensures structlog is configured before first use.
        """
        if self._logger_instance is None:
            logger = _get_structlog_logger(self._name)
            if self._context:
                logger = logger.bind(**self._context)
            self._logger_instance = logger
        return self._logger_instance

    def bind(self, **kwargs: Any) -> "AppLogger":
        """Return a new logger carrying extra context on every line."""
        return AppLogger(self._name, {**self._context, **kwargs})

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._logger.debug(msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._logger.info(msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._logger.warning(msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message."""
        self._logger.error(msg, **kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        """Log critical message."""
        self._logger.critical(msg, **kwargs)


def get_app_logger(name: str = "csv_seeder") -> AppLogger:
    """
    Get seeder logger instance.

    Args:
        name: Logger name

    Returns:
        AppLogger instance
    """
    return AppLogger(name=name)


# Convenience instance for simple usage
logger = get_app_logger()

__all__ = ["logger", "AppLogger", "get_app_logger"]
