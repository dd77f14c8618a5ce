"""
Centralized logging configuration for the update center generator.

Every component logs through loguru with a bound ``component`` field so that
per-plugin progress, wiki lookups and cache activity can be told apart in a
single run log.
"""

import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger


class LoggingManager:
    """Manages logging sinks for a generator run."""

    def __init__(self, service_name: str = "update-center"):
        """
        Initialize logging manager.

        Args:
            service_name: Name used for the log file and the ``service_name`` extra
        """
        self.service_name = service_name
        self._configured = False

    def configure_logging(
        self,
        level: str = "INFO",
        enable_file_logging: bool = False,
        log_file_path: Path | None = None,
        structured_format: bool = False,
    ) -> None:
        """
        Configure logging sinks for the whole application.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            enable_file_logging: Whether to also log to a rotating file
            log_file_path: Path for log file (``logs/<service>.log`` if None)
            structured_format: Whether the file sink writes JSON records
        """
        if self._configured:
            return

        logger.remove()

        logger.add(
            sys.stderr,
            format=self._get_console_format(structured_format),
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

        if enable_file_logging:
            if log_file_path is None:
                log_file_path = Path.cwd() / "logs" / f"{self.service_name}.log"

            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            logger.add(
                str(log_file_path),
                format=self._get_file_format(structured_format),
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="gz",
                backtrace=True,
                diagnose=False,
                serialize=structured_format,
            )

        logger.configure(extra={"service_name": self.service_name})

        self._configured = True
        logger.bind(
            service=self.service_name, level=level, file_logging=enable_file_logging
        ).debug("Logging configured")

    def _get_console_format(self, structured: bool) -> str:
        """Get console logging format."""
        if structured:
            return (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level> | "
                "{extra}"
            )
        return (
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        )

    def _get_file_format(self, structured: bool) -> str:
        """Get file logging format."""
        if structured:
            # JSON format handled by serialize=True
            return "{time} | {level} | {name}:{function}:{line} | {message} | {extra}"
        return (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
            "{name}:{function}:{line} | {message}"
        )

    def get_logger(self, name: str) -> Any:
        """
        Get a logger bound to the given component name.

        Args:
            name: Logger name (usually __name__)

        Returns:
            Bound loguru logger
        """
        return logger.bind(component=name)

    def log_operation_start(self, operation: str, **kwargs) -> None:
        """Log the start of an operation with context."""
        logger.bind(operation=operation, **kwargs).info(f"{operation} started")

    def log_operation_complete(self, operation: str, duration: float, **kwargs) -> None:
        """Log the completion of an operation with its duration."""
        logger.bind(operation=operation, duration_seconds=duration, **kwargs).info(
            f"{operation} completed in {duration:.1f}s"
        )

    def log_api_request(self, method: str, url: str, status_code: int) -> None:
        """Log a wiki request."""
        level = "WARNING" if status_code >= 400 else "DEBUG"
        # extras via bind(): keyword arguments would make loguru str.format the URL
        logger.bind(method=method, url=url, status_code=status_code).log(
            level, f"{method} {url} -> {status_code}"
        )

    def log_cache_operation(
        self, operation: str, key: str, hit: bool | None = None, **kwargs
    ) -> None:
        """Log cache operations."""
        logger.bind(operation=operation, key=key, cache_hit=hit, **kwargs).debug(
            f"Cache {operation}: {key}"
        )


# Global logging manager instance
_logging_manager: LoggingManager | None = None


def get_logging_manager() -> LoggingManager:
    """Get or create the global logging manager instance."""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager()
    return _logging_manager


def configure_logging(
    level: str | None = None,
    structured: bool = False,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure application logging from arguments or the environment.

    Args:
        level: Logging level, defaults to LOG_LEVEL or INFO
        structured: Enable structured console and JSON file logging
        enable_file_logging: Enable file logging, defaults to ENABLE_FILE_LOGGING
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    if enable_file_logging is None:
        enable_file_logging = os.getenv("ENABLE_FILE_LOGGING", "false").lower() == "true"

    get_logging_manager().configure_logging(
        level=level,
        structured_format=structured,
        enable_file_logging=enable_file_logging,
    )


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given component.

    Args:
        name: Component name (usually __name__)

    Returns:
        Configured logger instance
    """
    return get_logging_manager().get_logger(name)
