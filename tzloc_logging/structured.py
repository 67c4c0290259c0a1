"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

Design:
- JSON output (compatible with log aggregators)
- Thread-safe (uses standard logging module)
- Type-safe events (LogEvent enum)

Example:
    >>> logger = StructuredLogger(component="loader")
    >>> logger.info(
    ...     event=LogEvent.DATASET_LOADED,
    ...     message="Loaded dataset",
    ...     metadata={'entry_count': 1200, 'region_count': 418}
    ... )

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456",
        "level": "INFO",
        "component": "loader",
        "event": "dataset.loaded",
        "message": "Loaded dataset",
        "metadata": {"entry_count": 1200, "region_count": 418}
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON structured logger wrapping Python's logging module.

    Attributes:
        component: Component name (e.g., "loader", "service")
        logger: Underlying Python logger instance
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component identifier (e.g., "loader")
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: tzloc.<component>)
        """
        self.component = component
        self.logger_name = logger_name or f"tzloc.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _log(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        if metadata:
            log_entry['metadata'] = metadata

        if exc_info:
            log_entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        log_level = getattr(logging, level)
        self.logger.log(log_level, json.dumps(log_entry, default=str))

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log DEBUG level message."""
        self._log('DEBUG', event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log INFO level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
        """
        self._log('INFO', event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log WARNING level message."""
        self._log('WARNING', event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
            exc_info: Exception instance, summarized into the JSON payload

        Example:
            >>> try:
            ...     DatasetLoader().load(blob)
            ... except DatasetError as e:
            ...     logger.error(
            ...         event=LogEvent.DATASET_REJECTED,
            ...         message="Dataset rejected",
            ...         exc_info=e,
            ...     )
            ...     raise
        """
        self._log('ERROR', event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        """Change logging level dynamically."""
        self.logger.setLevel(level)


class JSONFormatter(logging.Formatter):
    """
    Pass-through formatter: StructuredLogger already emits JSON strings.
    """

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(
    component: str,
    level: int = logging.INFO
) -> StructuredLogger:
    """
    Factory function to create configured StructuredLogger.

    Example:
        >>> logger = create_logger("loader", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)
