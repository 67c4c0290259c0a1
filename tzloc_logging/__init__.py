"""
Structured Logging for tzloc
============================

Bounded Context: Observability

JSON-structured logging with typed events, shared by the dataset loader,
the packer and the locator service.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from tzloc_logging import create_logger, LogEvent
    >>> logger = create_logger("service")
    >>> logger.info(
    ...     event=LogEvent.LOCATOR_READY,
    ...     message="Locator ready",
    ...     metadata={'entry_count': 1200}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, JSONFormatter, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'JSONFormatter',
    'create_logger',
]
