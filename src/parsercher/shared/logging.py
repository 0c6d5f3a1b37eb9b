"""Correlation-aware logging for the parsing layers.

Every record carries the emitting component and the caller's correlation ID
in its ``extra`` mapping. The library never installs handlers.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Logger that stamps component and correlation ID onto each record."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for request tracking
            component: Component name, defaults to the last dotted part of name
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def _log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]],
        exc_info: bool
    ) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._get_extra(extra), exc_info=exc_info)

    def debug(
        self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False
    ) -> None:
        self._log(logging.DEBUG, message, extra, exc_info)

    def info(
        self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False
    ) -> None:
        self._log(logging.INFO, message, extra, exc_info)

    def warning(
        self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False
    ) -> None:
        self._log(logging.WARNING, message, extra, exc_info)

    def error(
        self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = True
    ) -> None:
        self._log(logging.ERROR, message, extra, exc_info)

    def bind(self, component: str) -> "CorrelationLogger":
        """Return a logger for a sub-component sharing this correlation ID."""
        return CorrelationLogger(self.logger.name, self.correlation_id, component)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)
