"""Structured logging utilities for basket evaluations."""
import json
import logging
import uuid
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Iterator, Optional


class StructuredLogger:
    """JSON logger that stamps every entry with a correlation ID and basket ID."""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)
        self._correlation_id: Optional[str] = None
        self._basket_id: Optional[str] = None

    @property
    def correlation_id(self) -> Optional[str]:
        return self._correlation_id

    def generate_correlation_id(self) -> str:
        """Generate new correlation ID."""
        return f"BONUS_{uuid.uuid4().hex[:12]}"

    @contextmanager
    def evaluation(
        self, basket_id: str | None = None, correlation_id: str | None = None
    ) -> Iterator[str]:
        """Scope log entries to one basket evaluation."""
        previous = (self._correlation_id, self._basket_id)
        self._correlation_id = correlation_id or self.generate_correlation_id()
        self._basket_id = basket_id
        try:
            yield self._correlation_id
        finally:
            self._correlation_id, self._basket_id = previous

    def _format_message(self, level: str, message: str, **kwargs: Any) -> dict:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level,
            "message": message,
            "correlation_id": self._correlation_id or "none",
        }
        if self._basket_id:
            log_entry["basket_id"] = self._basket_id

        if kwargs:
            log_entry["context"] = kwargs

        return log_entry

    def _emit(self, level: int, name: str, message: str, **kwargs: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        entry = self._format_message(name, message, **kwargs)
        self.logger.log(level, json.dumps(entry, default=str))

    def info(self, message: str, **kwargs):
        self._emit(logging.INFO, "INFO", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._emit(logging.WARNING, "WARNING", message, **kwargs)

    def error(self, message: str, **kwargs):
        self._emit(logging.ERROR, "ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs):
        self._emit(logging.DEBUG, "DEBUG", message, **kwargs)


def get_structured_logger(name: str) -> StructuredLogger:
    """Get or create structured logger."""
    return StructuredLogger(name)
