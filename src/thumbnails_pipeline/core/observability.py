"""Log context, timing and deadline helpers for derivative processing."""

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .logging_config import get_logger


@dataclass(frozen=True)
class LogContext:
    """
    Fields attached to every log line of one source object's processing.

    The correlation id ties the fetch line to the per-preset lines that
    follow it, which matters once presets run on worker threads.
    """

    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        return replace(self, operation=operation, metadata=dict(self.metadata))

    def with_metadata(self, **kwargs) -> "LogContext":
        return replace(self, metadata={**self.metadata, **kwargs})


def render_message(message: str, context: Optional[LogContext] = None, **fields) -> str:
    """Render ``[operation] [id] message (k=v, ...)``."""
    prefix = ""
    if context is not None:
        prefix = f"[{context.correlation_id}] "
        if context.operation:
            prefix = f"[{context.operation}] {prefix}"
        fields = {**context.metadata, **fields}
    if fields:
        message = f"{message} ({', '.join(f'{k}={v}' for k, v in fields.items())})"
    return prefix + message


class StructuredLogger:
    """Logger that accepts a LogContext and keyword fields on every call."""

    def __init__(self, name: str = "pipeline", logger: Optional[logging.Logger] = None):
        self._logger = logger or get_logger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, context: Optional[LogContext], fields: Dict[str, Any]):
        if self._logger.isEnabledFor(level):
            self._logger.log(level, render_message(message, context, **fields))

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.DEBUG, message, context, kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.INFO, message, context, kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.WARNING, message, context, kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(logging.ERROR, message, context, kwargs)


class Stopwatch:
    """Elapsed wall time since construction."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000


class Deadline:
    """
    Point in time after which no new work should be started.

    Built from the host's remaining-time budget. ``Deadline.never()``
    never expires.
    """

    def __init__(self, expires_at: Optional[float] = None, clock=time.monotonic):
        self._expires_at = expires_at
        self._clock = clock

    @classmethod
    def never(cls) -> "Deadline":
        return cls(None)

    @classmethod
    def from_remaining_ms(cls, remaining_ms: float, margin_ms: float = 0, clock=time.monotonic) -> "Deadline":
        return cls(clock() + max(remaining_ms - margin_ms, 0) / 1000.0, clock=clock)

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(self._expires_at - self._clock(), 0.0)
