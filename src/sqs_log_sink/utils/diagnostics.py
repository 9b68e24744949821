"""
Module: diagnostics.py
Description: Diagnostics channel for warnings and errors about the sink.

The sink never raises to the thread that logs. Everything that goes
wrong (oversized payloads, failed sends, start failures) ends up as a
Status on a diagnostics channel instead.

Key Components:
- Diagnostics: protocol the sink reports to
- LoggerDiagnostics: default channel, writes through structlog
- StatusBuffer: bounded in-memory channel, optionally forwarding

Dependencies: structlog (via utils.logger), threading, collections
"""

import threading
from collections import deque
from typing import List, Optional, Protocol

from ..models.status import Status
from .logger import get_logger

logger = get_logger(__name__)


class Diagnostics(Protocol):
    """Append-only sink for the sink's own warnings and errors."""

    def add_warn(self, message: str, source: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        ...

    def add_error(self, message: str, source: Optional[str] = None,
                  cause: Optional[BaseException] = None) -> None:
        ...


class LoggerDiagnostics:
    """
    Diagnostics channel writing each status as a structlog line.

    Example:
        >>> diagnostics = LoggerDiagnostics()
        >>> diagnostics.add_warn("Sink 'sqs' failed to send", source="sqs", cause=exc)
        {"source": "sqs", "error": "...", "error_type": "ClientError", "event": "Sink 'sqs' failed to send", ...}
    """

    def __init__(self, log=None):
        self._log = log if log is not None else logger

    def add_warn(self, message: str, source: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self._log.warning(message, **_context(source, cause))

    def add_error(self, message: str, source: Optional[str] = None,
                  cause: Optional[BaseException] = None) -> None:
        self._log.error(message, **_context(source, cause))


def _context(source: Optional[str], cause: Optional[BaseException]) -> dict:
    context = {}
    if source is not None:
        context["source"] = source
    if cause is not None:
        context["error"] = str(cause)
        context["error_type"] = type(cause).__name__
    return context


class StatusBuffer:
    """
    Bounded, thread-safe in-memory diagnostics channel.

    Keeps the most recent statuses (oldest dropped first) so an
    application or a test can inspect what the sink reported. When
    `forward_to` is given every status is also passed on to it.

    Attributes:
        capacity: Maximum number of statuses retained
    """

    def __init__(self, capacity: int = 150, forward_to: Optional[Diagnostics] = None):
        if capacity <= 0:
            raise ValueError("capacity must be a positive integer")

        self.capacity = capacity
        self._forward_to = forward_to
        self._statuses = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def add_warn(self, message: str, source: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self._add(Status(level="WARN", message=message, source=source, cause=cause))
        if self._forward_to is not None:
            self._forward_to.add_warn(message, source=source, cause=cause)

    def add_error(self, message: str, source: Optional[str] = None,
                  cause: Optional[BaseException] = None) -> None:
        self._add(Status(level="ERROR", message=message, source=source, cause=cause))
        if self._forward_to is not None:
            self._forward_to.add_error(message, source=source, cause=cause)

    def _add(self, status: Status) -> None:
        with self._lock:
            self._statuses.append(status)

    @property
    def statuses(self) -> List[Status]:
        with self._lock:
            return list(self._statuses)

    @property
    def warnings(self) -> List[Status]:
        return [s for s in self.statuses if s.level == "WARN"]

    @property
    def errors(self) -> List[Status]:
        return [s for s in self.statuses if s.level == "ERROR"]

    def clear(self) -> None:
        with self._lock:
            self._statuses.clear()
