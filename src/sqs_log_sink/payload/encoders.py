"""
Module: encoders.py
Description: Encoders turning log records into message bytes.

An encoder is bound once to a byte sink with `init()` and then writes
exactly one self-contained payload per `encode()` call. The sink does
not care how the bytes are produced; these two encoders cover plain
formatted lines and JSON documents.

Key Components:
- Encoder / ByteSink: the two protocols the sink is wired with
- FormatterEncoder: logging.Formatter output as UTF-8
- JsonEncoder: record rendered as a JSON object by structlog

Dependencies: structlog, logging, datetime
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import structlog

from ..exceptions import EncodingIOError

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "taskName"
}


class ByteSink(Protocol):
    """Destination for encoded payloads."""

    def write(self, data: bytes) -> None:
        ...

    def write_byte(self, b: int) -> None:
        ...


class Encoder(Protocol):
    """Serializes one log event into the byte sink given to init()."""

    def init(self, byte_sink: ByteSink) -> None:
        ...

    def encode(self, event: Any) -> None:
        ...


class _RecordEncoder:
    """Holds the byte sink and writes one payload per record."""

    def __init__(self):
        self._sink: Optional[ByteSink] = None

    def init(self, byte_sink: ByteSink) -> None:
        self._sink = byte_sink

    def encode(self, event: logging.LogRecord) -> None:
        if self._sink is None:
            raise EncodingIOError(f"{type(self).__name__} used before init()")
        self._sink.write(self.render(event).encode("utf-8"))

    def render(self, record: logging.LogRecord) -> str:
        raise NotImplementedError


class FormatterEncoder(_RecordEncoder):
    """
    Encoder writing `formatter.format(record)` as UTF-8.

    Anything with a `format(record)` method will do, including a
    logging.Handler (which applies whatever formatter it was given).

    Args:
        formatter: Formatter to use, logging.Formatter() when None
    """

    def __init__(self, formatter=None):
        super().__init__()
        self.formatter = formatter if formatter is not None else logging.Formatter()

    def render(self, record: logging.LogRecord) -> str:
        return self.formatter.format(record)


class JsonEncoder(_RecordEncoder):
    """
    Encoder writing each record as one JSON object.

    Keys: timestamp (ISO 8601, UTC), level, logger, event, plus
    exception/stack when present and every field passed via `extra`.
    """

    def __init__(self):
        super().__init__()
        self._renderer = structlog.processors.JSONRenderer(default=str)
        self._formatter = logging.Formatter()

    def render(self, record: logging.LogRecord) -> str:
        return self._renderer(None, record.levelname.lower(), self.event_dict(record))

    def event_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        event_dict = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            event_dict["exception"] = self._formatter.formatException(record.exc_info)
        elif record.exc_text:
            event_dict["exception"] = record.exc_text
        if record.stack_info:
            event_dict["stack"] = self._formatter.formatStack(record.stack_info)

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in event_dict:
                event_dict[key] = value
        return event_dict
