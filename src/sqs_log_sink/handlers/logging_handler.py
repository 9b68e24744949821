"""
Module: logging_handler.py
Description: logging.Handler forwarding records to an SqsLogSink.

The handler is a thin bridge: the sink owns the lifecycle, the handler
only calls start() on construction, append() per record and stop() on
close. Keyword arguments become SinkSettings, which makes the handler
usable from logging.config.dictConfig.

Key Components:
- SqsLogHandler: the logging.Handler bridge
- SdkRecordFilter: keeps the AWS SDK's own records out of the queue

Dependencies: logging
"""

import logging
from typing import Optional, Sequence

from ..config.settings import SinkSettings
from ..payload.encoders import Encoder, FormatterEncoder
from ..sink import SqsLogSink
from ..utils.diagnostics import Diagnostics

# Loggers used by the transport stack; forwarding them would feed back into itself
SDK_LOGGERS = ("botocore", "aiobotocore", "aioboto3", "boto3", "urllib3", "aiohttp", "sqs_log_sink")


class SdkRecordFilter(logging.Filter):
    """Drops records emitted by the given logger name prefixes."""

    def __init__(self, prefixes: Sequence[str] = SDK_LOGGERS):
        super().__init__()
        self.prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        return not any(name == p or name.startswith(p + ".") for p in self.prefixes)


class SqsLogHandler(logging.Handler):
    """
    Logging handler sending each record to SQS as one message.

    Args:
        level: Handler level
        encoder: Encoder for records, defaults to the handler's formatter
        diagnostics: Diagnostics channel for the sink
        settings: Sink settings; keyword arguments are used when None
        autostart: Start the sink immediately
        **settings_kwargs: SinkSettings fields (queue_url, thread_pool, ...)

    Example:
        >>> handler = SqsLogHandler(queue_url="https://sqs.us-east-1.amazonaws.com/123/logs")
        >>> handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        >>> logging.getLogger("app").addHandler(handler)
    """

    def __init__(
        self,
        level: int = logging.NOTSET,
        encoder: Optional[Encoder] = None,
        diagnostics: Optional[Diagnostics] = None,
        settings: Optional[SinkSettings] = None,
        autostart: bool = True,
        sink: Optional[SqsLogSink] = None,
        **settings_kwargs
    ):
        super().__init__(level)
        self.addFilter(SdkRecordFilter())

        if sink is None:
            sink = SqsLogSink(
                settings if settings is not None else SinkSettings(**settings_kwargs),
                encoder=encoder if encoder is not None else FormatterEncoder(self),
                diagnostics=diagnostics
            )
        self.sink = sink

        if autostart:
            self.sink.start()

    def emit(self, record: logging.LogRecord) -> None:
        self.sink.append(record)

    def close(self) -> None:
        try:
            self.sink.stop()
        finally:
            super().close()
