"""
Package: sqs_log_sink
Description: Non-blocking logging sink that forwards records to Amazon SQS.

Log events are encoded to bytes, checked against a size limit and sent
asynchronously to an SQS queue. Delivery outcomes are reported on a
diagnostics channel and never raised to the logging caller.
"""

from .config.settings import SinkSettings
from .sink import SinkState, SqsLogSink

__version__ = "0.1.0"

__all__ = [
    "SinkSettings",
    "SinkState",
    "SqsLogSink",
    "__version__",
]
