"""
Module: payload
Description: Package initialization for payload handling.

This package turns log events into queue messages:
- encoders: Encoder/ByteSink protocols, FormatterEncoder, JsonEncoder
- adapter: byte sink feeding the size guard and dispatcher
- size_guard: drops payloads above the size limit
"""

from .encoders import ByteSink, Encoder, FormatterEncoder, JsonEncoder

__all__ = [
    "ByteSink",
    "Encoder",
    "FormatterEncoder",
    "JsonEncoder",
]
