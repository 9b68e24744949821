"""
Module: exceptions.py
Description: Error taxonomy for the SQS log sink.

None of these errors ever reach the thread that produced a log event.
Start-up errors disable the sink, per-message errors are reported on the
diagnostics channel and the message is dropped.

Key Components:
- ConfigurationError: missing encoder, malformed queue URL
- CredentialResolutionError / NoCredentialsAvailable: credential chain exhausted
- EncodingIOError: encoder I/O failure, disables the sink
- OversizePayload: payload above the configured size limit
- DeliveryFailure: asynchronous send to SQS failed
"""

from typing import Optional


class SinkError(Exception):
    """Base class for all sink errors."""


class ConfigurationError(SinkError):
    """Raised when the sink cannot start because of its settings."""


class CredentialResolutionError(SinkError):
    """Raised when credentials for the queue service cannot be resolved."""


class NoCredentialsAvailable(CredentialResolutionError):
    """Raised when every credential source was tried without success."""

    def __init__(self, tried: Optional[list] = None):
        self.tried = list(tried or [])
        super().__init__(
            "Unable to load credentials from any source: "
            + (", ".join(self.tried) or "no sources configured")
        )


class EncodingIOError(SinkError, OSError):
    """Raised by the byte sink when the encoder output cannot be handled."""


class SingleByteWriteUnsupported(EncodingIOError):
    """Raised when an encoder writes a single byte instead of a record."""


class OversizePayload(SinkError):
    """Describes a payload rejected by the size guard."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"payload of {size} bytes exceeds limit of {limit} bytes")


class DeliveryFailure(SinkError):
    """Raised when a message could not be handed to the queue service."""


class TransportClosedError(DeliveryFailure):
    """Raised when sending through a transport that has been shut down."""
