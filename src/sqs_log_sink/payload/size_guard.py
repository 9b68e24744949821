"""
Module: size_guard.py
Description: Rejects payloads larger than the configured message size.

Oversized payloads never reach the network: they are dropped with a
single diagnostic warning. Nothing is queued, split or retried.
"""

from typing import Optional

from ..exceptions import OversizePayload
from ..utils.diagnostics import Diagnostics

# Characters of an oversized payload quoted in the warning
PREVIEW_LENGTH = 500


class SizeGuard:
    """
    Size check applied to every encoded payload.

    Attributes:
        max_payload_bytes: Largest accepted payload, in bytes
        diagnostics: Channel receiving rejection warnings
        source: Sink name reported with each warning
    """

    def __init__(self, max_payload_bytes: int, diagnostics: Diagnostics,
                 source: Optional[str] = None):
        if max_payload_bytes <= 0:
            raise ValueError("max_payload_bytes must be a positive integer")

        self.max_payload_bytes = max_payload_bytes
        self.diagnostics = diagnostics
        self.source = source

    def check(self, payload: bytes, text: str) -> bool:
        """
        Accept or reject a payload.

        Args:
            payload: Encoded payload bytes
            text: Decoded payload, quoted in the warning

        Returns:
            True if the payload may be sent, False if it was dropped
        """
        if len(payload) <= self.max_payload_bytes:
            return True

        self.diagnostics.add_warn(
            "Logging event '%s' exceeds the maximum size of %dkB"
            % (text[:PREVIEW_LENGTH], self.max_payload_bytes // 1024),
            source=self.source,
            cause=OversizePayload(len(payload), self.max_payload_bytes)
        )
        return False
