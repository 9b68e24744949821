"""
Module: adapter.py
Description: Byte sink handed to the encoder at sink start.

Each write() is one complete message: it is decoded, size-checked and
dispatched immediately. Nothing is buffered between calls.
"""

from ..delivery.dispatcher import AsyncDispatcher
from ..exceptions import SingleByteWriteUnsupported
from .size_guard import SizeGuard


class QueueOutputAdapter:
    """
    Byte sink forwarding each encoded payload to the queue.

    Args:
        queue_url: Queue the messages are sent to
        size_guard: Check applied before dispatch
        dispatcher: Asynchronous sender
    """

    def __init__(self, queue_url: str, size_guard: SizeGuard, dispatcher: AsyncDispatcher):
        self.queue_url = queue_url
        self.size_guard = size_guard
        self.dispatcher = dispatcher

    def write(self, data: bytes) -> None:
        if not data:
            return

        message = bytes(data).decode("utf-8", errors="replace")
        if not self.size_guard.check(data, message):
            return

        self.dispatcher.send(message, self.queue_url)

    def write_byte(self, b: int) -> None:
        # A lone byte is never a whole record; encoders must write payloads
        raise SingleByteWriteUnsupported(
            "single-byte writes are not supported, encoders must write whole records"
        )
