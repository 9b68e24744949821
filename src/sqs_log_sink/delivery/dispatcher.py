"""
Module: delivery/dispatcher.py
Description: Fire-and-forget submission of log messages to SQS.

The dispatcher hands a message to the live transport and returns at
once. The outcome arrives later on the transport's event loop thread,
where a completion callback reports failures to diagnostics. Nothing
is retried and nothing is raised back to the logging thread.

Key Components:
- AsyncDispatcher: send() plus the completion callback
- SendOutcome: two-way result built from the transport future

Dependencies: concurrent.futures, functools
"""

from concurrent.futures import Future
from functools import partial

from ..models.outcome import SendOutcome
from ..utils.diagnostics import Diagnostics
from ..utils.guarded import GuardedHandle
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AsyncDispatcher:
    """
    Non-blocking sender for encoded log messages.

    The transport is read from the sink's guarded handle without taking
    its lock. A concurrent stop() may clear the handle at any moment,
    in which case the message is dropped with a warning.

    Attributes:
        handle: Guarded reference to the live transport
        diagnostics: Channel receiving delivery failures
        name: Sink name quoted in warnings
        log: structlog logger for delivery debug output
    """

    def __init__(self, handle: GuardedHandle, diagnostics: Diagnostics, name: str, log=None):
        self.handle = handle
        self.diagnostics = diagnostics
        self.name = name
        self.log = log if log is not None else logger

    def send(self, message: str, queue_url: str) -> None:
        """
        Submit a message for asynchronous delivery.

        Args:
            message: Message body
            queue_url: Destination queue
        """
        transport = self.handle.get()
        if transport is None:
            self.diagnostics.add_warn(
                "Sink '%s' is stopped, dropping logging event '%s'" % (self.name, message),
                source=self.name
            )
            return

        try:
            future = transport.send_async(queue_url, message)
        except Exception as e:
            self._on_outcome(message, SendOutcome.failure(e))
            return

        future.add_done_callback(partial(self._on_complete, message))

    def _on_complete(self, message: str, future: Future) -> None:
        self._on_outcome(message, SendOutcome.from_future(future))

    def _on_outcome(self, message: str, outcome: SendOutcome) -> None:
        if outcome.delivered:
            self.log.debug("Logging event sent", sink=self.name, message_id=outcome.message_id)
            return

        if outcome.abandoned:
            self.diagnostics.add_warn(
                "Sink '%s' abandoned logging event '%s' during shutdown" % (self.name, message),
                source=self.name,
                cause=outcome.cause
            )
            return

        self.diagnostics.add_warn(
            "Sink '%s' failed to send logging event '%s' to SQS" % (self.name, message),
            source=self.name,
            cause=outcome.cause
        )
