"""
Module: sink.py
Description: Lifecycle controller of the SQS log sink.

SqsLogSink owns the state machine and the live transport handle. The
host logging framework calls start(), append() and stop(); none of
them ever raises. Failures end either in a state change (the sink
disables itself) or in a diagnostic status.

States:
    UNINITIALIZED -> STARTING -> STARTED -> STOPPING -> STOPPED
    any failed start or encoder I/O error -> FAILED

Key Components:
- SinkState: lifecycle states
- SqsLogSink: start(), stop(), append()

Dependencies: enum, typing
"""

from enum import Enum
from typing import Any, Callable, Optional

from .auth.credentials import CredentialResolver, default_chain
from .config.settings import SinkSettings
from .delivery.dispatcher import AsyncDispatcher
from .exceptions import ConfigurationError
from .payload.adapter import QueueOutputAdapter
from .payload.encoders import Encoder
from .payload.size_guard import SizeGuard
from .sqs_queue.sqs import SqsTransport
from .utils.diagnostics import Diagnostics, LoggerDiagnostics
from .utils.guarded import GuardedHandle
from .utils.logger import get_logger

logger = get_logger(__name__)


class SinkState(str, Enum):
    """Lifecycle state of a sink."""

    UNINITIALIZED = "uninitialized"
    STARTING = "starting"
    STARTED = "started"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


class SqsLogSink:
    """
    Log sink forwarding encoded events to an SQS queue.

    Settings and the encoder may be changed until start(); the sink then
    works from a snapshot, so later changes only apply after a restart.
    Appends from many threads run in parallel once started and never
    block on the network.

    Attributes:
        settings: Mutable sink settings
        encoder: Encoder turning events into payload bytes, bound at start()
        diagnostics: Channel receiving warnings and errors
        log: The sink's own structlog logger, filtered at the started
            settings' log_level

    Example:
        >>> sink = SqsLogSink(SinkSettings(queue_url=url), encoder=JsonEncoder())
        >>> sink.start()
        >>> sink.append(record)
        >>> sink.stop()
    """

    def __init__(
        self,
        settings: Optional[SinkSettings] = None,
        encoder: Optional[Encoder] = None,
        diagnostics: Optional[Diagnostics] = None,
        *,
        credential_resolver: Optional[CredentialResolver] = None,
        transport_factory: Callable[..., Any] = SqsTransport
    ):
        self.settings = settings if settings is not None else SinkSettings()
        self.encoder = encoder
        self.diagnostics = diagnostics if diagnostics is not None else LoggerDiagnostics()

        self._credential_resolver = credential_resolver
        self._transport_factory = transport_factory
        self._transport: GuardedHandle = GuardedHandle()
        self._state = SinkState.UNINITIALIZED
        self._active: Optional[SinkSettings] = None
        self._encoder: Optional[Encoder] = None
        self.log = logger

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def is_started(self) -> bool:
        return self._state is SinkState.STARTED

    @property
    def active_settings(self) -> Optional[SinkSettings]:
        """Snapshot of the settings the running sink was started with."""
        return self._active

    def start(self) -> None:
        """
        Resolve credentials, open the transport and bind the encoder.

        Any pre-existing transport is shut down first, so start() also
        restarts a running sink. On failure a single diagnostic error is
        reported and the sink stays unusable.
        """
        encoder = self.encoder
        if encoder is None:
            with self._transport.hold():
                self._close()
                self._encoder = None
                self._active = None
                self._state = SinkState.FAILED
            self.diagnostics.add_error(
                'No encoder set for the sink named "%s".' % self.name,
                source=self.name
            )
            return

        with self._transport.hold():
            try:
                self._state = SinkState.STARTING
                self._close()
                self._encoder = None

                settings = self.settings.model_copy()
                if not settings.queue_url:
                    raise ConfigurationError('No queue_url set for the sink named "%s".' % settings.name)

                resolver = self._credential_resolver or default_chain(settings)
                credentials = resolver.resolve()

                transport = self._transport_factory(
                    credentials=credentials,
                    queue_url=settings.queue_url,
                    thread_pool=settings.thread_pool,
                    region_name=settings.region_name,
                    log=get_logger(SqsTransport.__module__, settings.log_level)
                )
                self._transport.set(transport)
                transport.start()

                size_guard = SizeGuard(settings.max_payload_bytes, self.diagnostics, settings.name)
                dispatcher = AsyncDispatcher(
                    self._transport,
                    self.diagnostics,
                    settings.name,
                    log=get_logger(AsyncDispatcher.__module__, settings.log_level)
                )
                encoder.init(QueueOutputAdapter(settings.queue_url, size_guard, dispatcher))

                self.log = get_logger(__name__, settings.log_level)
                self._encoder = encoder
                self._active = settings
                self._state = SinkState.STARTED
            except Exception as e:
                self._close()
                self._active = None
                self._state = SinkState.FAILED
                self.diagnostics.add_error(
                    "%s start failure" % type(self).__name__,
                    source=self.name,
                    cause=e
                )
                return

        self.log.info(
            "SQS log sink started",
            sink=settings.name,
            queue_url=settings.queue_url,
            credentials_source=credentials.source
        )

    def stop(self) -> None:
        """Shut the transport down. Idempotent, safe before start()."""
        with self._transport.hold():
            was_running = self._transport.is_set
            self._state = SinkState.STOPPING
            self._close()
            self._state = SinkState.STOPPED

        if was_running:
            self.log.info("SQS log sink stopped", sink=self.name)

    def append(self, event: Any) -> None:
        """
        Encode an event and hand it to the dispatcher.

        No-op unless the sink is started. An I/O error from the encoder
        shuts the transport down and disables the sink; any other
        encoder error drops the event.
        """
        encoder = self._encoder
        transport = self._transport.get()
        if self._state is not SinkState.STARTED or encoder is None:
            return

        try:
            encoder.encode(event)
        except OSError as e:
            with self._transport.hold():
                # A concurrent stop() or restart already replaced this run
                if self._state is not SinkState.STARTED or self._transport.get() is not transport:
                    return
                self._state = SinkState.FAILED
                self._close()
            self.diagnostics.add_error("IO failure in sink", source=self.name, cause=e)
        except Exception as e:
            self.diagnostics.add_warn(
                "Sink '%s' failed to encode logging event" % self.name,
                source=self.name,
                cause=e
            )

    def _close(self) -> None:
        # Caller holds the transport lock
        transport = self._transport.take()
        if transport is None:
            return

        timeout = (self._active or self.settings).shutdown_timeout
        try:
            transport.shutdown(timeout=timeout)
        except Exception as e:
            self.diagnostics.add_warn(
                "Sink '%s' failed to shut down its transport" % self.name,
                source=self.name,
                cause=e
            )

    def __enter__(self) -> "SqsLogSink":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"<SqsLogSink name={self.name!r} state={self._state.value}>"
