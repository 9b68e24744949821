"""
Module: conftest.py
Description: Shared pytest fixtures for the SQS log sink tests.

Provides settings, a recording diagnostics channel, an in-memory
transport for lifecycle tests, and a fake aioboto3 session so the real
SqsTransport (event loop thread included) runs without network access.
"""

import asyncio
import logging
from concurrent.futures import Future

import pytest

from sqs_log_sink.auth.credentials import CredentialResolver
from sqs_log_sink.config.settings import SinkSettings
from sqs_log_sink.models.credentials import CredentialSet
from sqs_log_sink.sink import SqsLogSink
from sqs_log_sink.utils.diagnostics import StatusBuffer

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/app-logs"


class FakeTransport:
    """In-memory stand-in for SqsTransport."""

    def __init__(self, credentials, queue_url, thread_pool=0, region_name=None, log=None):
        self.credentials = credentials
        self.log = log
        self.queue_url = queue_url
        self.thread_pool = thread_pool
        self.region_name = region_name
        self.sent = []
        self.started = False
        self.shutdown_calls = 0
        self.fail_with = None
        self.start_error = None

    def start(self):
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    def send_async(self, queue_url, body):
        self.sent.append((queue_url, body))
        future = Future()
        if self.fail_with is not None:
            future.set_exception(self.fail_with)
        else:
            future.set_result(f"msg-{len(self.sent)}")
        return future

    def shutdown(self, timeout=5.0):
        self.shutdown_calls += 1

    @property
    def is_live(self):
        return self.started and self.shutdown_calls == 0


class TransportFactory:
    """Creates FakeTransports and remembers them."""

    def __init__(self):
        self.created = []
        self.fail_with = None
        self.start_error = None

    def __call__(self, **kwargs):
        transport = FakeTransport(**kwargs)
        transport.fail_with = self.fail_with
        transport.start_error = self.start_error
        self.created.append(transport)
        return transport

    @property
    def live(self):
        return [t for t in self.created if t.is_live]

    @property
    def sent(self):
        return [body for t in self.created for _, body in t.sent]


class BytesEncoder:
    """Encoder writing the event (already bytes) straight to the sink."""

    def __init__(self):
        self.sink = None

    def init(self, byte_sink):
        self.sink = byte_sink

    def encode(self, event):
        self.sink.write(event)


class FakeSqsClient:
    """Async SQS client double recording send_message calls."""

    def __init__(self, error=None, delay=0.0):
        self.error = error
        self.delay = delay
        self.sent = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def send_message(self, QueueUrl, MessageBody):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            self.sent.append({"QueueUrl": QueueUrl, "MessageBody": MessageBody})
            return {"MessageId": f"msg-{len(self.sent)}"}
        finally:
            self.active -= 1


class _FakeClientContext:
    def __init__(self, client):
        self._client = client

    async def __aenter__(self):
        return self._client

    async def __aexit__(self, exc_type, exc, tb):
        self._client.closed = True
        return False


class FakeSession:
    """aioboto3.Session double handing out a FakeSqsClient."""

    def __init__(self, client, **kwargs):
        self.kwargs = kwargs
        self.service_name = None
        self.client_kwargs = None
        self._client = client

    def client(self, service_name, **kwargs):
        self.service_name = service_name
        self.client_kwargs = kwargs
        return _FakeClientContext(self._client)


class FakeSqs:
    """Bundle of a fake client and the session factory producing it."""

    def __init__(self):
        self.client = FakeSqsClient()
        self.sessions = []

    def session_factory(self, **kwargs):
        session = FakeSession(self.client, **kwargs)
        self.sessions.append(session)
        return session


@pytest.fixture
def diagnostics():
    """Provide an in-memory diagnostics channel."""
    return StatusBuffer()


@pytest.fixture
def sink_settings():
    """
    Provide sink settings for tests.

    Disables .env loading for predictable tests.
    """
    return SinkSettings(_env_file=None, name="test-sink", queue_url=QUEUE_URL)


@pytest.fixture
def credentials():
    return CredentialSet(access_key="AKIDTEST", secret_key="test-secret")


@pytest.fixture
def static_resolver(credentials):
    """Credential resolver that always yields the test credentials."""
    return CredentialResolver([("static", lambda: credentials)])


@pytest.fixture
def transport_factory():
    return TransportFactory()


@pytest.fixture
def make_sink(sink_settings, diagnostics, static_resolver, transport_factory):
    """
    Provide a factory for sinks wired to fake collaborators.

    Sinks created through it are stopped at teardown.
    """
    sinks = []

    def _make(encoder=None, settings=None, **overrides):
        sink = SqsLogSink(
            settings or sink_settings,
            encoder=encoder if encoder is not None else BytesEncoder(),
            diagnostics=diagnostics,
            credential_resolver=overrides.pop("credential_resolver", static_resolver),
            transport_factory=overrides.pop("transport_factory", transport_factory)
        )
        sinks.append(sink)
        return sink

    yield _make

    for sink in sinks:
        sink.stop()


@pytest.fixture
def fake_sqs():
    """Provide a fake aioboto3 session factory and its client."""
    return FakeSqs()


@pytest.fixture
def log_record():
    return logging.LogRecord(
        name="app.orders",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="order %s created",
        args=("ord_123",),
        exc_info=None
    )
