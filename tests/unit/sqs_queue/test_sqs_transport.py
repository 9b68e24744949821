"""
Module: test_sqs_transport.py
Description: Unit tests for the SQS transport.

Runs the real SqsTransport (event loop thread, semaphore, shutdown)
against a fake aioboto3 session. Covers client construction, pool
sizing, send outcomes and shutdown behaviour.
"""

import pytest
from botocore.exceptions import ClientError

from sqs_log_sink.exceptions import ConfigurationError, TransportClosedError
from sqs_log_sink.sqs_queue.sqs import SqsTransport, queue_endpoint, region_from_host

from conftest import QUEUE_URL, FakeSqsClient

TIMEOUT = 5


@pytest.fixture
def make_transport(fake_sqs, credentials):
    transports = []

    def _make(queue_url=QUEUE_URL, **kwargs):
        transport = SqsTransport(
            credentials,
            queue_url,
            session_factory=fake_sqs.session_factory,
            **kwargs
        )
        transports.append(transport)
        return transport

    yield _make

    for transport in transports:
        transport.shutdown(timeout=TIMEOUT)


class TestQueueUrlHelpers:
    """Test cases for queue URL parsing."""

    def test_queue_endpoint(self):
        endpoint, host = queue_endpoint("https://sqs.eu-west-1.amazonaws.com/123/logs")

        assert endpoint == "https://sqs.eu-west-1.amazonaws.com"
        assert host == "sqs.eu-west-1.amazonaws.com"

    def test_queue_endpoint_keeps_port(self):
        endpoint, host = queue_endpoint("http://localhost:4566/000000000000/logs")

        assert endpoint == "http://localhost:4566"
        assert host == "localhost"

    @pytest.mark.parametrize("url", ["", None, "not a url", "ftp://host/q", "https:///123/q"])
    def test_queue_endpoint_invalid(self, url):
        with pytest.raises(ConfigurationError):
            queue_endpoint(url)

    @pytest.mark.parametrize("host,region", [
        ("sqs.eu-west-1.amazonaws.com", "eu-west-1"),
        ("sqs.cn-north-1.amazonaws.com.cn", "cn-north-1"),
        ("us-west-2.queue.amazonaws.com", "us-west-2"),
        ("sqs.ap-south-1.api.aws", "ap-south-1"),
    ])
    def test_region_from_host(self, host, region):
        assert region_from_host(host) == region

    def test_region_fallbacks(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        assert region_from_host("queue.example") == "us-east-1"

        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-central-1")
        assert region_from_host("queue.example") == "eu-central-1"


class TestSqsTransport:
    """Test cases for the transport lifecycle and sends."""

    def test_invalid_queue_url(self, credentials):
        with pytest.raises(ConfigurationError):
            SqsTransport(credentials, "queue")

    def test_negative_pool_size(self, credentials):
        with pytest.raises(ConfigurationError):
            SqsTransport(credentials, QUEUE_URL, thread_pool=-1)

    def test_start_opens_client(self, make_transport, fake_sqs):
        transport = make_transport(thread_pool=4)

        transport.start()

        assert transport.is_open
        session = fake_sqs.sessions[0]
        assert session.kwargs["aws_access_key_id"] == "AKIDTEST"
        assert session.kwargs["aws_secret_access_key"] == "test-secret"
        assert session.kwargs["region_name"] == "us-east-1"
        assert session.service_name == "sqs"
        assert session.client_kwargs["endpoint_url"] == "https://sqs.us-east-1.amazonaws.com"
        assert session.client_kwargs["config"].max_pool_connections == 4

    def test_configured_region_wins(self, make_transport, fake_sqs):
        make_transport(region_name="eu-west-1").start()

        assert fake_sqs.sessions[0].kwargs["region_name"] == "eu-west-1"

    def test_send_async_success(self, make_transport, fake_sqs):
        transport = make_transport()
        transport.start()

        future = transport.send_async(QUEUE_URL, "hello")

        assert future.result(timeout=TIMEOUT) == "msg-1"
        assert fake_sqs.client.sent == [{"QueueUrl": QUEUE_URL, "MessageBody": "hello"}]

    def test_send_async_client_error(self, make_transport, fake_sqs):
        fake_sqs.client.error = ClientError(
            {"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue", "Message": "no queue"}},
            "SendMessage"
        )
        transport = make_transport()
        transport.start()

        future = transport.send_async(QUEUE_URL, "hello")

        assert isinstance(future.exception(timeout=TIMEOUT), ClientError)

    def test_fixed_pool_bounds_concurrency(self, make_transport, fake_sqs):
        fake_sqs.client.delay = 0.05
        transport = make_transport(thread_pool=1)
        transport.start()

        futures = [transport.send_async(QUEUE_URL, f"m{i}") for i in range(3)]
        for future in futures:
            future.result(timeout=TIMEOUT)

        assert fake_sqs.client.max_active == 1
        assert len(fake_sqs.client.sent) == 3

    def test_elastic_pool_runs_concurrently(self, make_transport, fake_sqs):
        fake_sqs.client.delay = 0.05
        transport = make_transport(thread_pool=0)
        transport.start()

        futures = [transport.send_async(QUEUE_URL, f"m{i}") for i in range(5)]
        for future in futures:
            future.result(timeout=TIMEOUT)

        assert fake_sqs.client.max_active > 1

    def test_shutdown_closes_client(self, make_transport, fake_sqs):
        transport = make_transport()
        transport.start()

        transport.shutdown(timeout=TIMEOUT)

        assert fake_sqs.client.closed
        assert not transport.is_open

    def test_shutdown_abandons_in_flight_sends(self, make_transport, fake_sqs):
        fake_sqs.client.delay = 30
        transport = make_transport()
        transport.start()
        future = transport.send_async(QUEUE_URL, "slow")

        transport.shutdown(timeout=TIMEOUT)

        assert future.cancelled()

    def test_shutdown_is_idempotent(self, make_transport):
        transport = make_transport()
        transport.start()

        transport.shutdown(timeout=TIMEOUT)
        transport.shutdown(timeout=TIMEOUT)

    def test_shutdown_before_start(self, make_transport):
        make_transport().shutdown(timeout=TIMEOUT)

    def test_send_after_shutdown(self, make_transport):
        transport = make_transport()
        transport.start()
        transport.shutdown(timeout=TIMEOUT)

        with pytest.raises(TransportClosedError):
            transport.send_async(QUEUE_URL, "late")

    def test_send_before_start(self, make_transport):
        with pytest.raises(TransportClosedError):
            make_transport().send_async(QUEUE_URL, "early")

    def test_start_failure_tears_down(self, credentials):
        def failing_session(**kwargs):
            raise RuntimeError("no session")

        transport = SqsTransport(credentials, QUEUE_URL, session_factory=failing_session)

        with pytest.raises(RuntimeError):
            transport.start()

        assert not transport.is_open
        with pytest.raises(TransportClosedError):
            transport.send_async(QUEUE_URL, "x")

    @pytest.mark.asyncio
    async def test_send_message_returns_message_id(self, credentials):
        transport = SqsTransport(credentials, QUEUE_URL)
        transport._client = FakeSqsClient()

        assert await transport._send_message(QUEUE_URL, "direct") == "msg-1"

    @pytest.mark.asyncio
    async def test_send_message_reraises_client_error(self, credentials):
        transport = SqsTransport(credentials, QUEUE_URL)
        transport._client = FakeSqsClient(error=ClientError(
            {"Error": {"Code": "Throttling", "Message": "slow down"}}, "SendMessage"
        ))

        with pytest.raises(ClientError):
            await transport._send_message(QUEUE_URL, "direct")
