"""
Module: sqs.py
Description: Asynchronous SQS transport used by the sink.

The transport owns a private asyncio event loop running on a daemon
thread and a long-lived aioboto3 SQS client opened on that loop.
Callers on any thread submit messages with send_async() and get a
concurrent.futures.Future back immediately; the send itself runs on
the transport's loop.

Key Components:
- SqsTransport: start(), send_async(), shutdown()
- Worker pool sizing: a positive thread_pool bounds in-flight sends,
  0 leaves them elastic
- queue_endpoint() / region_from_host(): queue URL helpers

Dependencies: aioboto3, botocore, asyncio, threading
"""

import asyncio
import os
import re
import threading
from concurrent.futures import Future
from contextlib import AsyncExitStack
from typing import Optional, Tuple
from urllib.parse import urlparse

from aioboto3 import Session
from botocore.config import Config
from botocore.exceptions import ClientError

from ..exceptions import ConfigurationError, TransportClosedError
from ..models.credentials import CredentialSet
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_REGION = "us-east-1"

_REGION_PATTERNS = (
    re.compile(r"^sqs[.-]([a-z0-9-]+)\.amazonaws\.com(\.cn)?$"),
    re.compile(r"^([a-z0-9-]+)\.queue\.amazonaws\.com(\.cn)?$"),
    re.compile(r"^sqs\.([a-z0-9-]+)\.api\.aws$"),
)


def queue_endpoint(queue_url: str) -> Tuple[str, str]:
    """
    Split a queue URL into the service endpoint and its host.

    Args:
        queue_url: Full queue URL, e.g. https://sqs.eu-west-1.amazonaws.com/123/logs

    Returns:
        (endpoint_url, host), e.g. ('https://sqs.eu-west-1.amazonaws.com',
        'sqs.eu-west-1.amazonaws.com')

    Raises:
        ConfigurationError: If the URL is missing or malformed
    """
    if not queue_url or not isinstance(queue_url, str):
        raise ConfigurationError("queue_url must be a non-empty string")

    parsed = urlparse(queue_url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ConfigurationError(f"queue_url is not a valid HTTP/HTTPS URL: {queue_url!r}")

    return f"{parsed.scheme}://{parsed.netloc}", parsed.hostname


def region_from_host(host: str) -> str:
    """
    Derive the AWS region from an SQS host name.

    Falls back to AWS_REGION, AWS_DEFAULT_REGION, then us-east-1 for
    hosts that carry no region (local emulators, custom domains).
    """
    for pattern in _REGION_PATTERNS:
        match = pattern.match(host.lower())
        if match:
            return match.group(1)
    return os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION


class SqsTransport:
    """
    SQS client running on its own event loop thread.

    Attributes:
        queue_url: Queue the transport was created for
        endpoint_url: Scheme and host of the queue URL
        region_name: Region used for request signing
        thread_pool: Maximum concurrent sends, 0 for unbounded

    Example:
        >>> transport = SqsTransport(credentials, queue_url, thread_pool=4)
        >>> transport.start()
        >>> future = transport.send_async(queue_url, "hello")
        >>> transport.shutdown()
    """

    def __init__(
        self,
        credentials: CredentialSet,
        queue_url: str,
        thread_pool: int = 0,
        region_name: Optional[str] = None,
        session_factory=Session,
        open_timeout: float = 10.0,
        log=None
    ):
        if thread_pool < 0:
            raise ConfigurationError("thread_pool must be zero or a positive integer")

        self.queue_url = queue_url
        self.endpoint_url, host = queue_endpoint(queue_url)
        self.region_name = region_name or region_from_host(host)
        self.thread_pool = thread_pool
        self.open_timeout = open_timeout

        self._credentials = credentials
        self._session_factory = session_factory
        self._log = log if log is not None else logger
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._exit_stack: Optional[AsyncExitStack] = None
        self._client = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._closed = False
        self._state_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._closed

    def start(self) -> None:
        """
        Start the event loop thread and open the SQS client.

        Raises:
            Exception: Whatever opening the client raised; the loop
                thread is torn down before re-raising
        """
        loop = asyncio.new_event_loop()
        thread = threading.Thread(
            target=self._run_loop,
            args=(loop,),
            name=f"sqs-log-sink-{id(self):x}",
            daemon=True
        )
        self._loop, self._thread = loop, thread
        thread.start()

        try:
            asyncio.run_coroutine_threadsafe(self._open(), loop).result(timeout=self.open_timeout)
        except Exception:
            self.shutdown(timeout=self.open_timeout)
            raise

        self._log.info(
            "SQS transport started",
            endpoint_url=self.endpoint_url,
            region_name=self.region_name,
            thread_pool=self.thread_pool or "elastic"
        )

    def send_async(self, queue_url: str, body: str) -> Future:
        """
        Submit one message without waiting for it.

        Args:
            queue_url: Destination queue
            body: Message body

        Returns:
            Future resolving to the SQS message id, or raising the
            send error

        Raises:
            TransportClosedError: If the transport is not running
        """
        loop = self._loop
        if self._closed or loop is None or loop.is_closed():
            raise TransportClosedError("SQS transport is not running")

        coro = self._send(queue_url, body)
        try:
            return asyncio.run_coroutine_threadsafe(coro, loop)
        except RuntimeError as e:
            coro.close()
            raise TransportClosedError("SQS transport is not running") from e

    def shutdown(self, timeout: float = 5.0) -> None:
        """
        Abandon in-flight sends, close the client and stop the loop.

        Safe to call more than once.

        Args:
            timeout: Seconds to wait for the close and the thread join
        """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True

        loop, thread = self._loop, self._thread
        if loop is None or thread is None:
            return

        try:
            asyncio.run_coroutine_threadsafe(self._close(), loop).result(timeout=timeout)
        except Exception as e:
            self._log.warning(
                "SQS transport did not close cleanly",
                error=str(e),
                error_type=type(e).__name__
            )
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout)
            if not thread.is_alive():
                loop.close()

        self._log.info("SQS transport shut down", endpoint_url=self.endpoint_url)

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())

    async def _open(self) -> None:
        session = self._session_factory(
            aws_access_key_id=self._credentials.access_key,
            aws_secret_access_key=self._credentials.secret_key,
            aws_session_token=self._credentials.session_token,
            region_name=self.region_name
        )
        config = Config(max_pool_connections=self.thread_pool) if self.thread_pool else Config()

        self._exit_stack = AsyncExitStack()
        self._client = await self._exit_stack.enter_async_context(
            session.client("sqs", endpoint_url=self.endpoint_url, config=config)
        )
        if self.thread_pool:
            self._semaphore = asyncio.Semaphore(self.thread_pool)

    async def _close(self) -> None:
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks() if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            self._log.debug("Abandoning in-flight sends", count=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

        if self._exit_stack is not None:
            await self._exit_stack.aclose()
        self._exit_stack = None
        self._client = None

    async def _send(self, queue_url: str, body: str) -> str:
        if self._semaphore is None:
            return await self._send_message(queue_url, body)
        async with self._semaphore:
            return await self._send_message(queue_url, body)

    async def _send_message(self, queue_url: str, body: str) -> str:
        try:
            response = await self._client.send_message(QueueUrl=queue_url, MessageBody=body)
        except ClientError as e:
            self._log.debug(
                "Failed to send message to SQS",
                queue_url=queue_url,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        return response['MessageId']
