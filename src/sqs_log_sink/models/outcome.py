"""
Module: outcome.py
Description: Result of one asynchronous send to the queue service.

SendOutcome is a two-way result: delivered (with the SQS message id)
or failed (with the cause). It is built from the transport's future
inside the completion callback, so the producing thread never waits
on it.

Dependencies: pydantic, concurrent.futures, typing
"""

from concurrent.futures import CancelledError, Future
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SendOutcome(BaseModel):
    """
    Outcome of a single message submission.

    Attributes:
        delivered: True when the queue service accepted the message
        message_id: SQS message id on success
        cause: Exception that made the send fail
        abandoned: True when the send was cancelled by a shutdown
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    delivered: bool = Field(..., description="Whether the message was accepted")
    message_id: Optional[str] = Field(default=None, description="SQS message id")
    cause: Optional[BaseException] = Field(default=None, description="Failure cause")
    abandoned: bool = Field(default=False, description="Cancelled during shutdown")

    @classmethod
    def success(cls, message_id: Optional[str]) -> "SendOutcome":
        return cls(delivered=True, message_id=message_id)

    @classmethod
    def failure(cls, cause: BaseException, abandoned: bool = False) -> "SendOutcome":
        return cls(delivered=False, cause=cause, abandoned=abandoned)

    @classmethod
    def from_future(cls, future: Future) -> "SendOutcome":
        """
        Build an outcome from a completed transport future.

        Args:
            future: Completed future resolving to a message id

        Returns:
            Success with the message id, or failure with the raised
            exception. A cancelled future counts as an abandoned send.
        """
        if future.cancelled():
            return cls.failure(CancelledError(), abandoned=True)
        exc = future.exception()
        if exc is not None:
            return cls.failure(exc)
        return cls.success(future.result())
