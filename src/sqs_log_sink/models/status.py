"""
Module: status.py
Description: Diagnostic status records emitted by the sink.

A Status is one warning or error about the sink's own operation
(oversized payload, failed delivery, start failure). Statuses are
written to a diagnostics channel and never read back by the sink.

Dependencies: pydantic, datetime, typing
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Status(BaseModel):
    """
    Diagnostic record about the sink itself.

    Attributes:
        level: WARN or ERROR
        message: Human-readable description
        source: Name of the component that emitted the status
        cause: Exception behind the status, if any
        timestamp: Time the status was recorded
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    level: Literal["WARN", "ERROR"] = Field(..., description="Status severity")
    message: str = Field(..., description="Status message")
    source: Optional[str] = Field(default=None, description="Emitting component")
    cause: Optional[BaseException] = Field(default=None, description="Underlying exception")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Time the status was recorded"
    )

    @property
    def is_error(self) -> bool:
        return self.level == "ERROR"
