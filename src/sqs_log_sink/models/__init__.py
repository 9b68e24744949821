"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the value types used by the sink:
- Status: diagnostic warning/error record
- SendOutcome: result of one asynchronous send
- CredentialSet: access/secret key pair

All models are exported here for convenient importing.
"""

from .credentials import CredentialSet
from .outcome import SendOutcome
from .status import Status

__all__ = [
    "CredentialSet",
    "SendOutcome",
    "Status",
]
