"""
Module: credentials.py
Description: Access credentials for the queue service.

Dependencies: pydantic, typing
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialSet(BaseModel):
    """
    Access/secret key pair authorizing requests to SQS.

    Attributes:
        access_key: AWS access key id
        secret_key: AWS secret access key
        session_token: Session token for temporary credentials
        source: Name of the source that produced the credentials
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    access_key: Optional[str] = Field(default=None, description="Access key id")
    secret_key: Optional[str] = Field(default=None, description="Secret access key")
    session_token: Optional[str] = Field(default=None, description="Session token")
    source: Optional[str] = Field(default=None, description="Producing source")

    @property
    def is_complete(self) -> bool:
        """True when both keys are present and non-empty."""
        return bool(self.access_key) and bool(self.secret_key)

    def __repr__(self) -> str:
        # Keys stay out of reprs and tracebacks
        return f"CredentialSet(access_key='{(self.access_key or '')[:4]}...', source={self.source!r})"

    __str__ = __repr__
