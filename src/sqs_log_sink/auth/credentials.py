"""
Module: credentials.py
Description: Credential resolution for the SQS transport.

Credentials are resolved once, at sink start, by walking an ordered
list of sources and taking the first one that yields a complete
access/secret key pair. A source is a plain callable returning a
CredentialSet or None.

Key Components:
- CredentialResolver: walks the sources in order
- default_chain(): environment, process properties, static settings,
  shared credentials file, instance metadata
- process_properties: process-wide properties consulted by the chain

Dependencies: botocore, os, typing
"""

import os
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from botocore.credentials import InstanceMetadataProvider, SharedCredentialProvider
from botocore.exceptions import BotoCoreError
from botocore.utils import InstanceMetadataFetcher

from ..config.settings import SinkSettings
from ..exceptions import NoCredentialsAvailable
from ..models.credentials import CredentialSet
from ..utils.logger import get_logger

logger = get_logger(__name__)

CredentialSource = Callable[[], Optional[CredentialSet]]

# Process-wide properties, set by the host application before start
process_properties: Dict[str, str] = {}

ACCESS_KEY_PROPERTY = "aws.accessKeyId"
SECRET_KEY_PROPERTY = "aws.secretKey"
SESSION_TOKEN_PROPERTY = "aws.sessionToken"

DEFAULT_CREDENTIALS_FILE = "~/.aws/credentials"
METADATA_TIMEOUT_SECONDS = 1


class CredentialResolver:
    """
    Ordered chain of credential sources.

    Attributes:
        sources: (name, source) pairs, tried first to last

    Example:
        >>> resolver = CredentialResolver([("static", lambda: creds)])
        >>> resolver.resolve().source
        'static'
    """

    def __init__(self, sources: Sequence[Tuple[str, CredentialSource]], log=None):
        self.sources: List[Tuple[str, CredentialSource]] = list(sources)
        self.log = log if log is not None else logger

    def resolve(self) -> CredentialSet:
        """
        Return the first complete credential set.

        A source that raises is skipped like one that returns nothing.

        Returns:
            CredentialSet tagged with the name of its source

        Raises:
            NoCredentialsAvailable: If no source yields a complete pair
        """
        for name, source in self.sources:
            try:
                credentials = source()
            except Exception as e:
                self.log.debug(
                    "Credential source failed",
                    source=name,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            if credentials is not None and credentials.is_complete:
                self.log.debug("Credentials resolved", source=name)
                return credentials.model_copy(update={"source": name})

        raise NoCredentialsAvailable([name for name, _ in self.sources])


def environment_source(environ: Optional[Mapping[str, str]] = None) -> CredentialSource:
    """Credentials from AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY (or the older names)."""
    def load() -> Optional[CredentialSet]:
        env = os.environ if environ is None else environ
        return CredentialSet(
            access_key=env.get("AWS_ACCESS_KEY_ID") or env.get("AWS_ACCESS_KEY"),
            secret_key=env.get("AWS_SECRET_ACCESS_KEY") or env.get("AWS_SECRET_KEY"),
            session_token=env.get("AWS_SESSION_TOKEN") or None
        )
    return load


def properties_source(properties: Optional[Mapping[str, str]] = None) -> CredentialSource:
    """Credentials from the aws.accessKeyId/aws.secretKey process properties."""
    def load() -> Optional[CredentialSet]:
        props = process_properties if properties is None else properties
        return CredentialSet(
            access_key=props.get(ACCESS_KEY_PROPERTY),
            secret_key=props.get(SECRET_KEY_PROPERTY),
            session_token=props.get(SESSION_TOKEN_PROPERTY) or None
        )
    return load


def static_source(settings: SinkSettings) -> CredentialSource:
    """Credentials from the sink's own access_key/secret_key settings."""
    def load() -> Optional[CredentialSet]:
        return CredentialSet(access_key=settings.access_key, secret_key=settings.secret_key)
    return load


def profile_source(
    profile_name: Optional[str] = None,
    filename: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> CredentialSource:
    """
    Credentials from a profile in the shared credentials file.

    Args:
        profile_name: Profile to read (AWS_PROFILE, then 'default', when None)
        filename: Credentials file (AWS_SHARED_CREDENTIALS_FILE, then
            ~/.aws/credentials, when None)
        environ: Environment used for the fallbacks
    """
    def load() -> Optional[CredentialSet]:
        env = os.environ if environ is None else environ
        path = filename or env.get("AWS_SHARED_CREDENTIALS_FILE") or DEFAULT_CREDENTIALS_FILE
        profile = profile_name or env.get("AWS_PROFILE") or "default"
        provider = SharedCredentialProvider(
            creds_filename=os.path.expanduser(path),
            profile_name=profile
        )
        return _from_botocore(provider.load())
    return load


def instance_metadata_source(timeout: float = METADATA_TIMEOUT_SECONDS) -> CredentialSource:
    """Credentials from the EC2/ECS instance metadata service."""
    def load() -> Optional[CredentialSet]:
        provider = InstanceMetadataProvider(
            iam_role_fetcher=InstanceMetadataFetcher(timeout=timeout, num_attempts=1)
        )
        try:
            return _from_botocore(provider.load())
        except BotoCoreError as e:
            logger.debug("Instance metadata unavailable", error=str(e))
            return None
    return load


def _from_botocore(credentials) -> Optional[CredentialSet]:
    if credentials is None:
        return None
    frozen = credentials.get_frozen_credentials()
    return CredentialSet(
        access_key=frozen.access_key,
        secret_key=frozen.secret_key,
        session_token=frozen.token
    )


def default_chain(
    settings: SinkSettings,
    environ: Optional[Mapping[str, str]] = None,
    properties: Optional[Mapping[str, str]] = None
) -> CredentialResolver:
    """
    Build the standard resolver for a sink.

    Sources are tried in this order: environment variables, process
    properties, the static keys from `settings`, the shared credentials
    file, and the instance metadata service.

    Args:
        settings: Sink settings providing static keys and profile name
        environ: Environment mapping (os.environ when None)
        properties: Process properties (process_properties when None)

    Returns:
        CredentialResolver over the five sources
    """
    return CredentialResolver([
        ("environment", environment_source(environ)),
        ("process_properties", properties_source(properties)),
        ("static", static_source(settings)),
        ("profile", profile_source(settings.profile_name, environ=environ)),
        ("instance_metadata", instance_metadata_source()),
    ], log=get_logger(__name__, settings.log_level))
