"""
Module: auth
Description: Package initialization for credential resolution.

This package contains the credential chain used when the sink starts:
- credentials: ordered credential sources and the resolver walking them
"""

from .credentials import CredentialResolver, default_chain, process_properties

__all__ = [
    "CredentialResolver",
    "default_chain",
    "process_properties",
]
