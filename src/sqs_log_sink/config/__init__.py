"""
Module: config
Description: Package initialization for sink configuration.

This package contains the pydantic-settings model holding the
user-supplied sink settings (queue URL, credentials, pool sizing,
size limit).
"""

from .settings import SinkSettings

__all__ = ["SinkSettings"]
