"""
Module: utils
Description: Package initialization for shared helpers.

This package contains helpers used throughout the sink:
- logger: structlog configuration and get_logger()
- diagnostics: channels for warnings/errors about the sink itself
- guarded: lock-guarded holder for the live transport handle
"""

__all__ = []
