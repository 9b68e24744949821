"""
Module: handlers
Description: Package initialization for logging framework bridges.

This package contains the adapters connecting host logging frameworks
to the sink:
- logging_handler: stdlib logging.Handler bridge
"""

from .logging_handler import SqsLogHandler

__all__ = ["SqsLogHandler"]
