"""
Package: delivery
Description: Asynchronous delivery of log messages to SQS.

Provides the fire-and-forget dispatcher that submits each message to
the transport and reports failed sends to diagnostics.
"""
