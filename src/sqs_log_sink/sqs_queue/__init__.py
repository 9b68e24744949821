"""
Package: sqs_queue
Description: SQS transport for log message delivery.

Provides the asynchronous SQS client the sink sends each log event
through, with its own event loop thread and bounded or elastic
concurrency.
"""
