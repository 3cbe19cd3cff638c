"""DynamoDB-backed collaborators of the propagation core."""

from .contacts import ContactRepository, DynamoContactRepository
from .error_log import DynamoErrorLogSink, ErrorLogSink, TraceErrorLogSink, build_error_log_sink

__all__ = [
    "ContactRepository",
    "DynamoContactRepository",
    "DynamoErrorLogSink",
    "ErrorLogSink",
    "TraceErrorLogSink",
    "build_error_log_sink",
]
