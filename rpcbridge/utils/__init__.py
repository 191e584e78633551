"""Utility functions for rpcbridge."""

from rpcbridge.utils.exceptions import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    REQUEST_TIMEOUT,
    ErrorKind,
    RpcError,
    describe_exception,
    sanitize_error_message,
)
from rpcbridge.utils.logging_utils import configure_logging, ensure_rotating_log_file, remove_log_sink

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "REQUEST_TIMEOUT",
    "ErrorKind",
    "RpcError",
    "describe_exception",
    "sanitize_error_message",
    "configure_logging",
    "ensure_rotating_log_file",
    "remove_log_sink",
]
