"""Error-boundary helpers for server dispatch."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from rpcbridge.utils.exceptions import ErrorKind, RpcError, describe_exception, sanitize_error_message


def rpc_error_result(
    *,
    method: str,
    exc: RpcError,
    log_warning: Callable[..., None] = logger.warning,
) -> RpcError:
    """Pass a structured error through unchanged, logging it once."""
    if exc.kind is ErrorKind.APPLICATION:
        log_warning("RPC method {} failed with {}: {}", method, exc.code, exc.message)
    else:
        log_warning("RPC method {} rejected [{}]: {}", method, exc.kind.value, exc.message)
    return exc


def unhandled_exception_result(
    *,
    method: str,
    exc: Exception,
    redact: bool = False,
    log_exception: Callable[..., None] = logger.exception,
) -> RpcError:
    """Map unexpected exceptions to an opaque INTERNAL_ERROR."""
    message = describe_exception(exc)
    if redact:
        message = sanitize_error_message(message)
    log_exception("RPC method {} failed: {}", method, message)
    return RpcError.internal(message)


def to_rpc_error(
    *,
    method: str,
    exc: Exception,
    redact: bool = False,
    log_warning: Callable[..., None] = logger.warning,
    log_exception: Callable[..., None] = logger.exception,
) -> RpcError:
    """Translate any failure raised during dispatch into an RpcError.

    Timeouts are local to the client that raised them, so a handler whose own
    outbound call timed out reports an internal error instead.
    """
    if isinstance(exc, RpcError) and exc.kind is ErrorKind.TIMEOUT:
        log_exception("RPC method {} failed: {}", method, exc.message)
        return RpcError.internal(exc.message)
    if isinstance(exc, RpcError):
        return rpc_error_result(method=method, exc=exc, log_warning=log_warning)
    return unhandled_exception_result(method=method, exc=exc, redact=redact, log_exception=log_exception)


def describe_request(method: Any, request_id: Any) -> str:
    """Short label used in dispatch log lines."""
    if request_id is None:
        return f"{method} (notification)"
    return f"{method}#{request_id}"
