"""
Error model for rpcbridge.

Provides:
- A single RpcError exception tagged with an ErrorKind
- Canonical JSON-RPC error codes
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32000
# Client-local only, never put on the wire.
REQUEST_TIMEOUT = -32001


class ErrorKind(Enum):
    """Error variants, decided when the error is constructed."""
    PROTOCOL = "protocol"
    METHOD_NOT_FOUND = "method_not_found"
    APPLICATION = "application"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


_KIND_BY_CODE = {
    INVALID_REQUEST: ErrorKind.PROTOCOL,
    METHOD_NOT_FOUND: ErrorKind.METHOD_NOT_FOUND,
    INTERNAL_ERROR: ErrorKind.INTERNAL,
}


class RpcError(Exception):
    """Structured RPC failure carrying a code, message and optional data.

    Raise it directly from a handler or middleware to send an application
    error; its fields reach the caller unchanged.
    """

    def __init__(
        self,
        code: int,
        message: str,
        data: str | None = None,
        *,
        kind: ErrorKind = ErrorKind.APPLICATION,
        request_id: str | int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
        self.kind = kind
        self.request_id = request_id

    @classmethod
    def invalid_request(cls, message: str = "Invalid Request") -> RpcError:
        return cls(INVALID_REQUEST, message, kind=ErrorKind.PROTOCOL)

    @classmethod
    def method_not_found(cls, method: str | None = None) -> RpcError:
        return cls(METHOD_NOT_FOUND, "Method not found", method, kind=ErrorKind.METHOD_NOT_FOUND)

    @classmethod
    def internal(cls, message: str, data: str | None = None) -> RpcError:
        return cls(INTERNAL_ERROR, message, data, kind=ErrorKind.INTERNAL)

    @classmethod
    def timeout(cls, request_id: str | int) -> RpcError:
        return cls(REQUEST_TIMEOUT, "Request timed out", kind=ErrorKind.TIMEOUT, request_id=request_id)

    @classmethod
    def from_payload(cls, payload: Any, *, request_id: str | int | None = None) -> RpcError:
        """Rebuild an error received in a response envelope."""
        row = payload if isinstance(payload, dict) else {}
        code = row.get("code")
        if not isinstance(code, int) or isinstance(code, bool):
            code = INTERNAL_ERROR
        data = row.get("data")
        return cls(
            code,
            str(row.get("message") or "rpc failed"),
            data,
            kind=_KIND_BY_CODE.get(code, ErrorKind.APPLICATION),
            request_id=request_id,
        )

    @property
    def is_timeout(self) -> bool:
        return self.kind is ErrorKind.TIMEOUT

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            row["data"] = self.data
        return row

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"RpcError(code={self.code}, message={self.message!r}, kind={self.kind.value})"


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def describe_exception(exc: BaseException) -> str:
    """Textual message of an arbitrary exception, without its type name."""
    text = str(exc).strip()
    return text or "Unknown error"
