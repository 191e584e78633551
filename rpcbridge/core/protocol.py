"""JSON-RPC envelope models shared by the client and server roles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

JSONRPC_VERSION = "2.0"

RpcId = Union[str, int]


@dataclass(slots=True)
class RpcErrorPayload:
    """Error member of a response envelope."""

    code: int
    message: str
    data: str | None = None


@dataclass(slots=True)
class RpcRequest:
    """Request frame. A request without an id is a notification."""

    method: str
    params: Any = None
    id: RpcId | None = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass(slots=True)
class RpcResponse:
    """Response frame carrying either a result or an error."""

    id: RpcId | None
    result: Any = None
    error: RpcErrorPayload | None = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def ok(self) -> bool:
        return self.error is None
