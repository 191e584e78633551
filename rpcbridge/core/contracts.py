"""Callable contracts consumed and exposed by the RPC engine."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, Union

from .protocol import RpcRequest, RpcResponse

Next = Callable[[], Awaitable[RpcResponse]]
MaybeAwaitable = Union[Awaitable[Any], Any]


class MethodHandler(Protocol):
    def __call__(self, context: Any, params: Any) -> MaybeAwaitable: ...


class Middleware(Protocol):
    def __call__(self, context: Any, request: RpcRequest, next: Next) -> Awaitable[RpcResponse] | RpcResponse: ...


SendRequest = Callable[[RpcRequest], Union[Awaitable[None], None]]
SendResponse = Callable[[RpcResponse], Union[Awaitable[None], None]]
Disposer = Callable[[], None]
