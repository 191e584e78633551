"""Ordered middleware pipeline with an explicit dispatch cursor."""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from rpcbridge.core.contracts import Disposer, Middleware, Next
from rpcbridge.core.protocol import RpcRequest, RpcResponse
from rpcbridge.utils.exceptions import RpcError

NEXT_CALLED_TWICE = "next() called multiple times"
PIPELINE_EXHAUSTED = "no middleware to handle request"


@dataclass(eq=False, slots=True)
class MiddlewareEntry:
    """One pipeline stage. Compared by identity so disposers stay exact."""

    middleware: Middleware


class MiddlewarePipeline:
    """Interceptors run in insertion order ahead of a terminal stage."""

    def __init__(self):
        self._entries: list[MiddlewareEntry] = []

    def add(self, middleware: Middleware) -> Disposer:
        """Append middleware and return a callable that removes exactly this entry."""
        if not callable(middleware):
            raise TypeError("middleware must be callable")
        entry = MiddlewareEntry(middleware)
        self._entries.append(entry)

        def _dispose() -> None:
            self._entries = [e for e in self._entries if e is not entry]

        return _dispose

    def __len__(self) -> int:
        return len(self._entries)

    async def dispatch(self, context: Any, request: RpcRequest, terminal: Middleware) -> RpcResponse:
        """Run the middleware snapshot followed by terminal.

        Entries added or removed while this dispatch is running only affect
        later dispatches.
        """
        stages: tuple[Middleware, ...] = (*(e.middleware for e in self._entries), terminal)
        cursor = -1

        async def run(index: int) -> RpcResponse:
            nonlocal cursor
            if index <= cursor:
                raise RpcError.internal(NEXT_CALLED_TWICE)
            cursor = index
            if index >= len(stages):
                raise RpcError.internal(PIPELINE_EXHAUSTED)

            async def _next() -> RpcResponse:
                return await run(index + 1)

            outcome = stages[index](context, request, _next)
            response = await outcome if inspect.isawaitable(outcome) else outcome
            if not isinstance(response, RpcResponse):
                raise RpcError.internal(f"middleware returned {type(response).__name__}, expected a response")
            return response

        return await run(0)


def apply_to_methods(methods: Iterable[str] | str, middleware: Middleware) -> Middleware:
    """Wrap middleware so it only runs for the given methods.

    methods is an iterable of method names or "*" for every method. A bare
    string other than "*" is treated as one method name.
    """
    wildcard = methods == "*"
    names = frozenset() if wildcard else frozenset([methods] if isinstance(methods, str) else methods)

    async def _scoped(context: Any, request: RpcRequest, next: Next) -> RpcResponse:
        if wildcard or request.method in names:
            outcome = middleware(context, request, next)
            return await outcome if inspect.isawaitable(outcome) else outcome
        return await next()

    return _scoped
