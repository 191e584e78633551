"""Callee role: method registry, middleware pipeline and terminal dispatch."""

from __future__ import annotations

import inspect
from typing import Any

from loguru import logger

from rpcbridge.config.schema import RpcSettings
from rpcbridge.core.contracts import Disposer, MethodHandler, Middleware, Next, SendResponse
from rpcbridge.core.protocol import RpcRequest, RpcResponse
from rpcbridge.core.serialization import (
    MethodSerializer,
    decode_request_payload,
    encode_response,
    envelope_id,
    error_response,
    is_serialized_data,
)
from rpcbridge.error_boundary import describe_request, to_rpc_error
from rpcbridge.middleware import MiddlewarePipeline
from rpcbridge.registry import MethodRegistry
from rpcbridge.utils.exceptions import RpcError, describe_exception


class RpcServer:
    """Receives request envelopes and hands response envelopes to send_response."""

    def __init__(self, send_response: SendResponse, *, config: RpcSettings | None = None):
        self._send_response = send_response
        self.config = config or RpcSettings()
        self.methods = MethodRegistry()
        self.pipeline = MiddlewarePipeline()

    def register_method(
        self,
        name: str,
        handler: MethodHandler,
        serializer: MethodSerializer | None = None,
    ) -> None:
        """Register a callable method; replaces any previous handler of that name."""
        self.methods.register(name, handler, serializer)

    def unregister_method(self, name: str) -> bool:
        return self.methods.unregister(name)

    def has_method(self, name: str) -> bool:
        return name in self.methods

    def method_names(self) -> list[str]:
        return self.methods.names()

    def add_middleware(self, middleware: Middleware) -> Disposer:
        """Insert middleware just before the terminal stage; returns its disposer."""
        return self.pipeline.add(middleware)

    async def receive_request(self, context: Any, envelope: RpcRequest | dict[str, Any]) -> None:
        """Handle one request envelope.

        Malformed envelopes are answered with -32600 only when they carry an id;
        id-less ones are dropped. Requests without an id never get a response.
        """
        request_id = envelope_id(envelope)
        try:
            request = decode_request_payload(envelope)
        except RpcError as exc:
            if request_id is None:
                logger.debug("Dropping malformed notification: {}", exc.message)
                return
            logger.info("Rejecting malformed request id={}: {}", request_id, exc.message)
            await self._send(error_response(request_id, exc))
            return

        label = describe_request(request.method, request.id)
        try:
            response = await self.pipeline.dispatch(context, request, self._terminal)
        except Exception as exc:
            error = to_rpc_error(method=request.method, exc=exc, redact=self.config.redact_internal_errors)
            if request.id is None:
                logger.debug("Swallowing failure of {}: {}", label, error)
                return
            await self._send(error_response(request.id, error))
            return

        if request.id is None:
            logger.debug("Handled {}", label)
            return
        await self._send(response)

    async def _terminal(self, context: Any, request: RpcRequest, _next: Next) -> RpcResponse:
        registration = self.methods.get(request.method)
        if registration is None:
            raise RpcError.method_not_found(request.method)
        serializer = registration.serializer

        params = request.params
        if serializer is not None and serializer.params is not None and is_serialized_data(params):
            try:
                params = serializer.params.deserialize(params)
            except Exception as exc:
                raise RpcError.internal(f"Failed to deserialize params: {describe_exception(exc)}") from exc

        outcome = registration.handler(context, params if params is not None else {})
        result = await outcome if inspect.isawaitable(outcome) else outcome

        if serializer is not None and serializer.result is not None and result is not None:
            result = serializer.result.serialize(result)
        return RpcResponse(id=request.id, result=result)

    async def _send(self, response: RpcResponse) -> None:
        if self.config.log_envelopes:
            logger.debug("Sending response: {}", encode_response(response))
        outcome = self._send_response(response)
        if inspect.isawaitable(outcome):
            await outcome
