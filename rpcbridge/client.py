"""Caller role: request correlation, timeouts and result deserialization."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable
from uuid import uuid4

from loguru import logger

from rpcbridge.config.schema import RpcSettings
from rpcbridge.core.contracts import SendRequest
from rpcbridge.core.protocol import RpcId, RpcRequest, RpcResponse
from rpcbridge.core.serialization import (
    MethodSerializer,
    decode_response_payload,
    encode_request,
    is_serialized_data,
    is_valid_id,
)
from rpcbridge.utils.exceptions import RpcError, describe_exception


@dataclass
class PendingCall:
    id: RpcId
    method: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None
    serializer: MethodSerializer | None = None


class RpcClient:
    """Sends requests through send_request and settles them from receive_response."""

    def __init__(
        self,
        send_request: SendRequest,
        *,
        config: RpcSettings | None = None,
        id_factory: Callable[[], RpcId] | None = None,
    ):
        self._send_request = send_request
        self.config = config or RpcSettings()
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._pending: dict[RpcId, PendingCall] = {}
        self._serializers: dict[str, MethodSerializer] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def register_serializer(self, method: str, serializer: MethodSerializer) -> None:
        logger.debug("Registering serializer for method: {}", method)
        self._serializers[method] = serializer

    async def call_method(self, method: str, params: Any = None, timeout: float | None = None) -> Any:
        """Call a remote method and wait for its result.

        timeout is in seconds; 0 disables it and None uses the configured default.
        Raises RpcError for remote errors and for timeouts (kind TIMEOUT).
        """
        seconds = self.config.default_timeout_seconds if timeout is None else timeout
        request_id = self._id_factory()
        if request_id in self._pending:
            raise RpcError.internal(f"duplicate request id: {request_id}")
        request = RpcRequest(method=method, params=self._serialize_params(method, params), id=request_id)

        loop = asyncio.get_running_loop()
        pending = PendingCall(
            id=request_id,
            method=method,
            future=loop.create_future(),
            serializer=self._serializers.get(method),
        )
        if seconds > 0:
            pending.timer = loop.call_later(seconds, self._expire, request_id)
        self._pending[request_id] = pending

        try:
            await self._send(request)
            return await pending.future
        finally:
            # No-op when a response or the timer already settled the call.
            self._discard(request_id)

    async def notify(self, method: str, params: Any = None) -> None:
        """Send a notification; no response is expected."""
        await self._send(RpcRequest(method=method, params=self._serialize_params(method, params)))

    def receive_response(self, envelope: RpcResponse | dict[str, Any]) -> bool:
        """Settle the pending call matching the response id.

        Returns False when no call is waiting on that id (duplicate, late
        response after a timeout, or noise); such responses are discarded.
        """
        response = decode_response_payload(envelope)
        pending = self._pending.pop(response.id, None) if is_valid_id(response.id) else None
        if pending is None:
            logger.warning("Received response with unknown id: {}", response.id)
            return False
        if pending.timer is not None:
            pending.timer.cancel()
        if pending.future.done():
            return True

        if response.error is not None:
            pending.future.set_exception(
                RpcError.from_payload(
                    {"code": response.error.code, "message": response.error.message, "data": response.error.data},
                    request_id=response.id,
                )
            )
            return True

        result = response.result
        result_serializer = pending.serializer.result if pending.serializer is not None else None
        if result_serializer is not None and is_serialized_data(result):
            try:
                result = result_serializer.deserialize(result)
            except Exception as exc:
                logger.warning("Failed to deserialize result of {}: {}", pending.method, describe_exception(exc))
                pending.future.set_exception(
                    RpcError.internal(f"Failed to deserialize result: {describe_exception(exc)}")
                )
                return True
        pending.future.set_result(result)
        return True

    def close(self) -> None:
        """Reject every outstanding call and clear the pending table."""
        doomed = list(self._pending.values())
        self._pending.clear()
        for pending in doomed:
            if pending.timer is not None:
                pending.timer.cancel()
            if not pending.future.done():
                pending.future.set_exception(RpcError.internal("client closed"))

    def _serialize_params(self, method: str, params: Any) -> Any:
        serializer = self._serializers.get(method)
        if params is not None and serializer is not None and serializer.params is not None:
            return serializer.params.serialize(params)
        return params

    def _expire(self, request_id: RpcId) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return
        logger.info("RPC call {}#{} timed out", pending.method, request_id)
        if not pending.future.done():
            pending.future.set_exception(RpcError.timeout(request_id))

    def _discard(self, request_id: RpcId) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is not None and pending.timer is not None:
            pending.timer.cancel()

    async def _send(self, request: RpcRequest) -> None:
        if self.config.log_envelopes:
            logger.debug("Sending request: {}", encode_request(request))
        outcome = self._send_request(request)
        if inspect.isawaitable(outcome):
            await outcome
