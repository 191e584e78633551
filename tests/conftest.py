"""Pytest fixtures: in-process client/server loopback and log capture."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
from loguru import logger

from rpcbridge import RpcClient, RpcServer, RpcSettings
from rpcbridge.core.serialization import encode_request, encode_response


@dataclass
class Loopback:
    client: RpcClient
    server: RpcServer
    context: dict[str, Any]
    requests: list[dict[str, Any]] = field(default_factory=list)
    responses: list[dict[str, Any]] = field(default_factory=list)
    tasks: set[asyncio.Task] = field(default_factory=set)

    async def drain(self) -> None:
        """Wait for every server dispatch still in flight."""
        while self.tasks:
            await asyncio.gather(*list(self.tasks))
            await asyncio.sleep(0)


@pytest.fixture
def make_loopback() -> Callable[..., Loopback]:
    """Build a client and server wired together like two ends of a transport."""

    def _make(*, config: RpcSettings | None = None, id_factory=None, context: dict | None = None) -> Loopback:
        holder: dict[str, Loopback] = {}

        def send_request(request) -> None:
            lb = holder["lb"]
            payload = encode_request(request)
            lb.requests.append(payload)
            task = asyncio.get_running_loop().create_task(lb.server.receive_request(lb.context, payload))
            lb.tasks.add(task)
            task.add_done_callback(lb.tasks.discard)

        def send_response(response) -> None:
            lb = holder["lb"]
            payload = encode_response(response)
            lb.responses.append(payload)
            lb.client.receive_response(payload)

        lb = Loopback(
            client=RpcClient(send_request, config=config, id_factory=id_factory),
            server=RpcServer(send_response, config=config),
            context=context if context is not None else {"origin": "test"},
        )
        holder["lb"] = lb
        return lb

    return _make


@pytest.fixture
def loopback(make_loopback) -> Loopback:
    return make_loopback()


@pytest.fixture
def log_messages():
    """Capture rpcbridge log messages emitted during the test."""
    messages: list[str] = []
    logger.enable("rpcbridge")
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)
    logger.disable("rpcbridge")
