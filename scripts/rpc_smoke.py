#!/usr/bin/env python3
"""rpcbridge end-to-end smoke checks over an in-process JSON-line loopback.

Usage:
  python scripts/rpc_smoke.py
  python scripts/rpc_smoke.py --config ~/.rpcbridge/config.json --verbose
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from rpcbridge import RpcClient, RpcError, RpcServer, load_config
from rpcbridge.config.schema import RpcSettings
from rpcbridge.core.serialization import decode_envelope_line, encode_envelope_line
from rpcbridge.utils.logging_utils import configure_logging


def _build_pair(config: RpcSettings) -> tuple[RpcClient, RpcServer, set[asyncio.Task]]:
    """Wire a client and server together through JSON lines, like a socket would."""
    inflight: set[asyncio.Task] = set()
    holder: dict[str, object] = {}

    def _spawn(coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        inflight.add(task)
        task.add_done_callback(inflight.discard)

    def send_request(request) -> None:
        line = encode_envelope_line(request)
        _spawn(holder["server"].receive_request({"origin": "smoke"}, decode_envelope_line(line)))

    def send_response(response) -> None:
        holder["client"].receive_response(decode_envelope_line(encode_envelope_line(response)))

    client = RpcClient(send_request, config=config)
    server = RpcServer(send_response, config=config)
    holder["client"] = client
    holder["server"] = server
    return client, server, inflight


async def run_smoke(config: RpcSettings) -> list[str]:
    errors: list[str] = []
    client, server, inflight = _build_pair(config)

    async def _slow(_ctx, params):
        await asyncio.sleep(float(params.get("delay", 0.2)))
        return "late"

    server.register_method("add", lambda _ctx, p: p["a"] + p["b"])
    server.register_method("slow", _slow)

    result = await client.call_method("add", {"a": 1, "b": 2}, timeout=0)
    if result != 3:
        errors.append(f"add returned {result!r}, expected 3")

    try:
        await client.call_method("missing.method", timeout=0)
        errors.append("missing.method did not fail")
    except RpcError as exc:
        if exc.code != -32601:
            errors.append(f"missing.method failed with {exc.code}, expected -32601")

    async def _double(_ctx, _req, next):
        response = await next()
        if isinstance(response.result, (int, float)):
            response.result *= 2
        return response

    dispose = server.add_middleware(_double)
    result = await client.call_method("add", {"a": 1, "b": 2}, timeout=0)
    if result != 6:
        errors.append(f"add with doubling middleware returned {result!r}, expected 6")
    dispose()

    try:
        await client.call_method("slow", {"delay": 0.2}, timeout=0.05)
        errors.append("slow call did not time out")
    except RpcError as exc:
        if not exc.is_timeout:
            errors.append(f"slow call failed with {exc!r}, expected a timeout")

    if inflight:
        await asyncio.gather(*inflight)
    if client.pending_count:
        errors.append(f"{client.pending_count} calls left pending")
    return errors


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=Path, default=None, help="Path to rpcbridge config.json")
    parser.add_argument("--verbose", action="store_true", help="Print rpcbridge debug logs")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging("DEBUG" if args.verbose else config.log_level, enabled=args.verbose)

    errors = asyncio.run(run_smoke(config))
    if errors:
        print("rpc smoke errors:")
        for err in errors:
            print(f"  ERROR: {err}")
        return 1
    print("rpc_smoke: PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
