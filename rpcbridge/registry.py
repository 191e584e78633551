"""Per-server registry of callable methods."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from rpcbridge.core.contracts import MethodHandler
from rpcbridge.core.serialization import MethodSerializer


@dataclass(slots=True)
class MethodRegistration:
    handler: MethodHandler
    serializer: MethodSerializer | None = None


class MethodRegistry:
    """Maps method names to handlers and their optional serializers."""

    def __init__(self):
        self._methods: dict[str, MethodRegistration] = {}

    def register(self, name: str, handler: MethodHandler, serializer: MethodSerializer | None = None) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("method name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler for {name!r} is not callable")
        if name in self._methods:
            logger.debug("Replacing RPC method {}", name)
        self._methods[name] = MethodRegistration(handler=handler, serializer=serializer)

    def unregister(self, name: str) -> bool:
        return self._methods.pop(name, None) is not None

    def get(self, name: str) -> MethodRegistration | None:
        return self._methods.get(name)

    def names(self) -> list[str]:
        return sorted(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __len__(self) -> int:
        return len(self._methods)
