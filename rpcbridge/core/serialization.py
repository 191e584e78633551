"""Serialization helpers: per-method wire transforms and envelope codecs."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypedDict, TypeVar, runtime_checkable

from pydantic import BaseModel

from rpcbridge.core.protocol import JSONRPC_VERSION, RpcErrorPayload, RpcRequest, RpcResponse
from rpcbridge.utils.exceptions import RpcError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class SerializedData(TypedDict):
    """Wire-safe single-field envelope produced by a serializer."""

    serialized: str


@runtime_checkable
class Serializer(Protocol[T]):
    def serialize(self, value: T) -> SerializedData: ...
    def deserialize(self, value: SerializedData) -> T: ...


@dataclass(slots=True)
class MethodSerializer:
    """Independent params/result transforms for one method."""

    params: Serializer[Any] | None = None
    result: Serializer[Any] | None = None


def is_serialized_data(obj: Any) -> bool:
    """Return True when obj has the {"serialized": str} wire shape."""
    return isinstance(obj, Mapping) and isinstance(obj.get("serialized"), str)


class JsonSerializer(Generic[T]):
    """Serializer for plain JSON values."""

    def __init__(self, *, sort_keys: bool = False):
        self._sort_keys = sort_keys

    def serialize(self, value: T) -> SerializedData:
        return {"serialized": json.dumps(value, ensure_ascii=False, sort_keys=self._sort_keys)}

    def deserialize(self, value: SerializedData) -> T:
        return json.loads(value["serialized"])


class PydanticSerializer(Generic[M]):
    """Serializer for pydantic models, validated on the way back in."""

    def __init__(self, model_cls: type[M]):
        self.model_cls = model_cls

    def serialize(self, value: M) -> SerializedData:
        return {"serialized": value.model_dump_json()}

    def deserialize(self, value: SerializedData) -> M:
        return self.model_cls.model_validate_json(value["serialized"])


def envelope_id(envelope: Any) -> Any:
    """Raw id of an envelope that may not be well-formed; None when absent."""
    if isinstance(envelope, (RpcRequest, RpcResponse)):
        return envelope.id
    if isinstance(envelope, Mapping) and "id" in envelope:
        return envelope["id"]
    return None


def is_valid_id(value: Any) -> bool:
    """True for str or int ids; bool is rejected even though it subclasses int."""
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def decode_request_payload(envelope: Any) -> RpcRequest:
    """Validate a request envelope, raising RpcError(-32600) when malformed."""
    if isinstance(envelope, RpcRequest):
        tag, method, params = envelope.jsonrpc, envelope.method, envelope.params
    elif isinstance(envelope, Mapping):
        tag, method, params = envelope.get("jsonrpc"), envelope.get("method"), envelope.get("params")
    else:
        raise RpcError.invalid_request()
    if tag != JSONRPC_VERSION:
        raise RpcError.invalid_request()
    if not isinstance(method, str) or not method:
        raise RpcError.invalid_request("Invalid Request: method is required")
    req_id = envelope_id(envelope)
    if req_id is not None and not is_valid_id(req_id):
        raise RpcError.invalid_request("Invalid Request: id must be a string or integer")
    if isinstance(envelope, RpcRequest):
        return envelope
    return RpcRequest(method=method, params=params, id=req_id)


def decode_response_payload(envelope: Any) -> RpcResponse:
    """Normalize a response envelope (dataclass or dict) into RpcResponse."""
    if isinstance(envelope, RpcResponse):
        return envelope
    row = envelope if isinstance(envelope, Mapping) else {}
    error = row.get("error")
    if error is not None:
        rebuilt = RpcError.from_payload(error)
        return RpcResponse(
            id=envelope_id(row),
            error=RpcErrorPayload(code=rebuilt.code, message=rebuilt.message, data=rebuilt.data),
            jsonrpc=str(row.get("jsonrpc") or JSONRPC_VERSION),
        )
    return RpcResponse(id=envelope_id(row), result=row.get("result"), jsonrpc=str(row.get("jsonrpc") or JSONRPC_VERSION))


def encode_request(request: RpcRequest) -> dict[str, Any]:
    """Encode a request frame as a JSON-compatible dict."""
    payload: dict[str, Any] = {"jsonrpc": request.jsonrpc, "method": request.method}
    if request.params is not None:
        payload["params"] = request.params
    if request.id is not None:
        payload["id"] = request.id
    return payload


def encode_response(response: RpcResponse) -> dict[str, Any]:
    """Encode a response frame as a JSON-compatible dict."""
    payload: dict[str, Any] = {"jsonrpc": response.jsonrpc, "id": response.id}
    if response.error is not None:
        error: dict[str, Any] = {"code": response.error.code, "message": response.error.message}
        if response.error.data is not None:
            error["data"] = response.error.data
        payload["error"] = error
    else:
        payload["result"] = response.result
    return payload


def encode_envelope_line(envelope: RpcRequest | RpcResponse) -> str:
    """Encode an envelope into one line of JSON."""
    if isinstance(envelope, RpcRequest):
        return json.dumps(encode_request(envelope), ensure_ascii=False)
    return json.dumps(encode_response(envelope), ensure_ascii=False)


def decode_envelope_line(line: str) -> dict[str, Any]:
    """Decode one JSON line into an envelope dict."""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        raise RpcError.invalid_request(f"Invalid Request: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise RpcError.invalid_request()
    return payload


def error_response(request_id: Any, error: RpcError) -> RpcResponse:
    """Build an error response frame from an RpcError."""
    return RpcResponse(
        id=request_id,
        error=RpcErrorPayload(code=error.code, message=error.message, data=error.data),
    )
