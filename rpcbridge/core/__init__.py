"""Envelope models, contracts and serialization helpers."""

from .contracts import Disposer, MethodHandler, Middleware, Next, SendRequest, SendResponse
from .protocol import JSONRPC_VERSION, RpcErrorPayload, RpcId, RpcRequest, RpcResponse
from .serialization import (
    JsonSerializer,
    MethodSerializer,
    PydanticSerializer,
    SerializedData,
    Serializer,
    decode_envelope_line,
    decode_request_payload,
    decode_response_payload,
    encode_envelope_line,
    encode_request,
    encode_response,
    envelope_id,
    error_response,
    is_serialized_data,
    is_valid_id,
)

__all__ = [
    "Disposer",
    "MethodHandler",
    "Middleware",
    "Next",
    "SendRequest",
    "SendResponse",
    "JSONRPC_VERSION",
    "RpcErrorPayload",
    "RpcId",
    "RpcRequest",
    "RpcResponse",
    "JsonSerializer",
    "MethodSerializer",
    "PydanticSerializer",
    "SerializedData",
    "Serializer",
    "decode_envelope_line",
    "decode_request_payload",
    "decode_response_payload",
    "encode_envelope_line",
    "encode_request",
    "encode_response",
    "envelope_id",
    "error_response",
    "is_serialized_data",
    "is_valid_id",
]
