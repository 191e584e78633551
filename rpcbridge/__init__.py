"""rpcbridge - transport-agnostic JSON-RPC client/server engine."""

from loguru import logger

from rpcbridge.client import PendingCall, RpcClient
from rpcbridge.config import RpcSettings, load_config
from rpcbridge.core import (
    JSONRPC_VERSION,
    JsonSerializer,
    MethodSerializer,
    PydanticSerializer,
    RpcErrorPayload,
    RpcRequest,
    RpcResponse,
    SerializedData,
    Serializer,
    is_serialized_data,
)
from rpcbridge.middleware import MiddlewarePipeline, apply_to_methods
from rpcbridge.registry import MethodRegistration, MethodRegistry
from rpcbridge.server import RpcServer
from rpcbridge.utils.exceptions import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    REQUEST_TIMEOUT,
    ErrorKind,
    RpcError,
)

__version__ = "0.1.0"

# Library default: silent until the host application calls configure_logging().
logger.disable("rpcbridge")

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_REQUEST",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND",
    "REQUEST_TIMEOUT",
    "ErrorKind",
    "JsonSerializer",
    "MethodRegistration",
    "MethodRegistry",
    "MethodSerializer",
    "MiddlewarePipeline",
    "PendingCall",
    "PydanticSerializer",
    "RpcClient",
    "RpcError",
    "RpcErrorPayload",
    "RpcRequest",
    "RpcResponse",
    "RpcServer",
    "RpcSettings",
    "SerializedData",
    "Serializer",
    "apply_to_methods",
    "is_serialized_data",
    "load_config",
]
