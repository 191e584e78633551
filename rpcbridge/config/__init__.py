"""Configuration module for rpcbridge."""

from rpcbridge.config.loader import get_config_path, load_config, save_config
from rpcbridge.config.schema import RpcSettings

__all__ = ["RpcSettings", "get_config_path", "load_config", "save_config"]
