"""Configuration schema using Pydantic."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RpcSettings(BaseSettings):
    """Runtime settings shared by RpcClient and RpcServer."""
    default_timeout_seconds: float = Field(default=0.0, ge=0)  # 0 = calls never time out
    log_envelopes: bool = False  # Debug-log every envelope handed to a send callback
    redact_internal_errors: bool = False  # Scrub secrets from -32000 messages before sending
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RPCBRIDGE_",
    )
