"""
Configuration management for the JSON-RPC client.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseSettings):
    """
    Configuration settings for the JSON-RPC client.
    
    All settings can be configured via environment variables with the RPCBATCHER_ prefix.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="RPCBATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Endpoint settings
    url: Optional[str] = Field(
        default=None,
        description="JSON-RPC endpoint URL requests are POSTed to"
    )
    user: Optional[str] = Field(
        default=None,
        description="HTTP basic auth user name"
    )
    password: Optional[str] = Field(
        default=None,
        description="HTTP basic auth password"
    )
    
    # Protocol settings
    protocol_version: str = Field(
        default="2.0",
        description="Value of the jsonrpc member in every request"
    )
    
    # Transport settings
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout, owned by the transport"
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates of the endpoint"
    )
    
    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )
    
    @property
    def has_auth(self) -> bool:
        """Whether basic auth credentials are configured."""
        return bool(self.user)


# Global config instance
_config: Optional[ClientConfig] = None


def get_config() -> ClientConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = ClientConfig()
    return _config


def set_config(config: ClientConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
