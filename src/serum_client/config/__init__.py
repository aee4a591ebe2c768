"""Client configuration: environment settings, endpoints and per-client options."""

from .endpoints import ClientOptions, Endpoints, TransportKind, default_client_options
from .environment import (
    DEFAULT_RPC_TIMEOUT_SECONDS,
    LOG_APPEND_ENV,
    PRIVATE_KEY_ENV,
    TIMEOUT_ENV,
    EnvironmentSettings,
    clear_dotenv_cache,
    log_append_setting,
    private_key_setting,
    read_dotenv,
    timeout_setting,
)
from .errors import ConfigurationError

__all__ = [
    "ClientOptions",
    "ConfigurationError",
    "DEFAULT_RPC_TIMEOUT_SECONDS",
    "Endpoints",
    "EnvironmentSettings",
    "LOG_APPEND_ENV",
    "PRIVATE_KEY_ENV",
    "TIMEOUT_ENV",
    "TransportKind",
    "clear_dotenv_cache",
    "default_client_options",
    "log_append_setting",
    "private_key_setting",
    "read_dotenv",
    "timeout_setting",
]
