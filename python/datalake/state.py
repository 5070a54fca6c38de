"""Holds the active client configuration using contextvars.

Public API:
    - get_config(): Retrieves the current configuration.
    - get_or_create_config(): Retrieves the current configuration, resolving it from the environment if necessary.
    - set_config(): Sets the configuration for the current async task or thread.

Every API function also accepts an explicit `config=` argument which takes
precedence over the context.
"""
from contextvars import ContextVar

from .config import ClientConfig

# INTERNAL: This variable holds the configuration. Do not access directly.
_config_var: ContextVar[ClientConfig | None] = ContextVar("datalake_config", default=None)


def get_config() -> ClientConfig | None:
    """Retrieves the current configuration."""
    return _config_var.get()


def get_or_create_config() -> ClientConfig:
    """Retrieves the current configuration, creating one from the environment if necessary."""
    config = get_config()
    if not config:
        config = ClientConfig.from_env()
        set_config(config)
    return config


def set_config(config: ClientConfig | None) -> None:
    """Sets the configuration for the current async task or thread."""
    _config_var.set(config)
