"""Core infrastructure: configuration and exceptions."""

from codenav.core.config import CodenavConfig, load_config
from codenav.core.exceptions import (
    CodenavError,
    ConfigError,
    ContentReadError,
    ProviderError,
    RootResolutionError,
)

__all__ = [
    "CodenavConfig",
    "load_config",
    "CodenavError",
    "ConfigError",
    "ContentReadError",
    "ProviderError",
    "RootResolutionError",
]
