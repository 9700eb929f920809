"""Configuration package exports."""

from .config_loader import ConfigLoader, load_config
from .model import (
    MiscConfig,
    ObserverConfig,
    RawQueryConfig,
    ServerConfig,
    TelegramConfig,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "ObserverConfig",
    "RawQueryConfig",
    "ServerConfig",
    "MiscConfig",
    "TelegramConfig",
]
