"""Configuration module for nanoroom."""

from nanoroom.config.loader import get_config_path, load_config, save_config
from nanoroom.config.schema import Config, LoggingConfig, RoomConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "RoomConfig",
    "load_config",
    "save_config",
    "get_config_path",
]
