"""
Config Module - Black Box Interface

Purpose: Client configuration management
Interface: ConfigProvider.get_client_config(), get_config_schema()
Hidden: Config sources, validation logic, environment parsing
"""

from .provider import (
    ClientConfig,
    ConfigProvider,
    DictConfigProvider,
    EnvConfigProvider,
    YamlConfigProvider,
    get_config_schema,
)

__all__ = [
    "ClientConfig",
    "ConfigProvider",
    "DictConfigProvider",
    "EnvConfigProvider",
    "YamlConfigProvider",
    "get_config_schema",
]
