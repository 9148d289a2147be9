"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Protocol

import yaml


# Configuration Contract: Required and Optional Keys
# This defines the black box interface - what the config module guarantees to provide

REQUIRED_CONFIG_KEYS = {
    "url": "Webservice endpoint of the record API",
    "username": "API user name",
    "access_key": "Access key of the API user",
}

OPTIONAL_CONFIG_KEYS = {
    "session_driver": {
        "description": "Backing store for the cached session (file or redis)",
        "default": "file",
    },
    "persist_connection": {
        "description": "Keep the session open after each operation instead of logging out",
        "default": False,
    },
    "max_retries": {
        "description": "Attempts allowed for getchallenge/login against malformed responses",
        "default": 3,
    },
    "session_key": {
        "description": "Store key of the cached session document",
        "default": "crmgate_session",
    },
    "storage_dir": {
        "description": "Directory used by the file session driver",
        "default": "~/.crmgate",
    },
    "redis_url": {
        "description": "Redis connection URL used by the redis session driver",
        "default": "redis://localhost:6379/0",
    },
    "verify_ssl": {
        "description": "Verify TLS certificates of the API endpoint",
        "default": True,
    },
    "timeout": {
        "description": "HTTP timeout in seconds",
        "default": 30.0,
    },
    "log_level": {
        "description": "Logging level (DEBUG, INFO, WARNING, ERROR)",
        "default": "INFO",
    },
}

# camelCase option names accepted in YAML files and mappings, mapped to
# ClientConfig attributes
_OPTION_ALIASES = {
    "accessKey": "access_key",
    "accesskey": "access_key",
    "sessionDriver": "session_driver",
    "sessiondriver": "session_driver",
    "persistConnection": "persist_connection",
    "persistconnection": "persist_connection",
    "maxRetries": "max_retries",
}


@dataclass
class ClientConfig:
    """Record API client configuration."""
    url: str
    username: str
    access_key: str
    session_driver: str = "file"
    persist_connection: bool = False
    max_retries: int = 3
    session_key: str = "crmgate_session"
    storage_dir: Path = field(default_factory=lambda: Path.home() / ".crmgate")
    redis_url: str = "redis://localhost:6379/0"
    verify_ssl: bool = True
    timeout: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self):
        if isinstance(self.storage_dir, str):
            self.storage_dir = Path(self.storage_dir).expanduser()
        if isinstance(self.max_retries, bool) or int(self.max_retries) < 1:
            raise ValueError(f"max_retries must be a positive integer, got {self.max_retries!r}")
        self.max_retries = int(self.max_retries)

    def to_dict(self) -> Dict[str, Any]:
        """Export config without the access key."""
        return {
            "url": self.url,
            "username": self.username,
            "session_driver": self.session_driver,
            "persist_connection": self.persist_connection,
            "max_retries": self.max_retries,
            "session_key": self.session_key,
            "storage_dir": str(self.storage_dir),
            "redis_url": self.redis_url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "log_level": self.log_level,
        }


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_client_config(self) -> ClientConfig:
        """Get client configuration."""
        ...


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _build_config(values: Mapping[str, Any]) -> ClientConfig:
    """Validate required keys and coerce option types into a ClientConfig."""
    normalized: Dict[str, Any] = {}
    for key, value in values.items():
        normalized[_OPTION_ALIASES.get(key, key)] = value

    missing_keys = [
        key for key in REQUIRED_CONFIG_KEYS if not normalized.get(key)
    ]
    if missing_keys:
        raise ValueError(
            f"Missing required configuration keys: {', '.join(missing_keys)}. "
            f"Check environment variables or the configuration file."
        )

    kwargs: Dict[str, Any] = {key: str(normalized[key]) for key in REQUIRED_CONFIG_KEYS}
    for key, spec in OPTIONAL_CONFIG_KEYS.items():
        value = normalized.get(key)
        if value is None:
            continue
        default = spec["default"]
        if isinstance(default, bool):
            kwargs[key] = _as_bool(value)
        elif isinstance(default, int):
            kwargs[key] = int(value)
        elif isinstance(default, float):
            kwargs[key] = float(value)
        else:
            kwargs[key] = str(value)
    return ClientConfig(**kwargs)


class DictConfigProvider:
    """Configuration provider backed by an in-memory mapping."""

    def __init__(self, values: Mapping[str, Any]):
        self._values = dict(values)

    def get_client_config(self) -> ClientConfig:
        return _build_config(self._values)


class EnvConfigProvider:
    """Environment-based configuration provider."""

    ENV_MAP = {
        "CRMGATE_URL": "url",
        "CRMGATE_USERNAME": "username",
        "CRMGATE_ACCESS_KEY": "access_key",
        "CRMGATE_SESSION_DRIVER": "session_driver",
        "CRMGATE_PERSIST_CONNECTION": "persist_connection",
        "CRMGATE_MAX_RETRIES": "max_retries",
        "CRMGATE_SESSION_KEY": "session_key",
        "CRMGATE_STORAGE_DIR": "storage_dir",
        "REDIS_URL": "redis_url",
        "CRMGATE_SSL_VERIFY": "verify_ssl",
        "CRMGATE_TIMEOUT": "timeout",
        "LOG_LEVEL": "log_level",
    }

    def get_client_config(self) -> ClientConfig:
        """Get client configuration from environment variables."""
        values = {}
        for env_var, key in self.ENV_MAP.items():
            value = os.getenv(env_var)
            if value is not None:
                values[key] = value
        return _build_config(values)


class YamlConfigProvider:
    """YAML file configuration provider, with environment fallback for unset keys."""

    def __init__(self, path: str, env_fallback: bool = True):
        self.path = path
        self.env_fallback = env_fallback

    def get_client_config(self) -> ClientConfig:
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {self.path} must contain a mapping")

        values: Dict[str, Any] = {}
        if self.env_fallback:
            for env_var, key in EnvConfigProvider.ENV_MAP.items():
                value = os.getenv(env_var)
                if value is not None:
                    values[key] = value
        for key, value in data.items():
            values[_OPTION_ALIASES.get(key, key)] = value
        return _build_config(values)


def get_config_schema() -> Dict[str, Any]:
    """
    Get the configuration schema (contract).

    Returns:
        Dictionary with 'required' and 'optional' key specifications

    Example:
        >>> schema = get_config_schema()
        >>> print(schema['required']['url'])
        'Webservice endpoint of the record API'
    """
    return {
        "required": REQUIRED_CONFIG_KEYS.copy(),
        "optional": OPTIONAL_CONFIG_KEYS.copy(),
    }
