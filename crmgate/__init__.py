"""
Crmgate - Record API client with a cached, self-renewing session

A client for a record-management webservice that authenticates through a
challenge/login handshake and caches the session across process runs.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- All communication through defined interfaces

Modules:
- storage: Session document persistence (file, redis)
- transport: HTTP requests to the webservice endpoint
- api: Data models and response envelope decoding
- auth: Challenge and login handshakes
- session: Session lifecycle (cache, refresh, re-login)
- gateway: Public record operations
"""

from .config import ClientConfig, DictConfigProvider, EnvConfigProvider, YamlConfigProvider
from .errors import (
    CrmGateError,
    ErrorKind,
    MalformedResponse,
    RemoteError,
    RetryExhausted,
    TransportError,
    UnexpectedStatus,
    UnsupportedStore,
)
from .factory import ClientFactory
from .modules.api import ApiResult, SessionDocument
from .modules.gateway import OperationGateway

__version__ = "1.0.0"

__all__ = [
    "ApiResult",
    "ClientConfig",
    "ClientFactory",
    "CrmGateError",
    "DictConfigProvider",
    "EnvConfigProvider",
    "ErrorKind",
    "MalformedResponse",
    "OperationGateway",
    "RemoteError",
    "RetryExhausted",
    "SessionDocument",
    "TransportError",
    "UnexpectedStatus",
    "UnsupportedStore",
    "YamlConfigProvider",
]
