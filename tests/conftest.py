"""
Shared pytest fixtures for crmgate tests.

This module provides common fixtures including:
- ScriptedTransport: fake HTTP transport with canned responses per operation
- MemoryStore: in-memory credential store
- Redis mocks for the redis store tests
"""

import json
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from crmgate.modules.api import Credential, SessionDocument
from crmgate.modules.auth import SessionAuthenticator, TokenAcquirer
from crmgate.modules.gateway import OperationGateway
from crmgate.modules.session import SessionModule
from crmgate.modules.transport import TransportResponse

NOW = 1_700_000_000.0
SESSION_KEY = "crmgate_session"


# =============================================================================
# Response helpers
# =============================================================================

def envelope(success: bool = True, result: Any = None, error: Optional[dict] = None,
             status: int = 200) -> TransportResponse:
    """Build a JSON envelope response."""
    payload: Dict[str, Any] = {"success": success}
    if result is not None:
        payload["result"] = result
    if error is not None:
        payload["error"] = error
    return TransportResponse(status_code=status, body=json.dumps(payload).encode("utf-8"))


def raw(body: bytes, status: int = 200) -> TransportResponse:
    return TransportResponse(status_code=status, body=body)


def challenge(token: str = "tok-1", expire_time: float = NOW + 300) -> TransportResponse:
    return envelope(result={"token": token, "serverTime": NOW, "expireTime": expire_time})


def login_ok(session_name: str = "sess-1") -> TransportResponse:
    return envelope(result={"sessionName": session_name, "userId": "19x1"})


def failure(code: str, message: str = "failed", status: int = 200) -> TransportResponse:
    return envelope(success=False, error={"code": code, "message": message}, status=status)


# =============================================================================
# Transport double
# =============================================================================

@dataclass
class RecordedRequest:
    """Record of a request sent through the ScriptedTransport."""
    method: str
    url: str
    query: Optional[Dict[str, Any]] = None
    form: Optional[Dict[str, Any]] = None

    @property
    def params(self) -> Dict[str, Any]:
        return self.query if self.query is not None else (self.form or {})

    @property
    def operation(self) -> str:
        return self.params.get("operation", "")


class ScriptedTransport:
    """
    Transport double returning queued responses per operation.

    Usage:
        transport.script("getchallenge", challenge())
        transport.script("login", raw(b""), login_ok())
    """

    def __init__(self):
        self._scripts: Dict[str, Deque[TransportResponse]] = defaultdict(deque)
        self._defaults: Dict[str, TransportResponse] = {}
        self.requests: List[RecordedRequest] = []

    def script(self, operation: str, *responses: TransportResponse) -> "ScriptedTransport":
        self._scripts[operation].extend(responses)
        return self

    def always(self, operation: str, response: TransportResponse) -> "ScriptedTransport":
        """Answer every (further) request for the operation with the same response."""
        self._defaults[operation] = response
        return self

    def request(self, method, url, query=None, form=None) -> TransportResponse:
        recorded = RecordedRequest(
            method=method,
            url=url,
            query=dict(query) if query is not None else None,
            form=dict(form) if form is not None else None,
        )
        self.requests.append(recorded)
        operation = recorded.operation
        if self._scripts[operation]:
            return self._scripts[operation].popleft()
        if operation in self._defaults:
            return self._defaults[operation]
        raise AssertionError(f"No response scripted for operation {operation!r}")

    @property
    def operations(self) -> List[str]:
        return [r.operation for r in self.requests]

    def requests_for(self, operation: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.operation == operation]


# =============================================================================
# Store double
# =============================================================================

@dataclass
class MemoryStore:
    """In-memory credential store."""
    driver: str = "file"
    data: Dict[str, bytes] = field(default_factory=dict)
    logins: int = 0

    def exists(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def record_login(self) -> None:
        self.logins += 1

    def document(self, key: str = SESSION_KEY) -> Optional[dict]:
        value = self.data.get(key)
        return json.loads(value) if value is not None else None

    def seed(self, document: SessionDocument, key: str = SESSION_KEY) -> None:
        self.data[key] = document.to_json().encode("utf-8")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def credential():
    return Credential(url="https://crm.example.com/webservice.php", username="admin",
                      access_key="secret-key")


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def session_module(transport, store, credential, clock):
    """SessionModule wired to the scripted transport and memory store (max_retries=3)."""
    return SessionModule(
        store=store,
        token_acquirer=TokenAcquirer(transport, max_retries=3),
        authenticator=SessionAuthenticator(transport, store, max_retries=3,
                                           session_key=SESSION_KEY),
        credential=credential,
        session_key=SESSION_KEY,
        clock=clock,
    )


@pytest.fixture
def gateway(transport, session_module):
    return OperationGateway(transport, session_module, persist_connection=False)


@pytest.fixture
def persistent_gateway(transport, session_module):
    return OperationGateway(transport, session_module, persist_connection=True)


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage: Dict[str, Any] = {}
    redis = MagicMock()

    def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        return True

    def mock_get(key):
        return storage.get(key)

    def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                count += 1
        return count

    def mock_exists(*keys):
        return sum(1 for k in keys if k in storage)

    def mock_incr(key):
        storage[key] = int(storage.get(key, 0)) + 1
        return storage[key]

    redis.set.side_effect = mock_set
    redis.get.side_effect = mock_get
    redis.delete.side_effect = mock_delete
    redis.exists.side_effect = mock_exists
    redis.incr.side_effect = mock_incr
    redis._storage = storage  # Expose for test assertions

    return redis
