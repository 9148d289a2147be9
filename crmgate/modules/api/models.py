"""
Crmgate shared data models.

These models define the structure of all data passed between
components: the persisted session document, the decoded response
envelope and the outcome of a login handshake.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Enums


class Operation(str, Enum):
    """Operations understood by the remote webservice."""

    GETCHALLENGE = "getchallenge"
    LOGIN = "login"
    LOGOUT = "logout"
    QUERY = "query"
    RETRIEVE = "retrieve"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DESCRIBE = "describe"


class LoginStatus(str, Enum):
    """Outcome of a login handshake."""

    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


# Remote error codes that mean the cached session document is no longer usable
EVICTING_ERROR_CODES = frozenset({"INVALID_USER_CREDENTIALS", "INVALID_SESSIONID"})


# Persisted Models


class SessionDocument(BaseModel):
    """
    Cached session state shared across process invocations.

    ``session_id`` is only ever set by a login performed with the ``token``
    stored in the same document.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = Field(None, description="Challenge token")
    expire_time: Optional[float] = Field(
        None, alias="expireTime", description="Token expiry, seconds since epoch"
    )
    session_id: Optional[str] = Field(
        None, alias="sessionId", description="Session name issued by login"
    )

    def is_stale(self, now: float) -> bool:
        """A document without a usable token or with a passed expiry must be refreshed."""
        if self.expire_time is None or self.token is None:
            return True
        return self.expire_time < now or not self.token

    def with_session(self, session_id: Optional[str]) -> "SessionDocument":
        return self.model_copy(update={"session_id": session_id})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: Optional[bytes]) -> Optional["SessionDocument"]:
        """Parse a stored document; unreadable content counts as no document."""
        if not raw:
            return None
        try:
            return cls.model_validate_json(raw)
        except ValidationError:
            return None


# Response Models


class ApiError(BaseModel):
    """Error object of a failed response envelope."""

    code: Optional[str] = None
    message: Optional[str] = None

    @field_validator("code", "message", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class ApiResult(BaseModel):
    """Decoded response envelope."""

    success: bool
    result: Any = None
    error: Optional[ApiError] = None


# Process-scoped values


@dataclass(frozen=True)
class Credential:
    """Endpoint and API user a client authenticates as."""

    url: str
    username: str
    access_key: str

    def __repr__(self) -> str:
        return f"Credential(url={self.url!r}, username={self.username!r}, access_key='***')"


@dataclass
class LoginOutcome:
    """Standardized login result."""

    status: LoginStatus
    session_id: Optional[str] = None
    error: Optional[ApiError] = None

    @property
    def authenticated(self) -> bool:
        return self.status is LoginStatus.AUTHENTICATED

    @classmethod
    def authenticated_as(cls, session_id: str) -> "LoginOutcome":
        return cls(status=LoginStatus.AUTHENTICATED, session_id=session_id)

    @classmethod
    def rejected(cls, error: ApiError) -> "LoginOutcome":
        return cls(status=LoginStatus.REJECTED, error=error)
