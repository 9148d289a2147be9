"""
Crmgate Exceptions.

All client exceptions inherit from CrmGateError. Every error carries an
ErrorKind so callers can branch on data instead of on exception classes.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of client failures."""

    UNSUPPORTED_STORE = "unsupported_store"
    UNEXPECTED_STATUS = "unexpected_status"
    MALFORMED_RESPONSE = "malformed_response"
    REMOTE_ERROR = "remote_error"
    RETRY_EXHAUSTED = "retry_exhausted"
    TRANSPORT = "transport"


class CrmGateError(Exception):
    """Base exception for all crmgate errors."""

    kind: ErrorKind

    def __init__(self, message: str, kind: ErrorKind):
        super().__init__(message)
        self.kind = kind
        self.message = message


class UnsupportedStore(CrmGateError):
    """The configured session driver is not one of the recognized backends."""

    def __init__(self, driver: Optional[str]):
        super().__init__(
            f"Session driver type of {driver} is not supported", ErrorKind.UNSUPPORTED_STORE
        )
        self.driver = driver


class UnexpectedStatus(CrmGateError):
    """The API answered with an HTTP status other than 200."""

    def __init__(self, status_code: int):
        super().__init__(
            f"API request did not complete correctly - Response code: {status_code}",
            ErrorKind.UNEXPECTED_STATUS,
        )
        self.status_code = status_code


class MalformedResponse(CrmGateError):
    """The response envelope is missing a required field."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.MALFORMED_RESPONSE)


class RemoteError(CrmGateError):
    """The API reported a failure; code and message are kept verbatim."""

    def __init__(self, code: Optional[str], message: Optional[str]):
        super().__init__(message or "", ErrorKind.REMOTE_ERROR)
        self.code = code


class RetryExhausted(CrmGateError):
    """No usable response was observed within the retry budget."""

    def __init__(self, operation: str, max_retries: int):
        super().__init__(
            f"Could not complete {operation} request within {max_retries} tries",
            ErrorKind.RETRY_EXHAUSTED,
        )
        self.operation = operation
        self.max_retries = max_retries


class TransportError(CrmGateError):
    """The HTTP request could not be sent or no response was received."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.TRANSPORT)


__all__ = [
    "CrmGateError",
    "ErrorKind",
    "MalformedResponse",
    "RemoteError",
    "RetryExhausted",
    "TransportError",
    "UnexpectedStatus",
    "UnsupportedStore",
]
