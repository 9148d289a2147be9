"""
API Module - Black Box Interface

Purpose: Data models and response envelope handling
Interface: SessionDocument, ApiResult, decode(), validate()
Hidden: JSON parsing, stream rewinding, envelope rules
"""

from . import decoder
from .models import (
    EVICTING_ERROR_CODES,
    ApiError,
    ApiResult,
    Credential,
    LoginOutcome,
    LoginStatus,
    Operation,
    SessionDocument,
)

__all__ = [
    "EVICTING_ERROR_CODES",
    "ApiError",
    "ApiResult",
    "Credential",
    "LoginOutcome",
    "LoginStatus",
    "Operation",
    "SessionDocument",
    "decoder",
]
