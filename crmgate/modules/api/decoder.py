"""
Response decoding and envelope validation.

Every webservice response is wrapped in ``{success, result?, error?}``.
``decode`` is tolerant and only parses; ``validate`` enforces the envelope.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from crmgate.errors import MalformedResponse, RemoteError, UnexpectedStatus
from crmgate.modules.transport import TransportResponse

from .models import ApiResult

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 200


def _read_body(response: TransportResponse) -> bytes:
    body = response.body
    if body is None:
        return b""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")

    # Stream bodies may already have been read once by a caller
    seekable = getattr(body, "seekable", None)
    if callable(seekable) and seekable():
        body.seek(0)
    return body.read() or b""


def decode(response: TransportResponse) -> Optional[Dict[str, Any]]:
    """
    Parse the response body as a JSON object.

    Returns:
        The decoded object, or None for an empty, non-JSON or non-object body
    """
    raw = _read_body(response)
    if not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug(f"Response body is not valid JSON (status {response.status_code})")
        return None
    if not isinstance(data, dict):
        return None
    return data


def has_success(payload: Optional[Dict[str, Any]]) -> bool:
    """True when the decoded payload carries a ``success`` field."""
    return payload is not None and payload.get("success") is not None


def check_status(response: TransportResponse) -> None:
    """Raise UnexpectedStatus unless the HTTP status is 200."""
    if response.status_code != SUCCESS_STATUS:
        raise UnexpectedStatus(response.status_code)


def parse_envelope(payload: Dict[str, Any]) -> ApiResult:
    """
    Validate a decoded payload into an ApiResult without judging ``success``.

    ``success`` is coerced the way pydantic does for bools, so "false", "0"
    and "no" are failures.

    Raises:
        MalformedResponse: ``success`` is not a boolean, or ``error`` is not an object
    """
    try:
        return ApiResult.model_validate(payload)
    except ValidationError as err:
        raise MalformedResponse(f"Invalid API response envelope: {err.errors()[0]['msg']}") from err


def to_result(payload: Optional[Dict[str, Any]]) -> ApiResult:
    """
    Build an ApiResult from a decoded payload, enforcing the envelope.

    Raises:
        MalformedResponse: ``success`` is missing or invalid, or ``error`` is missing on failure
        RemoteError: The API reported a failure
    """
    if not has_success(payload):
        raise MalformedResponse("Success property not set on API response")

    envelope = parse_envelope(payload)
    if not envelope.success:
        if envelope.error is None:
            raise MalformedResponse("Error property not set on API response when success is false")
        raise RemoteError(envelope.error.code, envelope.error.message)

    return envelope


def validate(response: TransportResponse) -> ApiResult:
    """Full validation path: status check, then envelope check."""
    check_status(response)
    return to_result(decode(response))
