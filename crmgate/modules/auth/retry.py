"""Bounded retry of handshake requests against malformed responses."""

import logging
from typing import Any, Callable, Dict, Tuple

from crmgate.errors import RetryExhausted
from crmgate.modules.api import decoder
from crmgate.modules.transport import TransportResponse

logger = logging.getLogger(__name__)


def request_until_envelope(
    send: Callable[[], TransportResponse],
    operation: str,
    max_retries: int,
) -> Tuple[TransportResponse, Dict[str, Any]]:
    """
    Repeat a request until its body carries a ``success`` field.

    The endpoint intermittently answers with empty or unparsable bodies;
    those are retried, anything carrying ``success`` is returned as is.

    Args:
        send: Issues one request
        operation: Operation name, for logs and errors
        max_retries: Maximum number of attempts

    Returns:
        Tuple of (last response, its decoded payload)

    Raises:
        RetryExhausted: No attempt produced a ``success`` field
    """
    for attempt in range(1, max_retries + 1):
        response = send()
        payload = decoder.decode(response)
        if decoder.has_success(payload):
            logger.debug(f"{operation} answered on attempt {attempt}/{max_retries}")
            return response, payload
        logger.warning(
            f"{operation} attempt {attempt}/{max_retries} returned a malformed response "
            f"(status {response.status_code})"
        )

    raise RetryExhausted(operation, max_retries)
