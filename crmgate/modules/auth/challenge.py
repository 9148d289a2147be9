"""
Challenge handshake for the record API.

A challenge token is short lived and is combined with the access key
to derive the login key.
"""

import logging

from crmgate.errors import MalformedResponse
from crmgate.modules.api import Credential, Operation, SessionDocument, decoder
from crmgate.modules.transport import Transport

from .retry import request_until_envelope

logger = logging.getLogger(__name__)


class TokenAcquirer:
    """Fetches fresh challenge tokens with a bounded number of attempts."""

    def __init__(self, transport: Transport, max_retries: int):
        self.transport = transport
        self.max_retries = max_retries

    def acquire(self, credential: Credential) -> SessionDocument:
        """
        Perform the getchallenge handshake.

        Args:
            credential: Endpoint and user to request the challenge for

        Returns:
            A new SessionDocument holding only token and expiry

        Raises:
            RetryExhausted: Every attempt returned a malformed response
            UnexpectedStatus: The final response was not HTTP 200
            RemoteError: The API refused the challenge
        """
        query = {"operation": Operation.GETCHALLENGE.value, "username": credential.username}

        response, _ = request_until_envelope(
            lambda: self.transport.request("GET", credential.url, query=query),
            Operation.GETCHALLENGE.value,
            self.max_retries,
        )

        challenge = decoder.validate(response)
        result = challenge.result
        if not isinstance(result, dict) or "token" not in result:
            raise MalformedResponse("Token property not set on challenge response")

        document = SessionDocument(token=result["token"], expire_time=result.get("expireTime"))
        logger.info(f"Challenge acquired for {credential.username}, expires at {document.expire_time}")
        return document
