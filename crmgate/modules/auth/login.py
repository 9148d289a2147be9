"""
Login handshake for the record API.

This module turns a challenge token into a session name and keeps the
cached session document in step with the outcome.
"""

import hashlib
import logging

from crmgate.errors import MalformedResponse
from crmgate.modules.api import (
    EVICTING_ERROR_CODES,
    ApiError,
    Credential,
    LoginOutcome,
    Operation,
    SessionDocument,
    decoder,
)
from crmgate.modules.storage import CredentialStore, ensure_supported
from crmgate.modules.transport import Transport

from .retry import request_until_envelope

logger = logging.getLogger(__name__)


class SessionAuthenticator:
    """
    Performs the login handshake.

    A rejected credential (INVALID_USER_CREDENTIALS, INVALID_SESSIONID) is
    returned as a REJECTED LoginOutcome after the cached document has been
    evicted; every other failure raises.
    """

    def __init__(
        self,
        transport: Transport,
        store: CredentialStore,
        max_retries: int,
        session_key: str,
    ):
        self.transport = transport
        self.store = store
        self.max_retries = max_retries
        self.session_key = session_key

    @staticmethod
    def derive_key(token: str, access_key: str) -> str:
        """Login key presented instead of the raw access key: md5(token + access_key)."""
        return hashlib.md5(f"{token}{access_key}".encode("utf-8")).hexdigest()

    def login(self, document: SessionDocument, credential: Credential) -> LoginOutcome:
        """
        Log in with the token of the given document.

        Args:
            document: Working session document (token must be set)
            credential: Endpoint, user and access key

        Returns:
            LoginOutcome, AUTHENTICATED with the session id or REJECTED with the remote error

        Raises:
            RetryExhausted: Every attempt returned a malformed response
            UnexpectedStatus: HTTP status other than 200
            MalformedResponse: Envelope fields missing
            RemoteError: Any other remote failure
            UnsupportedStore: The store driver is not recognized
        """
        form = {
            "operation": Operation.LOGIN.value,
            "username": credential.username,
            "accessKey": self.derive_key(document.token or "", credential.access_key),
        }

        response, payload = request_until_envelope(
            lambda: self.transport.request("POST", credential.url, form=form),
            Operation.LOGIN.value,
            self.max_retries,
        )

        envelope = decoder.parse_envelope(payload)
        if not envelope.success:
            api_error = envelope.error
            if api_error is not None and api_error.code in EVICTING_ERROR_CODES:
                self._evict(api_error)
                return LoginOutcome.rejected(api_error)
            # A failed envelope always raises here
            decoder.check_status(response)
            decoder.to_result(payload)

        decoder.check_status(response)
        result = decoder.to_result(payload).result
        session_id = result.get("sessionName") if isinstance(result, dict) else None
        if not session_id:
            raise MalformedResponse("sessionName property not set on login response")

        self._remember(document, session_id)
        logger.info(f"Logged in as {credential.username}")
        return LoginOutcome.authenticated_as(session_id)

    def _evict(self, error: ApiError) -> None:
        if self.store.exists(self.session_key):
            self.store.delete(self.session_key)
        logger.info(f"Evicted cached session after login rejection {error.code}")

    def _remember(self, document: SessionDocument, session_id: str) -> None:
        """Read-modify-write the stored document to add the session id."""
        ensure_supported(self.store.driver)
        self.store.record_login()

        stored = SessionDocument.from_json(self.store.get(self.session_key))
        if stored is None or stored.token != document.token:
            # The document was removed or refreshed by someone else meanwhile;
            # a session id must not be attached to a different token
            logger.debug("Stored session document changed during login, not caching session id")
            return

        self.store.put(self.session_key, stored.with_session(session_id).to_json().encode("utf-8"))
