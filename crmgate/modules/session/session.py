import logging
import time
from typing import Callable, Optional

from crmgate.errors import RemoteError
from crmgate.modules.api import Credential, SessionDocument
from crmgate.modules.auth import SessionAuthenticator, TokenAcquirer
from crmgate.modules.storage import CredentialStore, ensure_supported

logger = logging.getLogger(__name__)

# Passes through load/refresh/login before a rejected login is surfaced.
# The second pass always starts from a fresh challenge.
MAX_SESSION_PASSES = 2


class SessionModule:
    def __init__(
        self,
        store: CredentialStore,
        token_acquirer: TokenAcquirer,
        authenticator: SessionAuthenticator,
        credential: Credential,
        session_key: str = "crmgate_session",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize session module.

        Args:
            store: Backing store of the cached session document
            token_acquirer: Performs the getchallenge handshake
            authenticator: Performs the login handshake
            credential: Endpoint, user and access key to authenticate with
            session_key: Store key of the session document
            clock: Current time in seconds since epoch
        """
        self.store = store
        self.token_acquirer = token_acquirer
        self.authenticator = authenticator
        self.credential = credential
        self.session_key = session_key
        self.clock = clock

    def session_id(self) -> str:
        """
        Get a usable session id, from the cache or fresh from the API.

        Returns:
            Session id to present on operation requests

        Logic:
        1. Load the cached document
        2. Refresh it from a new challenge if it is stale
        3. Return its session id, or log in with its token
        4. On a rejected login (document evicted) start over, at most
           MAX_SESSION_PASSES times

        Raises:
            UnsupportedStore: The store driver is not recognized
            RetryExhausted: A handshake got no usable response
            RemoteError: The API failed the handshake, or kept rejecting the login
        """
        ensure_supported(self.store.driver)

        last_rejection = None
        for session_pass in range(1, MAX_SESSION_PASSES + 1):
            document = self.load()
            if document is None or document.is_stale(self.clock()):
                document = self.refresh()

            if document.session_id:
                logger.debug("Using cached session id")
                return document.session_id

            outcome = self.authenticator.login(document, self.credential)
            if outcome.authenticated:
                return outcome.session_id

            last_rejection = outcome.error
            logger.warning(
                f"Login rejected with {last_rejection.code} "
                f"(pass {session_pass}/{MAX_SESSION_PASSES}), restarting from a fresh challenge"
            )

        raise RemoteError(last_rejection.code, last_rejection.message)

    def load(self) -> Optional[SessionDocument]:
        """Read the cached session document, None if absent or unreadable."""
        return SessionDocument.from_json(self.store.get(self.session_key))

    def refresh(self) -> SessionDocument:
        """Replace the cached document with one built from a new challenge."""
        document = self.token_acquirer.acquire(self.credential)
        self.store.put(self.session_key, document.to_json().encode("utf-8"))
        return document

    def invalidate(self, session_id: str) -> None:
        """
        Forget a session id that was closed on the server.

        The token is kept so the next call can log in again without a new
        challenge while it is still valid.
        """
        document = self.load()
        if document is None or document.session_id != session_id:
            return
        self.store.put(self.session_key, document.with_session(None).to_json().encode("utf-8"))
        logger.debug("Cleared closed session id from cache")

    def end_session(self) -> None:
        """Drop the cached session document."""
        if self.store.exists(self.session_key):
            self.store.delete(self.session_key)
