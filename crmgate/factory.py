"""
Client Factory following Black Box Design principles.

This factory:
- Constructs the client stack based on configuration
- Wires dependencies together
- Returns only the gateway facade (hiding implementation)
"""

import logging
import time
from typing import Callable, Optional

from .config.provider import ClientConfig, ConfigProvider, EnvConfigProvider
from .modules.api import Credential
from .modules.auth import SessionAuthenticator, TokenAcquirer
from .modules.gateway import OperationGateway
from .modules.session import SessionModule
from .modules.storage import CredentialStore, build_store
from .modules.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class ClientFactory:
    """
    Factory for building the client stack.

    This is the composition root that:
    - Creates the store, transport and handshake components
    - Wires them together via dependency injection
    - Returns only the public gateway
    """

    @staticmethod
    def build(
        config_provider: Optional[ConfigProvider] = None,
        transport: Optional[Transport] = None,
        store: Optional[CredentialStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> OperationGateway:
        """
        Build the complete client stack.

        Args:
            config_provider: Configuration provider (environment by default)
            transport: Optional transport, an HttpTransport is built otherwise
            store: Optional credential store, built from session_driver otherwise
            clock: Current time source used for token freshness

        Returns:
            OperationGateway facade

        Raises:
            UnsupportedStore: session_driver names no recognized backend
            ValueError: Required configuration is missing
        """
        config = (config_provider or EnvConfigProvider()).get_client_config()
        return ClientFactory.from_config(config, transport=transport, store=store, clock=clock)

    @staticmethod
    def from_config(
        config: ClientConfig,
        transport: Optional[Transport] = None,
        store: Optional[CredentialStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> OperationGateway:
        """Build the client stack from an already loaded configuration."""
        if store is None:
            store = build_store(
                config.session_driver,
                storage_dir=config.storage_dir,
                redis_url=config.redis_url,
            )
        if transport is None:
            transport = HttpTransport(verify_ssl=config.verify_ssl, timeout=config.timeout)

        credential = Credential(
            url=config.url, username=config.username, access_key=config.access_key
        )
        session = SessionModule(
            store=store,
            token_acquirer=TokenAcquirer(transport, config.max_retries),
            authenticator=SessionAuthenticator(
                transport, store, config.max_retries, config.session_key
            ),
            credential=credential,
            session_key=config.session_key,
            clock=clock,
        )

        logger.info(
            f"Built client for {config.url} as {config.username} "
            f"(driver={store.driver}, persist_connection={config.persist_connection})"
        )
        return OperationGateway(transport, session, persist_connection=config.persist_connection)
