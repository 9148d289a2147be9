"""Credential store interfaces following Black Box Design principles."""
from typing import Optional, Protocol

FILE_DRIVER = "file"
REDIS_DRIVER = "redis"
SUPPORTED_DRIVERS = (FILE_DRIVER, REDIS_DRIVER)


class CredentialStore(Protocol):
    """Protocol for session document persistence - allows swappable backends."""

    driver: str

    def exists(self, key: str) -> bool:
        ...

    def get(self, key: str) -> Optional[bytes]:
        """
        Read a stored value.

        Returns:
            Stored bytes or None if the key is absent
        """
        ...

    def put(self, key: str, value: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def record_login(self) -> None:
        """Count a successful login, where the backend keeps such a metric."""
        ...
