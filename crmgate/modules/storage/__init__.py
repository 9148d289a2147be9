"""
Storage Module - Black Box Interface

Purpose: Persist the cached session document
Interface: build_store(), CredentialStore.exists()/get()/put()/delete()
Hidden: File layout, Redis specifics, serialization

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from crmgate.errors import UnsupportedStore

from .file_store import FileCredentialStore
from .interfaces import FILE_DRIVER, REDIS_DRIVER, SUPPORTED_DRIVERS, CredentialStore
from .redis_store import RedisCredentialStore

logger = logging.getLogger(__name__)


def ensure_supported(driver: Optional[str]) -> None:
    """Raise UnsupportedStore unless the driver is a recognized backend."""
    if driver not in SUPPORTED_DRIVERS:
        raise UnsupportedStore(driver)


def build_store(
    driver: Optional[str],
    *,
    storage_dir: Union[str, Path, None] = None,
    redis_url: str = "redis://localhost:6379/0",
) -> CredentialStore:
    """
    Build the credential store named by the session driver.

    Raises:
        UnsupportedStore: The driver is neither "file" nor "redis"
    """
    ensure_supported(driver)
    if driver == FILE_DRIVER:
        base_dir = storage_dir if storage_dir is not None else Path.home() / ".crmgate"
        logger.info(f"Using file session store in {base_dir}")
        return FileCredentialStore(base_dir)
    logger.info("Using redis session store")
    return RedisCredentialStore.from_url(redis_url)


__all__ = [
    "FILE_DRIVER",
    "REDIS_DRIVER",
    "SUPPORTED_DRIVERS",
    "CredentialStore",
    "FileCredentialStore",
    "RedisCredentialStore",
    "build_store",
    "ensure_supported",
]
