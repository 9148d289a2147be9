"""
Authentication Module - Black Box Interface

Purpose: Challenge/login handshakes against the record API
Interface: TokenAcquirer.acquire(), SessionAuthenticator.login()
Hidden: Login key derivation, retry of malformed responses, cache eviction
"""

from .challenge import TokenAcquirer
from .login import SessionAuthenticator
from .retry import request_until_envelope

__all__ = ["SessionAuthenticator", "TokenAcquirer", "request_until_envelope"]
