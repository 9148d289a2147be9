"""
Session Module - Black Box Interface

Purpose: Manage the API session lifecycle
Interface: session_id(), invalidate(), end_session()
Hidden: Freshness rules, challenge refresh, login restarts

Replaceable with any session backend that hands out a usable session id.
"""

from .session import MAX_SESSION_PASSES, SessionModule

__all__ = ["MAX_SESSION_PASSES", "SessionModule"]
