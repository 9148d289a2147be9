"""
Gateway Module - Black Box Interface

Purpose: Public record operations over a managed session
Interface: query(), retrieve(), create(), update(), delete(), describe(), close()
Hidden: Session acquisition, request shapes, logout policy
"""

from .gateway import OperationGateway, validate_record_id

__all__ = ["OperationGateway", "validate_record_id"]
