"""
Transport Module - Black Box Interface

Purpose: Send HTTP requests to the webservice endpoint
Interface: request(method, url, query=..., form=...) -> TransportResponse
Hidden: HTTP library, TLS settings, timeouts

Status inspection is left to the caller; a non-200 response is not an error here.
"""

from .http import HttpTransport, Transport, TransportResponse

__all__ = ["HttpTransport", "Transport", "TransportResponse"]
