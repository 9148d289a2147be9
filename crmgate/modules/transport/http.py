"""HTTP transport for the record API webservice endpoint."""

import logging
from dataclasses import dataclass
from typing import IO, Any, Mapping, Optional, Protocol, Union

import requests

from crmgate.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Status code and body of an HTTP response.

    ``body`` is either raw bytes or a readable, possibly already consumed,
    binary stream.
    """

    status_code: int
    body: Union[bytes, IO[bytes], None]


class Transport(Protocol):
    """Protocol for HTTP transports. Non-2xx statuses must not raise."""

    def request(
        self,
        method: str,
        url: str,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
    ) -> TransportResponse:
        ...


class HttpTransport:
    """Transport backed by a requests session."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        verify_ssl: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self._session = session or requests.Session()
        self._verify_ssl = verify_ssl
        self._timeout = timeout

    def request(
        self,
        method: str,
        url: str,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
    ) -> TransportResponse:
        """Send a request and return its status and body without judging the status."""
        operation = (query or form or {}).get("operation", "unknown")
        logger.debug(f"{method} {url} operation={operation}")
        try:
            response = self._session.request(
                method,
                url,
                params=query,
                data=form,
                timeout=self._timeout,
                verify=self._verify_ssl,
            )
        except requests.Timeout as err:
            raise TransportError(f"{operation} request to {url} timed out") from err
        except requests.RequestException as err:
            raise TransportError(f"{operation} request to {url} failed: {err}") from err

        return TransportResponse(status_code=response.status_code, body=response.content)

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
