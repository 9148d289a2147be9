"""
Operation gateway for the record API.

Every public operation follows the same sequence: obtain a session id,
send the operation request, close the session, then validate the response.
"""

import json
import logging
import re
from typing import Any, Dict, Mapping, Union

from crmgate.errors import RemoteError
from crmgate.modules.api import EVICTING_ERROR_CODES, ApiResult, Credential, Operation, decoder
from crmgate.modules.session import SessionModule
from crmgate.modules.transport import Transport

logger = logging.getLogger(__name__)

RECORD_ID_PATTERN = re.compile(r"^\d+x\d+$")


def validate_record_id(record_id: str) -> str:
    """
    Validate a record id of the form {module_code}x{item_id}, e.g. 4x12.

    Raises:
        ValueError: The id does not have that form
    """
    if not isinstance(record_id, str) or not RECORD_ID_PATTERN.match(record_id):
        raise ValueError(f"Record id must look like '<module>x<item>', e.g. '4x12', got {record_id!r}")
    return record_id


class OperationGateway:
    """Public query/retrieve/create/update/delete/describe surface."""

    def __init__(
        self,
        transport: Transport,
        session: SessionModule,
        persist_connection: bool = False,
    ):
        self.transport = transport
        self.session = session
        self.persist_connection = persist_connection

    @property
    def credential(self) -> Credential:
        return self.session.credential

    def connection(self, url: str, username: str, access_key: str) -> "OperationGateway":
        """
        Override the configured connection for all later calls on this gateway.

        The cached session lives under a single store key, so a session issued
        for another endpoint or user is dropped. Changing only the access key
        keeps it.
        """
        previous = self.session.credential
        self.session.credential = Credential(url=url, username=username, access_key=access_key)
        if (previous.url, previous.username) != (url, username):
            logger.info(f"Connection changed to {username} at {url}, dropping cached session")
            self.session.end_session()
        return self

    def query(self, query: str) -> ApiResult:
        """Run a query string and return the matching records."""
        return self._call("GET", Operation.QUERY, {"query": query})

    def retrieve(self, record_id: str) -> ApiResult:
        """Retrieve one record by id ({module_code}x{item_id})."""
        return self._call("GET", Operation.RETRIEVE, {"id": validate_record_id(record_id)})

    def create(self, element_type: str, data: Union[Mapping[str, Any], str]) -> ApiResult:
        """
        Create a record of the given element type.

        The remote service rejects records without ``assigned_user_id``
        (an id such as '19x1'); that check is left to the service.

        Args:
            element_type: Module name, e.g. "Contacts"
            data: Field values, as a mapping or an already JSON-encoded string
        """
        element = data if isinstance(data, str) else json.dumps(dict(data))
        return self._call(
            "POST", Operation.CREATE, {"element": element, "elementType": element_type}
        )

    def update(self, obj: Mapping[str, Any]) -> ApiResult:
        """Update a record from a previously retrieved object with altered fields."""
        return self._call("POST", Operation.UPDATE, {"element": json.dumps(dict(obj))})

    def delete(self, record_id: str) -> ApiResult:
        """Delete one record by id ({module_code}x{item_id})."""
        return self._call("GET", Operation.DELETE, {"id": validate_record_id(record_id)})

    def describe(self, element_type: str) -> ApiResult:
        """Describe a module, returning its field metadata."""
        return self._call("GET", Operation.DESCRIBE, {"elementType": element_type})

    def close(self, session_id: str) -> ApiResult:
        """
        Log out of the given session unless connections are persisted.

        Raises:
            UnexpectedStatus, MalformedResponse, RemoteError: The logout failed
        """
        if self.persist_connection:
            return ApiResult(success=True)

        response = self.transport.request(
            "POST",
            self.credential.url,
            query={"operation": Operation.LOGOUT.value, "sessionName": session_id},
        )
        self.session.invalidate(session_id)
        result = decoder.validate(response)
        logger.info("Logged out of API session")
        return result

    def _call(self, method: str, operation: Operation, params: Dict[str, Any]) -> ApiResult:
        session_id = self.session.session_id()

        request_params = {"operation": operation.value, "sessionName": session_id, **params}
        if method == "GET":
            response = self.transport.request(method, self.credential.url, query=request_params)
        else:
            response = self.transport.request(method, self.credential.url, form=request_params)

        self.close(session_id)

        try:
            return decoder.validate(response)
        except RemoteError as err:
            if err.code in EVICTING_ERROR_CODES:
                # Session expired on the server while the token was still valid
                self.session.invalidate(session_id)
            raise
