"""
Unit tests for the operation gateway.
"""

import json

import pytest

from crmgate.errors import MalformedResponse, RemoteError, UnexpectedStatus
from crmgate.modules.api import SessionDocument

from conftest import NOW, envelope, failure, raw


@pytest.fixture
def logged_in(store):
    """Store holding a fresh document with an open session."""
    store.seed(SessionDocument(token="tok-1", expire_time=NOW + 300, session_id="sess-1"))
    return store


@pytest.fixture
def logout_ok(transport):
    transport.always("logout", envelope(result={"message": "successfull"}))
    return transport


class TestOperations:
    """Test request shapes of each operation."""

    def test_query(self, gateway, transport, logged_in, logout_ok):
        records = [{"id": "12x7", "lastname": "Smith"}]
        transport.script("query", envelope(result=records))

        result = gateway.query("SELECT * FROM Contacts LIMIT 1;")

        assert result.result == records
        request = transport.requests_for("query")[0]
        assert request.method == "GET"
        assert request.query == {
            "operation": "query",
            "sessionName": "sess-1",
            "query": "SELECT * FROM Contacts LIMIT 1;",
        }

    def test_retrieve(self, gateway, transport, logged_in, logout_ok):
        transport.script("retrieve", envelope(result={"id": "4x12"}))

        assert gateway.retrieve("4x12").result == {"id": "4x12"}
        assert transport.requests_for("retrieve")[0].query == {
            "operation": "retrieve", "sessionName": "sess-1", "id": "4x12"
        }

    @pytest.mark.parametrize("bad_id", ["12", "x12", "4x", "4-12", ""])
    def test_malformed_record_id_is_rejected_before_any_request(self, gateway, transport, bad_id):
        with pytest.raises(ValueError):
            gateway.retrieve(bad_id)
        with pytest.raises(ValueError):
            gateway.delete(bad_id)
        assert transport.requests == []

    def test_create_encodes_mapping(self, gateway, transport, logged_in, logout_ok):
        transport.script("create", envelope(result={"id": "12x9"}))
        data = {"lastname": "Smith", "assigned_user_id": "19x1"}

        gateway.create("Contacts", data)

        request = transport.requests_for("create")[0]
        assert request.method == "POST"
        assert request.form["elementType"] == "Contacts"
        assert request.form["sessionName"] == "sess-1"
        assert json.loads(request.form["element"]) == data

    def test_create_without_owner_field_is_still_sent(self, gateway, transport, logged_in, logout_ok):
        transport.script("create", envelope(result={"id": "12x9"}))

        gateway.create("Contacts", {"lastname": "Smith"})

        request = transport.requests_for("create")[0]
        assert json.loads(request.form["element"]) == {"lastname": "Smith"}

    def test_create_passes_encoded_string_through(self, gateway, transport, logged_in, logout_ok):
        transport.script("create", envelope(result={"id": "12x9"}))

        gateway.create("Leads", '{"lastname": "Doe"}')

        assert transport.requests_for("create")[0].form["element"] == '{"lastname": "Doe"}'

    def test_update_sends_json_element(self, gateway, transport, logged_in, logout_ok):
        record = {"id": "12x7", "lastname": "Smythe", "assigned_user_id": "19x1"}
        transport.script("update", envelope(result=record))

        assert gateway.update(record).result == record

        request = transport.requests_for("update")[0]
        assert request.method == "POST"
        assert json.loads(request.form["element"]) == record

    def test_delete(self, gateway, transport, logged_in, logout_ok):
        transport.script("delete", envelope(result={"status": "successful"}))

        gateway.delete("12x7")

        request = transport.requests_for("delete")[0]
        assert request.method == "GET"
        assert request.query["id"] == "12x7"

    def test_describe(self, gateway, transport, logged_in, logout_ok):
        fields = {"label": "Contacts", "fields": [{"name": "lastname"}]}
        transport.script("describe", envelope(result=fields))

        assert gateway.describe("Contacts").result == fields
        assert transport.requests_for("describe")[0].query["elementType"] == "Contacts"


class TestSessionFlow:
    """Test ordering of session acquisition, operation and close."""

    def test_full_flow_order_from_empty_store(self, gateway, transport, store, logout_ok):
        transport.script("getchallenge", envelope(result={"token": "tok-1", "expireTime": NOW + 300}))
        transport.script("login", envelope(result={"sessionName": "sess-1"}))
        transport.script("query", envelope(result=[]))

        gateway.query("SELECT * FROM Accounts;")

        assert transport.operations == ["getchallenge", "login", "query", "logout"]

    def test_logout_sends_session_and_forgets_it(self, gateway, transport, logged_in, logout_ok):
        transport.script("describe", envelope(result={}))

        gateway.describe("Accounts")

        logout = transport.requests_for("logout")[0]
        assert logout.method == "POST"
        assert logout.query == {"operation": "logout", "sessionName": "sess-1"}
        assert "sessionId" not in logged_in.document()
        assert logged_in.document()["token"] == "tok-1"

    def test_persist_connection_never_logs_out(self, persistent_gateway, transport, logged_in):
        transport.script("query", envelope(result=[]))
        transport.script("retrieve", envelope(result={}))

        persistent_gateway.query("SELECT * FROM Accounts;")
        persistent_gateway.retrieve("3x1")

        assert "logout" not in transport.operations
        assert logged_in.document()["sessionId"] == "sess-1"

    def test_persistent_close_is_local(self, persistent_gateway, transport):
        result = persistent_gateway.close("sess-1")

        assert result.success is True
        assert transport.requests == []

    def test_operation_error_surfaces_after_close(self, gateway, transport, logged_in, logout_ok):
        transport.script("retrieve", failure("RECORD_NOT_FOUND", "Record you are trying to access is not found"))

        with pytest.raises(RemoteError) as exc_info:
            gateway.retrieve("4x99")

        assert exc_info.value.code == "RECORD_NOT_FOUND"
        assert transport.operations == ["retrieve", "logout"]

    def test_invalid_session_on_operation_clears_cached_id(self, persistent_gateway, transport,
                                                           logged_in):
        transport.script("query", failure("INVALID_SESSIONID", "Session Identifier provided is Invalid"))

        with pytest.raises(RemoteError):
            persistent_gateway.query("SELECT * FROM Accounts;")

        assert "sessionId" not in logged_in.document()

    def test_logout_failure_propagates(self, gateway, transport, logged_in):
        transport.script("query", envelope(result=[]))
        transport.script("logout", envelope(result={}, status=500))

        with pytest.raises(UnexpectedStatus):
            gateway.query("SELECT * FROM Accounts;")

    def test_malformed_operation_response(self, gateway, transport, logged_in, logout_ok):
        transport.script("query", raw(b""))

        with pytest.raises(MalformedResponse):
            gateway.query("SELECT * FROM Accounts;")

    def test_connection_override_applies_to_operations(self, gateway, transport, logged_in, logout_ok):
        transport.script("getchallenge", envelope(result={"token": "tok-eu", "expireTime": NOW + 300}))
        transport.script("login", envelope(result={"sessionName": "sess-eu"}))
        transport.script("query", envelope(result=[]))

        returned = gateway.connection("https://eu.example.com/webservice.php", "api", "k")
        returned.query("SELECT * FROM Accounts;")

        assert returned is gateway
        assert gateway.credential.username == "api"
        assert {r.url for r in transport.requests} == {"https://eu.example.com/webservice.php"}
        assert transport.operations == ["getchallenge", "login", "query", "logout"]
        assert transport.requests_for("query")[0].query["sessionName"] == "sess-eu"

    def test_connection_with_new_user_drops_cached_session(self, gateway, logged_in):
        gateway.connection("https://crm.example.com/webservice.php", "api", "secret-key")

        assert logged_in.document() is None

    def test_connection_with_new_access_key_keeps_cached_session(self, gateway, transport,
                                                                 logged_in, logout_ok):
        transport.script("query", envelope(result=[]))

        gateway.connection("https://crm.example.com/webservice.php", "admin", "rotated-key")
        gateway.query("SELECT * FROM Accounts;")

        assert transport.operations == ["query", "logout"]
        assert transport.requests_for("query")[0].query["sessionName"] == "sess-1"
