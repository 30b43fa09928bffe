"""
Unit tests for the transport client and the command dispatcher.

httpx.MockTransport stands in for the backend so failures (refused
connection, timeout, malformed replies) are deterministic.
"""

import json
from unittest.mock import Mock

import httpx
import pytest

from eams.context import clear_context, set_request_context
from eams.domain.faults import FaultKind
from eams.rpc.client import ServiceClient, UpstreamError
from eams.rpc.dispatcher import CommandDispatcher
from eams.rpc.protocol import Command, CommandReply, Service

pytestmark = pytest.mark.unit


def _client(handler) -> ServiceClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return ServiceClient("http://backend:4002/", client=http)


def _echo(build_body):
    """Transport answering with build_body(envelope)."""

    def handler(request: httpx.Request) -> httpx.Response:
        envelope = json.loads(request.content)
        return httpx.Response(200, json=build_body(envelope))

    return handler


# ============================================================================
# ServiceClient
# ============================================================================


class TestServiceClient:
    def test_url_targets_rpc_endpoint(self):
        assert _client(_echo(lambda e: {})).url == "http://backend:4002/rpc"

    def test_sends_envelope_and_returns_response(self):
        seen = {}

        def build(envelope):
            seen.update(envelope)
            return {"id": envelope["id"], "response": {"ok": 1}}

        reply = _client(_echo(build)).send("absence.list", {"page": 1})

        assert reply == CommandReply(value={"ok": 1})
        assert seen["pattern"] == {"cmd": "absence.list"}
        assert seen["data"] == {"page": 1}
        assert seen["id"]

    def test_error_reply_is_returned_not_raised(self):
        err = {"statusCode": 404, "message": "Absence not found", "error": "NotFound"}
        reply = _client(_echo(lambda e: {"id": e["id"], "err": err})).send(
            "absence.approve", {}
        )

        assert not reply.ok
        assert reply.error == err

    def test_forwards_request_id(self):
        seen = {}

        def handler(request):
            seen["request_id"] = request.headers.get("X-Request-Id")
            envelope = json.loads(request.content)
            return httpx.Response(200, json={"id": envelope["id"], "response": None})

        set_request_context(request_id="req-123")
        try:
            _client(handler).send("auth.login", {})
        finally:
            clear_context()

        assert seen["request_id"] == "req-123"

    def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError) as exc:
            _client(handler).send("auth.login", {})

        assert exc.value.reason == "connect"
        assert exc.value.unreachable
        assert exc.value.message == "Service unavailable: auth.login"

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(UpstreamError) as exc:
            _client(handler).send("auth.login", {})

        assert exc.value.reason == "timeout"
        assert exc.value.unreachable

    def test_non_success_status(self):
        with pytest.raises(UpstreamError) as exc:
            _client(lambda r: httpx.Response(500, text="oops")).send("auth.login", {})

        assert exc.value.reason == "status"
        assert not exc.value.unreachable

    def test_non_json_body(self):
        with pytest.raises(UpstreamError) as exc:
            _client(lambda r: httpx.Response(200, text="<html>")).send(
                "auth.login", {}
            )

        assert exc.value.reason == "decode"

    @pytest.mark.parametrize(
        "build",
        [
            lambda e: {"id": "someone-else", "response": 1},
            lambda e: {"id": e["id"]},
            lambda e: {"id": e["id"], "response": 1, "err": {}},
            lambda e: ["not", "an", "object"],
        ],
    )
    def test_malformed_envelope(self, build):
        with pytest.raises(UpstreamError) as exc:
            _client(_echo(build)).send("auth.login", {})

        assert exc.value.reason == "envelope"
        assert exc.value.message == "Malformed reply from upstream"


# ============================================================================
# CommandDispatcher
# ============================================================================


def _dispatcher(auth=None, absence=None) -> CommandDispatcher:
    return CommandDispatcher(
        {
            Service.AUTH: auth or Mock(spec=ServiceClient),
            Service.ABSENCE: absence or Mock(spec=ServiceClient),
        }
    )


class TestCommandDispatcher:
    def test_requires_a_client_per_service(self):
        with pytest.raises(ValueError, match="absence"):
            CommandDispatcher({Service.AUTH: Mock(spec=ServiceClient)})

    def test_routes_to_owner_service(self):
        auth = Mock(spec=ServiceClient)
        absence = Mock(spec=ServiceClient)
        absence.send.return_value = CommandReply(value=[])

        reply = _dispatcher(auth, absence).dispatch(Command.ABSENCE_LIST, {"page": 1})

        assert reply.value == []
        absence.send.assert_called_once_with("absence.list", {"page": 1})
        auth.send.assert_not_called()

    def test_attaches_identity_claims(self, employee):
        absence = Mock(spec=ServiceClient)
        absence.send.return_value = CommandReply(value={})
        payload = {"id": "abc"}

        _dispatcher(absence=absence).dispatch(
            Command.ABSENCE_APPROVE, payload, employee
        )

        sent = absence.send.call_args.args[1]
        assert sent["identity"] == {
            "sub": employee.subject_id,
            "email": employee.email,
            "role": "EMPLOYEE",
        }
        assert "identity" not in payload

    def test_public_commands_carry_no_identity(self):
        auth = Mock(spec=ServiceClient)
        auth.send.return_value = CommandReply(value={})

        _dispatcher(auth=auth).dispatch(Command.AUTH_LOGIN, {"email": "a@x.com"})

        assert auth.send.call_args.args[1] == {"email": "a@x.com"}

    def test_unreachable_service_becomes_upstream_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        dispatcher = _dispatcher(auth=_client(handler))

        reply = dispatcher.dispatch(Command.AUTH_LOGIN, {"email": "a@x.com"})

        assert reply.error["statusCode"] == 502
        assert reply.error["error"] == FaultKind.UPSTREAM_UNAVAILABLE.value
        assert reply.error["message"] == "Service unavailable: auth.login"

    def test_contract_breaking_reply_is_bad_gateway_without_kind(self):
        def handler(request):
            return httpx.Response(200, text="not json")

        dispatcher = _dispatcher(auth=_client(handler))

        reply = dispatcher.dispatch(Command.AUTH_LOGIN, {"email": "a@x.com"})

        assert reply.error == {
            "statusCode": 502,
            "message": "Malformed reply from upstream",
        }

    def test_close_closes_every_client(self):
        auth = Mock(spec=ServiceClient)
        absence = Mock(spec=ServiceClient)

        _dispatcher(auth, absence).close()

        auth.close.assert_called_once()
        absence.close.assert_called_once()
