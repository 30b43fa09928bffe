"""
===============================================================================
TARJETA CRC — rpc/protocol.py
===============================================================================

Module:
    Command set and wire envelopes

Responsibilities:
    - Define the fixed command set and which service owns each command.
    - Define the request envelope {id, pattern: {cmd}, data}.
    - Build and validate reply envelopes {id, response} | {id, err}.

Collaborators:
    - rpc/client.py: sends requests, validates replies.
    - rpc/server.py: parses requests, builds replies.
    - rpc/dispatcher.py: routes commands to the owner service.

Notes:
    - One request, one reply. A reply carries exactly one of response/err.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RPC_PATH = "/rpc"


class Service(str, Enum):
    AUTH = "auth"
    ABSENCE = "absence"


class Command(str, Enum):
    AUTH_REGISTER = "auth.register"
    AUTH_LOGIN = "auth.login"
    ABSENCE_LIST = "absence.list"
    ABSENCE_CREATE = "absence.create"
    ABSENCE_APPROVE = "absence.approve"
    ABSENCE_REJECT = "absence.reject"

    @property
    def owner(self) -> Service:
        return COMMAND_OWNERS[self]


COMMAND_OWNERS: dict[Command, Service] = {
    Command.AUTH_REGISTER: Service.AUTH,
    Command.AUTH_LOGIN: Service.AUTH,
    Command.ABSENCE_LIST: Service.ABSENCE,
    Command.ABSENCE_CREATE: Service.ABSENCE,
    Command.ABSENCE_APPROVE: Service.ABSENCE,
    Command.ABSENCE_REJECT: Service.ABSENCE,
}


class Pattern(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cmd: str


class RpcRequest(BaseModel):
    """Request envelope. ``cmd`` stays a plain string so unknown names reach
    the router and get a proper UnknownCommand fault."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    pattern: Pattern
    data: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CommandReply:
    """Outcome of one dispatched command: exactly one of value / error."""

    value: Any = None
    error: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def success_reply(request_id: str, value: Any) -> dict[str, Any]:
    return {"id": request_id, "response": value}


def error_reply(request_id: str, err: dict[str, Any]) -> dict[str, Any]:
    return {"id": request_id, "err": err}


class MalformedReply(Exception):
    """The upstream reply does not follow the envelope contract."""


def parse_reply(request_id: str, body: Any) -> CommandReply:
    """
    Validate a decoded reply body against the request it answers.

    Raises:
        MalformedReply: not an object, mismatched id, or neither/both of
            response and err.
    """
    if not isinstance(body, dict):
        raise MalformedReply("reply is not a JSON object")
    if body.get("id") != request_id:
        raise MalformedReply("reply id does not match request id")

    has_response = "response" in body
    has_err = "err" in body
    if has_response == has_err:
        raise MalformedReply("reply must carry exactly one of response/err")

    if has_err:
        err = body["err"]
        return CommandReply(error=err if isinstance(err, dict) else {})
    return CommandReply(value=body["response"])
