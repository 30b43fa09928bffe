"""
===============================================================================
TARJETA CRC — rpc/server.py
===============================================================================

Module:
    Backend command router + HTTP endpoint

Responsibilities:
    - Register command handlers by name (decorator).
    - Validate payloads with pydantic before the handler runs.
    - Turn handler outcomes into reply envelopes ({response} | {err}).
    - Unknown command -> UnknownCommand fault; unexpected exception ->
      logged with stack trace, InternalError fault.
    - Expose POST /rpc and GET /healthz for a backend service app.

Collaborators:
    - rpc/protocol.py: envelopes.
    - rpc/faults.py: transport form of faults.
    - services/*_service.py: register handlers.

Handler contract:
    A handler receives the validated payload model and returns either a
    Fault or a JSON-serializable value.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from fastapi import APIRouter
from pydantic import BaseModel, ValidationError

from ..crosscutting.exceptions import EAMSError
from ..crosscutting.logger import logger
from ..domain.faults import Fault, FaultKind
from .faults import to_rpc_error
from .protocol import Command, RpcRequest, Service, error_reply, success_reply

M = TypeVar("M", bound=BaseModel)
Handler = Callable[[Any], Any]

INTERNAL_ERROR_MESSAGE = "Internal server error"


def describe_validation_error(exc: ValidationError) -> str:
    """One-line summary: "field: message; other.field: message"."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid payload"


class CommandRouter:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      CommandRouter

    Responsibilities:
      - Map command names owned by one service to handlers
      - Run one command and produce its outcome (value or transport error)

    Collaborators:
      - pydantic payload models
    ----------------------------------------------------------------------------
    """

    def __init__(self, service: Service):
        self.service = service
        self._handlers: dict[str, tuple[type[BaseModel], Handler]] = {}

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    def command(self, command: Command, payload_model: type[M]) -> Callable:
        """Register the decorated function as the handler for ``command``."""
        if command.owner != self.service:
            raise ValueError(
                f"{command.value} is owned by {command.owner.value}, "
                f"not {self.service.value}"
            )

        def decorator(fn: Callable[[M], Any]) -> Callable[[M], Any]:
            self._handlers[command.value] = (payload_model, fn)
            return fn

        return decorator

    def execute(self, cmd: str, data: dict[str, Any]) -> tuple[Any, dict | None]:
        """Run one command. Returns (value, None) or (None, transport error)."""
        entry = self._handlers.get(cmd)
        if entry is None:
            logger.warning("rpc: unknown command", extra={"cmd": cmd})
            fault = Fault(FaultKind.UNKNOWN_COMMAND, f"Unknown command: {cmd}")
            return None, to_rpc_error(fault)

        payload_model, handler = entry
        try:
            payload = payload_model.model_validate(data)
        except ValidationError as exc:
            fault = Fault(FaultKind.VALIDATION_FAILED, describe_validation_error(exc))
            return None, to_rpc_error(fault)

        try:
            outcome = handler(payload)
        except EAMSError as exc:
            logger.exception(
                "rpc: handler failed",
                extra={"cmd": cmd, "error_id": exc.error_id},
            )
            return None, to_rpc_error(
                Fault(FaultKind.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)
            )
        except Exception:
            logger.exception("rpc: unexpected handler error", extra={"cmd": cmd})
            return None, to_rpc_error(
                Fault(FaultKind.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)
            )

        if isinstance(outcome, Fault):
            logger.info(
                "rpc: command fault",
                extra={"cmd": cmd, "kind": outcome.kind.value},
            )
            return None, to_rpc_error(outcome)
        return outcome, None


def build_rpc_router(router: CommandRouter) -> APIRouter:
    """HTTP surface of a backend service: POST /rpc + GET /healthz."""
    api = APIRouter()

    @api.post("/rpc")
    def rpc(envelope: RpcRequest) -> dict[str, Any]:
        value, err = router.execute(envelope.pattern.cmd, envelope.data)
        if err is not None:
            return error_reply(envelope.id, err)
        return success_reply(envelope.id, value)

    @api.get("/healthz")
    def healthz() -> dict[str, Any]:
        return {"ok": True, "service": router.service.value}

    return api
