"""
===============================================================================
TARJETA CRC — rpc/dispatcher.py
===============================================================================

Module:
    Command dispatcher (edge side)

Responsibilities:
    - Pick the owner service's client for a command.
    - Attach the caller identity ({sub, email, role}) to the payload.
    - Send and wait for exactly one reply.
    - Turn an unreachable backend into an UpstreamUnavailable fault reply
      and a contract-breaking reply into a bare 502 error (no kind).

Collaborators:
    - rpc/client.py: ServiceClient / UpstreamError.
    - rpc/faults.py: transport form of edge-local faults.
    - gateway/routes.py: calls dispatch() after the guard chain passed.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping

from ..crosscutting.logger import logger
from ..domain.faults import Fault, FaultKind
from ..identity.users import Identity
from .client import ServiceClient, UpstreamError
from .faults import BAD_GATEWAY, to_rpc_error
from .protocol import Command, CommandReply, Service


class CommandDispatcher:
    def __init__(self, clients: Mapping[Service, ServiceClient]):
        missing = {service for service in Service if service not in clients}
        if missing:
            names = ", ".join(sorted(s.value for s in missing))
            raise ValueError(f"missing service clients: {names}")
        self._clients = dict(clients)

    def dispatch(
        self,
        command: Command,
        payload: dict[str, Any],
        identity: Identity | None = None,
    ) -> CommandReply:
        data = dict(payload)
        if identity is not None:
            data["identity"] = identity.to_claims()

        client = self._clients[command.owner]
        try:
            return client.send(command.value, data)
        except UpstreamError as exc:
            logger.warning(
                "dispatch: upstream failure",
                extra={
                    "cmd": command.value,
                    "target": command.owner.value,
                    "reason": exc.reason,
                },
            )
            if exc.unreachable:
                fault = Fault(FaultKind.UPSTREAM_UNAVAILABLE, exc.message)
                return CommandReply(error=to_rpc_error(fault))
            # A reply arrived but broke the contract: bad gateway, no kind.
            return CommandReply(
                error={"statusCode": BAD_GATEWAY, "message": exc.message}
            )

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
