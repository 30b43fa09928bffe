"""
===============================================================================
TARJETA CRC — rpc/client.py
===============================================================================

Module:
    Transport client (one backend service)

Responsibilities:
    - Send one command envelope to POST {base_url}/rpc and wait for one reply.
    - Classify failures: network (connect/timeout) and malformed replies both
      surface as UpstreamError.
    - Propagate the request id for cross-service log correlation.

Collaborators:
    - httpx (HTTP client)
    - rpc/protocol.py: envelopes and reply validation.
    - rpc/dispatcher.py: owns one ServiceClient per backend service.

Notes:
    - No retries. A command may have side effects on the backend.
    - Tests inject any httpx.Client (TestClient, MockTransport).
===============================================================================
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx

from ..context import current_request_id
from ..crosscutting.logger import logger
from ..crosscutting.middleware import REQUEST_ID_HEADER
from .protocol import RPC_PATH, CommandReply, MalformedReply, parse_reply


class UpstreamError(Exception):
    """The backend could not be reached or did not answer per contract."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.message = message
        self.reason = reason

    @property
    def unreachable(self) -> bool:
        """True when no reply arrived at all (refused connection or timeout)."""
        return self.reason in ("connect", "timeout")


class ServiceClient:
    """
    Request/response channel to one backend service, addressed by host/port.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ):
        self._url = base_url.rstrip("/") + RPC_PATH
        self._timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return self._url

    def send(self, command: str, data: dict[str, Any]) -> CommandReply:
        request_id = str(uuid.uuid4())
        envelope = {"id": request_id, "pattern": {"cmd": command}, "data": data}

        headers: dict[str, str] = {}
        if correlation := current_request_id():
            headers[REQUEST_ID_HEADER] = correlation

        try:
            resp = self._client.post(self._url, json=envelope, headers=headers)
        except httpx.TransportError as exc:
            reason = "timeout" if isinstance(exc, httpx.TimeoutException) else "connect"
            logger.warning(
                "rpc: transport failure",
                extra={"cmd": command, "url": self._url, "reason": reason},
            )
            raise UpstreamError(f"Service unavailable: {command}", reason) from exc

        if not resp.is_success:
            logger.warning(
                "rpc: non-success reply status",
                extra={"cmd": command, "status": resp.status_code},
            )
            raise UpstreamError(
                f"Malformed reply from upstream (HTTP {resp.status_code})",
                "status",
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamError("Malformed reply from upstream", "decode") from exc

        try:
            return parse_reply(request_id, body)
        except MalformedReply as exc:
            logger.warning(
                "rpc: malformed reply", extra={"cmd": command, "error": str(exc)}
            )
            raise UpstreamError("Malformed reply from upstream", "envelope") from exc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
