"""WebSocket connection lifecycle for the Serum socket transport."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Mapping, Optional

import websockets
from websockets import WebSocketException
from websockets import exceptions as ws_exceptions

from ...errors import SerumConnectionError, SerumTimeoutError

logger = logging.getLogger(__name__)

HTTP_UNAUTHORIZED = 401
CLOSE_TIMEOUT_SECONDS = 5.0


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def _handshake_status(exc: BaseException) -> Optional[int]:
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(exc, "status_code", None)
    return status


class WSConnection:
    """Owns one websocket to the Serum API.

    ``connection_factory`` replaces ``websockets.connect`` (tests inject a
    fake socket through it).
    """

    def __init__(
        self,
        url: str,
        *,
        connect_timeout: float,
        headers: Optional[Mapping[str, str]] = None,
        connection_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.url = url
        self.connect_timeout = connect_timeout
        self.headers = dict(headers or {})
        self.connection_factory = connection_factory
        self.ws: Optional[Any] = None
        self.state = ConnectionState.DISCONNECTED

    def _connector(self):
        if self.connection_factory is not None:
            return self.connection_factory()
        return websockets.connect(
            self.url,
            additional_headers=self.headers or None,
            ping_interval=20,
            ping_timeout=20,
            max_size=None,
            close_timeout=CLOSE_TIMEOUT_SECONDS,
        )

    async def connect(self) -> Any:
        """Open the socket, bounded by ``connect_timeout``."""
        if self.state == ConnectionState.CONNECTED and self.ws is not None:
            return self.ws

        self.state = ConnectionState.CONNECTING
        logger.info("Establishing WebSocket connection to %s", self.url)
        try:
            ws = await asyncio.wait_for(self._connector(), timeout=self.connect_timeout)
        except asyncio.TimeoutError as exc:
            self.state = ConnectionState.DISCONNECTED
            raise SerumTimeoutError(f"WebSocket connection to {self.url} timed out after {self.connect_timeout}s") from exc
        except ws_exceptions.InvalidStatus as exc:
            self.state = ConnectionState.DISCONNECTED
            if _handshake_status(exc) == HTTP_UNAUTHORIZED:
                raise SerumConnectionError("WebSocket authentication failed (HTTP 401)") from exc
            raise SerumConnectionError(f"WebSocket handshake with {self.url} returned an invalid status") from exc
        except (WebSocketException, OSError, ValueError) as exc:
            self.state = ConnectionState.DISCONNECTED
            raise SerumConnectionError(f"Failed to connect to {self.url}: {exc}") from exc

        self.ws = ws
        self.state = ConnectionState.CONNECTED
        logger.info("WebSocket connection established")
        return ws

    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED and self.ws is not None

    async def send(self, text: str) -> None:
        if self.ws is None:
            raise SerumConnectionError("WebSocket is not connected")
        try:
            await self.ws.send(text)
        except (WebSocketException, OSError) as exc:
            raise SerumConnectionError(f"Failed to send WebSocket message: {exc}") from exc

    async def close(self) -> None:
        """Close the socket; safe to call more than once."""
        ws = self.ws
        self.ws = None
        self.state = ConnectionState.CLOSED
        if ws is None:
            return
        try:
            await asyncio.wait_for(ws.close(), timeout=CLOSE_TIMEOUT_SECONDS)
        except (asyncio.TimeoutError, WebSocketException, OSError) as exc:
            logger.warning("Error closing WebSocket: %s", exc)
        logger.info("WebSocket connection closed")


__all__ = ["ConnectionState", "WSConnection"]
