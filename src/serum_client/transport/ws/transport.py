"""
JSON-RPC over one persistent WebSocket.

Unary calls and subscriptions share the socket. Every request gets a fresh
integer id; a single reader task routes each reply envelope to the waiting
unary call or to the inbox of the subscription that owns that id.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, AsyncIterator, Callable, Dict, Optional, Type, TypeVar

from websockets import WebSocketException

from ...config import ClientOptions
from ...decoder import RpcEnvelope, decode_rpc_envelope, decode_rpc_result, encode_rpc_request
from ...errors import DecodeError, SerumConnectionError, SerumTimeoutError, StreamClosedError
from ..base import Request
from ..stream import DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES, Subscription
from .connection import WSConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")

READER_STOP_TIMEOUT_SECONDS = 5.0


class _InboxClosed:
    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error


class WSTransport:
    """WebSocket transport: unary and streaming calls over a single connection."""

    name = "ws"

    def __init__(
        self,
        options: ClientOptions,
        *,
        connection_factory: Optional[Callable[[], Any]] = None,
        max_consecutive_decode_failures: int = DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES,
    ) -> None:
        self._options = options
        self._connection = WSConnection(
            options.endpoint,
            connect_timeout=options.timeout_seconds,
            connection_factory=connection_factory,
        )
        self._max_decode_failures = max_consecutive_decode_failures
        self._ids = itertools.count(1)
        self._write_lock = asyncio.Lock()
        self._pending: Dict[int, asyncio.Future] = {}
        self._inboxes: Dict[int, asyncio.Queue] = {}
        self._subscriptions: Dict[int, Subscription[Any]] = {}
        self._reader: Optional[asyncio.Task[None]] = None
        self._closed = False

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def connection(self) -> WSConnection:
        return self._connection

    @property
    def is_open(self) -> bool:
        return self._reader is not None and not self._reader.done() and not self._closed

    async def connect(self) -> "WSTransport":
        """Open the socket and start the reader task."""
        if self._closed:
            raise SerumConnectionError("WebSocket transport is closed")
        if self.is_open:
            return self
        ws = await self._connection.connect()
        self._reader = asyncio.create_task(self._read_loop(ws), name="serum-ws-reader")
        return self

    def _require_open(self, operation_name: str) -> None:
        if not self.is_open:
            raise SerumConnectionError("WebSocket transport is not connected", operation_name=operation_name)

    async def _send(self, request_id: int, request: Request) -> None:
        text = encode_rpc_request(request_id, request.name, request.wire_params())
        logger.debug("Sending %s (id=%d)", request.name, request_id)
        async with self._write_lock:
            await self._connection.send(text)

    async def unary(self, request: Request, shape: Type[T]) -> T:
        self._require_open(request.name)
        request_id = next(self._ids)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._send(request_id, request)
            envelope = await asyncio.wait_for(future, timeout=self._options.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.warning("%s (id=%d) timed out after %.1fs", request.name, request_id, self._options.timeout_seconds)
            raise SerumTimeoutError(
                f"{request.name} timed out after {self._options.timeout_seconds}s",
                operation_name=request.name,
            ) from exc
        finally:
            self._pending.pop(request_id, None)
        return decode_rpc_result(envelope, shape, operation_name=request.name)

    async def stream(
        self,
        request: Request,
        shape: Type[T],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Subscription[T]:
        self._require_open(request.name)
        request_id = next(self._ids)
        inbox: asyncio.Queue = asyncio.Queue()
        self._inboxes[request_id] = inbox
        try:
            await self._send(request_id, request)
        except SerumConnectionError:
            self._inboxes.pop(request_id, None)
            raise

        def decode(envelope: RpcEnvelope) -> T:
            return decode_rpc_result(envelope, shape, operation_name=request.name)

        subscription: Subscription[T] = Subscription(
            request.name,
            self._inbox_frames(inbox),
            decode,
            on_close=lambda: self._forget_subscription(request_id),
            cancel_event=cancel_event,
            max_consecutive_decode_failures=self._max_decode_failures,
        )
        self._subscriptions[request_id] = subscription
        logger.info("Opened %s subscription (id=%d)", request.name, request_id)
        return subscription.start()

    @staticmethod
    async def _inbox_frames(inbox: asyncio.Queue) -> AsyncIterator[RpcEnvelope]:
        while True:
            item = await inbox.get()
            if isinstance(item, _InboxClosed):
                raise item.error
            yield item

    def _forget_subscription(self, request_id: int) -> None:
        self._inboxes.pop(request_id, None)
        self._subscriptions.pop(request_id, None)
        logger.debug("Released subscription id=%d", request_id)

    def _dispatch(self, frame: Any) -> None:
        try:
            envelope = decode_rpc_envelope(frame)
        except DecodeError as exc:
            logger.warning("Dropping unparsable WebSocket frame: %s", exc)
            return

        future = self._pending.get(envelope.id)
        if future is not None:
            if not future.done():
                future.set_result(envelope)
            return
        inbox = self._inboxes.get(envelope.id)
        if inbox is not None:
            inbox.put_nowait(envelope)
            return
        logger.debug("Dropping frame for unknown request id %r", envelope.id)

    async def _read_loop(self, ws: Any) -> None:
        reason = "WebSocket connection closed by server"
        try:
            async for frame in ws:
                self._dispatch(frame)
        except asyncio.CancelledError:
            reason = "WebSocket transport closed"
            raise
        except (WebSocketException, OSError) as exc:
            reason = f"WebSocket connection lost: {exc}"
            logger.warning("WebSocket reader stopped: %s", exc)
        finally:
            if self._closed:
                reason = "WebSocket transport closed"
            self._fail_waiters(reason)

    def _fail_waiters(self, reason: str) -> None:
        for request_id, future in list(self._pending.items()):
            if not future.done():
                future.set_exception(SerumConnectionError(reason, request_id=request_id))
        for request_id, inbox in list(self._inboxes.items()):
            inbox.put_nowait(_InboxClosed(StreamClosedError(reason, request_id=request_id)))
        if self._pending or self._inboxes:
            logger.info("Failed %d pending call(s) and %d subscription(s): %s", len(self._pending), len(self._inboxes), reason)

    async def close(self) -> None:
        """Cancel subscriptions, close the socket and stop the reader."""
        if self._closed:
            return
        self._closed = True
        for subscription in list(self._subscriptions.values()):
            await subscription.cancel()
        await self._connection.close()

        reader = self._reader
        if reader is not None and not reader.done():
            done, _ = await asyncio.wait({reader}, timeout=READER_STOP_TIMEOUT_SECONDS)
            if not done:
                reader.cancel()
                await asyncio.gather(reader, return_exceptions=True)
        logger.debug("WebSocket transport for %s closed", self._options.endpoint)


__all__ = ["WSTransport"]
