"""
gRPC transport built on ``grpc.aio``.

Calls go through generic multicallables on ``/api.Api/<Operation>``; request
and reply bytes are produced by a pluggable ``MessageCodec`` so the transport
does not depend on generated stubs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional, Set, Type, TypeVar

import grpc

from ...config import ClientOptions
from ...errors import RemoteError, SerumClientError, SerumConnectionError, SerumTimeoutError
from ..base import Request
from ..stream import DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES, Subscription
from .codec import JsonCodec, MessageCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")

SERVICE_NAME = "api.Api"
CHANNEL_CLOSE_GRACE_SECONDS = 1.0


def method_path(method_name: str) -> str:
    return f"/{SERVICE_NAME}/{method_name}"


def _metadata_dict(metadata: Any) -> Dict[str, Any]:
    if not metadata:
        return {}
    return {str(key): value for key, value in metadata}


def map_rpc_error(exc: grpc.aio.AioRpcError, operation_name: str) -> SerumClientError:
    """Translate a gRPC status into the client's error taxonomy."""
    code = exc.code()
    details = exc.details() or ""
    if code == grpc.StatusCode.DEADLINE_EXCEEDED:
        return SerumTimeoutError(f"{operation_name} exceeded its deadline: {details}", operation_name=operation_name)
    if code == grpc.StatusCode.UNAVAILABLE:
        return SerumConnectionError(f"{operation_name} failed, service unavailable: {details}", operation_name=operation_name)
    return RemoteError(
        code.name,
        details or f"{operation_name} failed with {code.name}",
        _metadata_dict(exc.trailing_metadata()),
        operation_name=operation_name,
    )


class GRPCTransport:
    """gRPC transport over an insecure ``grpc.aio`` channel."""

    name = "grpc"

    def __init__(
        self,
        options: ClientOptions,
        *,
        channel: Optional[grpc.aio.Channel] = None,
        codec: Optional[MessageCodec] = None,
        max_consecutive_decode_failures: int = DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES,
    ) -> None:
        self._options = options
        self._channel = channel if channel is not None else grpc.aio.insecure_channel(options.endpoint)
        self._codec = codec if codec is not None else JsonCodec()
        self._max_decode_failures = max_consecutive_decode_failures
        self._subscriptions: Set[Subscription[Any]] = set()
        self._closed = False

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def codec(self) -> MessageCodec:
        return self._codec

    def _require_open(self, operation_name: str) -> None:
        if self._closed:
            raise SerumConnectionError("gRPC channel is closed", operation_name=operation_name)

    async def unary(self, request: Request, shape: Type[T]) -> T:
        self._require_open(request.name)
        multicallable = self._channel.unary_unary(
            method_path(request.name),
            request_serializer=self._codec.encode,
            response_deserializer=None,
        )
        logger.debug("Calling %s over gRPC", request.name)
        try:
            raw = await multicallable(request.wire_params(), timeout=self._options.timeout_seconds)
        except grpc.aio.AioRpcError as exc:
            logger.warning("%s failed with %s: %s", request.name, exc.code().name, exc.details())
            raise map_rpc_error(exc, request.name) from exc
        return self._codec.decode(raw, shape)

    async def stream(
        self,
        request: Request,
        shape: Type[T],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Subscription[T]:
        self._require_open(request.name)
        multicallable = self._channel.unary_stream(
            method_path(request.name),
            request_serializer=self._codec.encode,
            response_deserializer=None,
        )
        call = multicallable(request.wire_params())

        def release() -> None:
            call.cancel()
            self._subscriptions.discard(subscription)

        subscription: Subscription[T] = Subscription(
            request.name,
            self._messages(call, request.name),
            lambda raw: self._codec.decode(raw, shape),
            on_close=release,
            cancel_event=cancel_event,
            max_consecutive_decode_failures=self._max_decode_failures,
        )
        self._subscriptions.add(subscription)
        logger.info("Opened %s gRPC stream", request.name)
        return subscription.start()

    async def _messages(self, call: Any, operation_name: str) -> AsyncIterator[bytes]:
        try:
            async for message in call:
                yield message
        except grpc.aio.AioRpcError as exc:
            if exc.code() == grpc.StatusCode.CANCELLED and self._closed:
                return
            raise map_rpc_error(exc, operation_name) from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for subscription in list(self._subscriptions):
            await subscription.cancel()
        await self._channel.close(grace=CHANNEL_CLOSE_GRACE_SECONDS)
        logger.debug("gRPC channel to %s closed", self._options.endpoint)


__all__ = ["GRPCTransport", "SERVICE_NAME", "map_rpc_error", "method_path"]
