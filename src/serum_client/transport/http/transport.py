"""Request/response transport over HTTPS."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Type, TypeVar

import aiohttp

from ...config import ClientOptions
from ...errors import StreamingNotSupportedError
from ..base import Request
from ..stream import Subscription
from .request_builder import RequestBuilder
from .request_executor import RequestExecutor
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HTTPTransport:
    """HTTP transport; unary only, every stream operation is rejected."""

    name = "http"

    def __init__(self, options: ClientOptions, *, session: Optional[aiohttp.ClientSession] = None) -> None:
        self._options = options
        self._session_manager = SessionManager(options.timeout_seconds)
        if session is not None:
            self._session_manager.set_session(session)
        self._builder = RequestBuilder(options.endpoint)
        self._executor = RequestExecutor(self._session_manager)

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    async def unary(self, request: Request, shape: Type[T]) -> T:
        method, url, request_kwargs = self._builder.build_request_context(request)
        return await self._executor.execute_request(method, url, request_kwargs, shape, request.name)

    async def stream(
        self,
        request: Request,
        shape: Type[T],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Subscription[T]:
        raise StreamingNotSupportedError(
            f"{request.name} is not available over HTTP; use the WebSocket or gRPC client",
            operation_name=request.name,
        )

    async def close(self) -> None:
        await self._session_manager.close()
        logger.debug("HTTP transport for %s closed", self._options.endpoint)


__all__ = ["HTTPTransport"]
