"""Request execution for the Serum HTTP transport."""

import asyncio
import logging
from typing import Any, Dict, Type, TypeVar

import aiohttp

from ...decoder import decode_http_response
from ...errors import SerumConnectionError, SerumTimeoutError
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestExecutor:
    """Execute one HTTP request and decode its reply.

    Calls are attempted exactly once.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def execute_request(
        self,
        method: str,
        url: str,
        request_kwargs: Dict[str, Any],
        shape: Type[T],
        operation_name: str,
    ) -> T:
        await self._session_manager.initialize()
        session = self._session_manager.get_session()
        try:
            async with session.request(method, url, **request_kwargs) as response:
                body = await response.read()
                status = response.status
        except asyncio.TimeoutError as exc:
            logger.warning("Serum request %s timed out after %.1fs", operation_name, self._session_manager.timeout_seconds)
            raise SerumTimeoutError(
                f"{operation_name} timed out after {self._session_manager.timeout_seconds}s",
                operation_name=operation_name,
            ) from exc
        except aiohttp.ClientError as exc:
            logger.warning("Serum request %s failed: %s", operation_name, exc)
            raise SerumConnectionError(f"{operation_name} request failed: {exc}", operation_name=operation_name) from exc

        logger.debug("Serum request %s returned HTTP %d (%d bytes)", operation_name, status, len(body))
        return decode_http_response(status, body, shape, operation_name=operation_name)


__all__ = ["RequestExecutor"]
