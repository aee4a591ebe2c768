"""HTTP session management for the Serum HTTP transport."""

from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp


class SessionManager:
    """Manages the aiohttp session lifecycle; one session per client."""

    def __init__(self, timeout_seconds: float) -> None:
        self._timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def initialize(self) -> None:
        """Ensure the HTTP session is ready."""
        async with self._session_lock:
            if self._session is not None and not self._session.closed:
                return
            timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP session if one exists."""
        async with self._session_lock:
            if self._session is not None:
                await self._session.close()
                self._session = None

    def get_session(self) -> aiohttp.ClientSession:
        """Get the current session, raising if not initialized."""
        if self._session is None:
            raise RuntimeError("HTTP session not initialized")
        return self._session

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        return self._session

    def set_session(self, value: Optional[aiohttp.ClientSession]) -> None:
        """Inject an externally owned session."""
        self._session = value
