"""
Server-push subscriptions.

A ``Subscription`` owns exactly one relay task. The relay pulls raw messages
from a transport-provided async iterator, decodes each one and puts the
typed value on an output queue in arrival order. Whatever ends the relay
(cancellation, end of stream, connection failure) it always releases the
source and closes the output, so a consumer blocked in ``async for`` wakes up
and no task or socket is left behind.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar, Union

from ..errors import DecodeError, StreamClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES = 10
DEFAULT_CANCEL_TIMEOUT_SECONDS = 5.0

CloseCallback = Callable[[], Union[None, Awaitable[None]]]


class _EndOfStream:
    __slots__ = ()


_END = _EndOfStream()


class Subscription(Generic[T]):
    """Lazy, infinite, non-restartable sequence of decoded stream messages.

    Iterate with ``async for``. Iteration ends quietly after ``cancel()`` (or
    once the caller's ``cancel_event`` is set); if the stream ends or fails on
    its own, the terminating error is raised after all buffered messages have
    been delivered.

    Isolated decode failures are logged and skipped. After
    ``max_consecutive_decode_failures`` failures in a row the subscription is
    torn down with the last ``DecodeError``; ``0`` disables the cap.
    """

    def __init__(
        self,
        name: str,
        source: AsyncIterator[Any],
        decode: Callable[[Any], T],
        *,
        on_close: Optional[CloseCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
        max_consecutive_decode_failures: int = DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES,
    ) -> None:
        if max_consecutive_decode_failures < 0:
            raise ValueError("max_consecutive_decode_failures must be non-negative")
        self.name = name
        self._source = source
        self._decode = decode
        self._on_close = on_close
        self._cancel_event = cancel_event
        self._max_decode_failures = max_consecutive_decode_failures
        self._output: asyncio.Queue[Any] = asyncio.Queue()
        self._task: Optional[asyncio.Task[None]] = None
        self._watcher: Optional[asyncio.Task[None]] = None
        self._error: Optional[BaseException] = None
        self._error_reported = False
        self._exhausted = False
        self._released = False
        self.received = 0
        self.decode_failures = 0

    def start(self) -> "Subscription[T]":
        """Spawn the relay task. Called once by the transport that opened the stream."""
        if self._task is not None:
            raise RuntimeError(f"subscription {self.name} already started")
        self._task = asyncio.create_task(self._relay(), name=f"serum-stream-{self.name}")
        if self._cancel_event is not None:
            self._watcher = asyncio.create_task(self._watch_cancel(self._cancel_event), name=f"serum-stream-cancel-{self.name}")
        return self

    @property
    def closed(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def error(self) -> Optional[BaseException]:
        """Error that terminated the relay, if any."""
        return self._error

    async def cancel(self, timeout: float = DEFAULT_CANCEL_TIMEOUT_SECONDS) -> None:
        """Stop the relay and wait (bounded) for it to release its resources."""
        pending = [task for task in (self._task, self._watcher) if task is not None and not task.done()]
        for task in pending:
            task.cancel()
        if not pending:
            return
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning("Subscription %s did not stop within %.1fs", self.name, timeout)
        elif not self._released:
            await self._release()

    async def _watch_cancel(self, event: asyncio.Event) -> None:
        await event.wait()
        task = self._task
        if task is not None and not task.done():
            logger.debug("Cancel signal received for %s subscription", self.name)
            task.cancel()
            await asyncio.wait({task})
        if not self._released:
            await self._release()

    async def _relay(self) -> None:
        consecutive_failures = 0
        try:
            async for raw in self._source:
                self.received += 1
                try:
                    item = self._decode(raw)
                except DecodeError as exc:
                    consecutive_failures += 1
                    self.decode_failures += 1
                    if self._max_decode_failures and consecutive_failures >= self._max_decode_failures:
                        logger.error(
                            "Closing %s subscription after %d consecutive decode failures",
                            self.name,
                            consecutive_failures,
                        )
                        raise
                    logger.warning("Skipping undecodable %s message (%d in a row): %s", self.name, consecutive_failures, exc)
                    continue
                consecutive_failures = 0
                await self._output.put(item)
            raise StreamClosedError(f"{self.name} stream ended", operation_name=self.name)
        except asyncio.CancelledError:
            logger.debug("%s subscription cancelled", self.name)
            raise
        except Exception as exc:
            logger.warning("%s subscription terminated: %s", self.name, exc)
            self._error = exc
        finally:
            await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        watcher = self._watcher
        if watcher is not None and watcher is not asyncio.current_task() and not watcher.done():
            watcher.cancel()

        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            try:
                await aclose()
            except (RuntimeError, StreamClosedError) as exc:
                logger.debug("Closing %s source failed: %s", self.name, exc)

        if self._on_close is not None:
            result = self._on_close()
            if inspect.isawaitable(result):
                await result

        self._output.put_nowait(_END)

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        if self._exhausted:
            raise StopAsyncIteration
        if self._task is None:
            raise RuntimeError(f"subscription {self.name} was never started")
        item = await self._output.get()
        if item is _END:
            self._exhausted = True
            if self._error is not None and not self._error_reported:
                self._error_reported = True
                raise self._error
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cancel()


__all__ = [
    "DEFAULT_CANCEL_TIMEOUT_SECONDS",
    "DEFAULT_MAX_CONSECUTIVE_DECODE_FAILURES",
    "Subscription",
]
