"""In-memory fakes shared by the Serum client tests."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import base58
import orjson
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from serum_client.decoder import decode_payload
from serum_client.errors import SigningError
from serum_client.transport.base import Operation, Request
from serum_client.transport.stream import Subscription


class FakeTransport:
    """Transport that records every request and answers from canned payloads.

    ``responses[operation]`` may be a payload dict, an exception instance, or
    a list of either (consumed in order).
    """

    name = "fake"

    def __init__(self) -> None:
        self.requests: List[Request] = []
        self.responses: Dict[Operation, Any] = {}
        self.stream_payloads: Dict[Operation, List[Any]] = {}
        self.subscriptions: List[Subscription[Any]] = []
        self.closed = False

    def calls(self, operation: Operation) -> List[Request]:
        return [request for request in self.requests if request.operation is operation]

    async def unary(self, request: Request, shape):
        self.requests.append(request)
        response = self.responses.get(request.operation, {})
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, BaseException):
            raise response
        return decode_payload(response, shape)

    async def stream(self, request: Request, shape, *, cancel_event: Optional[asyncio.Event] = None):
        self.requests.append(request)
        payloads = list(self.stream_payloads.get(request.operation, []))

        async def source():
            for payload in payloads:
                yield payload
            await asyncio.Event().wait()

        subscription = Subscription(
            request.name,
            source(),
            lambda payload: decode_payload(payload, shape),
            cancel_event=cancel_event,
        )
        self.subscriptions.append(subscription)
        return subscription.start()

    async def close(self) -> None:
        self.closed = True


class FakeSigner:
    """Signer that tags transactions and can be told to fail on chosen calls."""

    def __init__(self, fail_on: Iterable[int] = ()) -> None:
        self.signed: List[str] = []
        self.fail_on = set(fail_on)

    def sign(self, unsigned_transaction: str) -> str:
        call_number = len(self.signed) + 1
        self.signed.append(unsigned_transaction)
        if call_number in self.fail_on:
            raise SigningError(f"refusing to sign call {call_number}")
        return f"signed:{unsigned_transaction}"


_CLOSE = object()


class FakeWebSocket:
    """Scriptable stand-in for a websockets client connection.

    ``responder`` receives each sent request (parsed) and returns frames to
    deliver back, which lets a test answer unary calls by id.
    """

    def __init__(self, responder: Optional[Callable[[Dict[str, Any]], Sequence[Any]]] = None) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.responder = responder
        self.closed = False
        self._incoming: asyncio.Queue[Any] = asyncio.Queue()

    async def send(self, text: str) -> None:
        if self.closed:
            raise OSError("socket is closed")
        message = orjson.loads(text)
        self.sent.append(message)
        if self.responder is not None:
            for frame in self.responder(message) or ():
                self.push(frame)

    def push(self, frame: Any) -> None:
        if not isinstance(frame, (str, bytes)):
            frame = orjson.dumps(frame).decode("utf-8")
        self._incoming.put_nowait(frame)

    def server_close(self) -> None:
        self._incoming.put_nowait(_CLOSE)

    async def close(self) -> None:
        self.closed = True
        self._incoming.put_nowait(_CLOSE)

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> Any:
        item = await self._incoming.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        return item


def websocket_factory(ws: FakeWebSocket) -> Callable[[], Any]:
    async def connect() -> FakeWebSocket:
        return ws

    return connect


def rpc_result(request_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def rpc_error(request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}


def generate_keypair() -> tuple[Ed25519PrivateKey, bytes, str]:
    """Return ``(private_key, public_key_bytes, base58_keypair)``."""
    private_key = Ed25519PrivateKey.generate()
    seed = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_key = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return private_key, public_key, base58.b58encode(seed + public_key).decode("ascii")


def build_unsigned_transaction(signers: Sequence[bytes], other_accounts: Sequence[bytes] = (), *, versioned: bool = False) -> bytes:
    """Serialise a minimal legacy (or v0) transaction with empty signature slots."""
    keys = list(signers) + list(other_accounts)
    message = bytearray()
    if versioned:
        message.append(0x80)
    message += bytes([len(signers), 0, len(other_accounts)])
    message.append(len(keys))
    for key in keys:
        message += key
    message += bytes(32)  # recent blockhash
    message.append(0)  # no instructions
    if versioned:
        message.append(0)  # no address table lookups
    return bytes([len(signers)]) + bytes(64 * len(signers)) + bytes(message)
