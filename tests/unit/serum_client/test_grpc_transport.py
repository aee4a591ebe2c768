"""Tests for the gRPC transport."""

import asyncio

import grpc
import orjson
import pytest

from serum_client.client import SerumClient
from serum_client.config import ClientOptions
from serum_client.errors import RemoteError, SerumConnectionError, SerumTimeoutError, StreamClosedError
from serum_client.models import GetOrderbookResponse
from serum_client.transport.base import Operation, Request
from serum_client.transport.grpc import GRPCTransport, JsonCodec, map_rpc_error, method_path


def rpc_error(code, details="", trailing=()):
    return grpc.aio.AioRpcError(code, grpc.aio.Metadata(), grpc.aio.Metadata(*trailing), details=details)


class FakeStreamCall:
    def __init__(self, messages, error=None):
        self.messages = list(messages)
        self.error = error
        self.cancelled = False
        self._cancel = asyncio.Event()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self.messages:
            yield message
        if self.error is not None:
            raise self.error
        await self._cancel.wait()

    def cancel(self):
        self.cancelled = True
        self._cancel.set()
        return True


class FakeChannel:
    def __init__(self):
        self.unary_calls = []
        self.unary_responses = []
        self.stream_calls = []
        self.streams = []
        self.closed = False

    def unary_unary(self, path, request_serializer=None, response_deserializer=None):
        async def invoke(request, timeout=None):
            self.unary_calls.append((path, request_serializer(request), timeout))
            response = self.unary_responses.pop(0)
            if isinstance(response, BaseException):
                raise response
            return response

        return invoke

    def unary_stream(self, path, request_serializer=None, response_deserializer=None):
        def invoke(request, timeout=None):
            self.stream_calls.append((path, request_serializer(request)))
            return self.streams.pop(0)

        return invoke

    async def close(self, grace=None):
        self.closed = True


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def transport(channel):
    return GRPCTransport(ClientOptions(endpoint="serum.test:9000", timeout_seconds=2.0), channel=channel)


@pytest.mark.asyncio
async def test_unary_uses_method_path_codec_and_deadline(transport, channel):
    channel.unary_responses.append(orjson.dumps({"market": "SOL/USDC", "asks": [{"price": 32.0, "size": 1.0}]}))
    client = SerumClient(transport)

    orderbook = await client.get_orderbook("SOL/USDC", 0)

    path, body, timeout = channel.unary_calls[0]
    assert path == "/api.Api/GetOrderbook"
    assert orjson.loads(body) == {"market": "SOL/USDC", "limit": 0}
    assert timeout == 2.0
    assert orderbook.asks[0].price == 32.0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("code", "expected"),
    [
        (grpc.StatusCode.DEADLINE_EXCEEDED, SerumTimeoutError),
        (grpc.StatusCode.UNAVAILABLE, SerumConnectionError),
        (grpc.StatusCode.INVALID_ARGUMENT, RemoteError),
    ],
)
async def test_unary_error_mapping(transport, channel, code, expected):
    channel.unary_responses.append(rpc_error(code, "nope"))

    with pytest.raises(expected):
        await transport.unary(Request(Operation.GET_MARKETS), GetOrderbookResponse)


def test_remote_error_carries_status_and_trailing_metadata():
    error = map_rpc_error(
        rpc_error(grpc.StatusCode.FAILED_PRECONDITION, "payer mismatch", (("reason", "payer"),)),
        "PostOrder",
    )

    assert isinstance(error, RemoteError)
    assert error.code == "FAILED_PRECONDITION"
    assert error.message == "payer mismatch"
    assert error.details == {"reason": "payer"}


@pytest.mark.asyncio
async def test_stream_yields_decoded_messages_then_cancels_call(transport, channel):
    call = FakeStreamCall([orjson.dumps({"slot": "1", "orderbook": {"market": "SOL/USDC"}}), orjson.dumps({"slot": "2"})])
    channel.streams.append(call)
    client = SerumClient(transport)

    subscription = await client.get_orderbooks_stream(["SOL/USDC", "ETH/USDC"], 0)
    first = await subscription.__anext__()
    second = await subscription.__anext__()
    await subscription.cancel()

    assert (first.slot, first.orderbook.market, second.slot) == (1, "SOL/USDC", 2)
    path, body = channel.stream_calls[0]
    assert path == "/api.Api/GetOrderbooksStream"
    assert orjson.loads(body) == {"markets": ["SOL/USDC", "ETH/USDC"], "limit": 0}
    assert call.cancelled


@pytest.mark.asyncio
async def test_stream_status_error_terminates_subscription(transport, channel):
    channel.streams.append(FakeStreamCall([], error=rpc_error(grpc.StatusCode.INTERNAL, "boom")))

    subscription = await transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "SOL/USDC"}), GetOrderbookResponse)

    with pytest.raises(RemoteError):
        await subscription.__anext__()


@pytest.mark.asyncio
async def test_stream_end_is_stream_closed(transport, channel):
    call = FakeStreamCall([orjson.dumps({"market": "SOL/USDC"})])
    call._cancel.set()
    channel.streams.append(call)

    subscription = await transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "SOL/USDC"}), GetOrderbookResponse)

    assert (await subscription.__anext__()).market == "SOL/USDC"
    with pytest.raises(StreamClosedError):
        await subscription.__anext__()


@pytest.mark.asyncio
async def test_close_cancels_streams_and_channel(transport, channel):
    call = FakeStreamCall([])
    channel.streams.append(call)
    subscription = await transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "SOL/USDC"}), GetOrderbookResponse)

    await transport.close()

    assert [item async for item in subscription] == []
    assert call.cancelled
    assert channel.closed
    with pytest.raises(SerumConnectionError):
        await transport.unary(Request(Operation.GET_MARKETS), GetOrderbookResponse)


def test_json_codec_and_method_path():
    codec = JsonCodec()

    assert orjson.loads(codec.encode({"limit": 0})) == {"limit": 0}
    assert codec.decode(b'{"market": "SOL/USDC"}', GetOrderbookResponse).market == "SOL/USDC"
    assert method_path("PostSubmit") == "/api.Api/PostSubmit"
