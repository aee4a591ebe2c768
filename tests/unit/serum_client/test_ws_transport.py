"""Tests for the WebSocket JSON-RPC transport."""

import asyncio

import pytest

from serum_client.client import SerumClient
from serum_client.config import ClientOptions
from serum_client.errors import (
    RemoteError,
    SerumConnectionError,
    SerumTimeoutError,
    StreamClosedError,
)
from serum_client.models import GetOrderbookResponse, GetTradesStreamResponse
from serum_client.transport.base import Operation, Request
from serum_client.transport.ws import ConnectionState, WSConnection, WSTransport
from tests.helpers.serum_fakes import FakeWebSocket, rpc_error, rpc_result, websocket_factory

ORDERBOOK = {"market": "SOL/USDC", "bids": [{"price": 31.0, "size": 2.0}], "asks": []}


def ws_options(timeout=1.0):
    return ClientOptions(endpoint="ws://serum.test/ws", timeout_seconds=timeout)


async def open_transport(ws, timeout=1.0):
    transport = WSTransport(ws_options(timeout), connection_factory=websocket_factory(ws))
    await transport.connect()
    return transport


async def wait_for_sent(ws, count):
    for _ in range(100):
        if len(ws.sent) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} sent message(s), saw {len(ws.sent)}")


@pytest.mark.asyncio
async def test_unary_call_round_trip():
    ws = FakeWebSocket(responder=lambda message: [rpc_result(message["id"], ORDERBOOK)])
    client = SerumClient(await open_transport(ws))

    orderbook = await client.get_orderbook("SOL/USDC", 0)

    assert orderbook.bids[0].size == 2.0
    assert ws.sent == [
        {"jsonrpc": "2.0", "id": 1, "method": "GetOrderbook", "params": {"market": "SOL/USDC", "limit": 0}}
    ]
    await client.close()


@pytest.mark.asyncio
async def test_replies_are_correlated_by_id():
    ws = FakeWebSocket()
    transport = await open_transport(ws)

    first = asyncio.create_task(transport.unary(Request(Operation.GET_ORDERBOOK, {"market": "A/B"}), GetOrderbookResponse))
    second = asyncio.create_task(transport.unary(Request(Operation.GET_ORDERBOOK, {"market": "C/D"}), GetOrderbookResponse))
    await wait_for_sent(ws, 2)
    ids = {message["params"]["market"]: message["id"] for message in ws.sent}
    ws.push(rpc_result(ids["C/D"], {"market": "C/D"}))
    ws.push(rpc_result(ids["A/B"], {"market": "A/B"}))

    assert (await first).market == "A/B"
    assert (await second).market == "C/D"
    await transport.close()


@pytest.mark.asyncio
async def test_error_envelope_is_remote_error():
    ws = FakeWebSocket(responder=lambda message: [rpc_error(message["id"], -32000, "payer mismatch", {"payer": "p"})])
    client = SerumClient(await open_transport(ws))

    with pytest.raises(RemoteError) as exc_info:
        await client.post_submit("c2lnbmVk")

    assert exc_info.value.code == -32000
    assert exc_info.value.details == {"payer": "p"}
    await client.close()


@pytest.mark.asyncio
async def test_unparsable_frames_are_dropped():
    ws = FakeWebSocket(responder=lambda message: ["garbage{", rpc_result(message["id"], ORDERBOOK)])
    transport = await open_transport(ws)

    orderbook = await transport.unary(Request(Operation.GET_ORDERBOOK, {"market": "SOL/USDC"}), GetOrderbookResponse)

    assert orderbook.market == "SOL/USDC"
    assert transport.is_open
    await transport.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", [[1], {"x": 1}, True, 1.5])
async def test_frame_with_malformed_id_is_dropped_before_reply(bad_id):
    ws = FakeWebSocket(responder=lambda message: [rpc_result(bad_id, {}), rpc_result(message["id"], ORDERBOOK)])
    transport = await open_transport(ws)

    orderbook = await transport.unary(Request(Operation.GET_ORDERBOOK, {"market": "SOL/USDC"}), GetOrderbookResponse)

    assert orderbook.market == "SOL/USDC"
    assert transport.is_open
    await transport.close()


@pytest.mark.asyncio
async def test_stream_survives_frame_with_malformed_id():
    ws = FakeWebSocket()
    transport = await open_transport(ws)
    subscription = await transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "SOL/USDC"}), GetTradesStreamResponse)
    await wait_for_sent(ws, 1)
    stream_id = ws.sent[0]["id"]

    ws.push(rpc_result(stream_id, {"slot": 1}))
    ws.push(rpc_result({"x": 1}, {"slot": 99}))
    ws.push(rpc_result(stream_id, {"slot": 2}))

    slots = [(await subscription.__anext__()).slot, (await subscription.__anext__()).slot]

    assert slots == [1, 2]
    assert transport.is_open
    await transport.close()


class _InterleavingWebSocket(FakeWebSocket):
    """Socket whose ``send`` yields to the loop in the middle of each write."""

    def __init__(self) -> None:
        super().__init__()
        self.events = []

    async def send(self, text: str) -> None:
        self.events.append("begin")
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        self.events.append("end")
        await super().send(text)


@pytest.mark.asyncio
async def test_concurrent_subscribes_write_one_at_a_time():
    ws = _InterleavingWebSocket()
    transport = await open_transport(ws)

    subscriptions = await asyncio.gather(
        transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "A/B"}), GetTradesStreamResponse),
        transport.stream(Request(Operation.GET_ORDERBOOKS_STREAM, {"markets": ["C/D"]}), GetTradesStreamResponse),
    )

    assert ws.events == ["begin", "end", "begin", "end"]
    assert sorted(message["id"] for message in ws.sent) == [1, 2]
    assert len(subscriptions) == 2
    await transport.close()


@pytest.mark.asyncio
async def test_unary_timeout():
    ws = FakeWebSocket()
    transport = await open_transport(ws, timeout=0.05)

    with pytest.raises(SerumTimeoutError):
        await transport.unary(Request(Operation.GET_MARKETS), GetOrderbookResponse)

    assert transport._pending == {}
    await transport.close()


@pytest.mark.asyncio
async def test_stream_delivers_updates_in_order_and_cancels():
    def responder(message):
        return [rpc_result(message["id"], {"slot": slot, "trades": {"trades": []}}) for slot in (10, 11, 12)]

    ws = FakeWebSocket(responder=responder)
    client = SerumClient(await open_transport(ws))

    subscription = await client.get_trades_stream("SOL/USDC", 0)
    slots = []
    async for update in subscription:
        slots.append(update.slot)
        if len(slots) == 3:
            break
    await subscription.cancel()

    assert slots == [10, 11, 12]
    assert ws.sent[0]["method"] == "GetTradesStream"
    assert ws.sent[0]["params"] == {"market": "SOL/USDC", "limit": 0}
    assert client.transport._inboxes == {}
    await client.close()


@pytest.mark.asyncio
async def test_server_close_fails_pending_calls_and_streams():
    ws = FakeWebSocket()
    transport = await open_transport(ws)
    subscription = await transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "SOL/USDC"}), GetOrderbookResponse)
    pending = asyncio.create_task(transport.unary(Request(Operation.GET_MARKETS), GetOrderbookResponse))
    await wait_for_sent(ws, 2)

    ws.server_close()

    with pytest.raises(SerumConnectionError):
        await pending
    with pytest.raises(StreamClosedError):
        await subscription.__anext__()
    assert not transport.is_open
    with pytest.raises(SerumConnectionError):
        await transport.unary(Request(Operation.GET_MARKETS), GetOrderbookResponse)
    await transport.close()


@pytest.mark.asyncio
async def test_close_ends_subscriptions_quietly():
    ws = FakeWebSocket()
    transport = await open_transport(ws)
    subscription = await transport.stream(Request(Operation.GET_TRADES_STREAM, {"market": "SOL/USDC"}), GetOrderbookResponse)

    await transport.close()

    assert [item async for item in subscription] == []
    assert ws.closed
    with pytest.raises(SerumConnectionError):
        await transport.connect()


class TestWSConnection:
    @pytest.mark.asyncio
    async def test_connect_failure_maps_to_connection_error(self):
        async def refuse():
            raise OSError("connection refused")

        connection = WSConnection("ws://serum.test/ws", connect_timeout=1.0, connection_factory=refuse)

        with pytest.raises(SerumConnectionError):
            await connection.connect()
        assert connection.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_connect_timeout(self):
        async def hang():
            await asyncio.sleep(10)

        connection = WSConnection("ws://serum.test/ws", connect_timeout=0.01, connection_factory=hang)

        with pytest.raises(SerumTimeoutError):
            await connection.connect()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        ws = FakeWebSocket()
        connection = WSConnection("ws://serum.test/ws", connect_timeout=1.0, connection_factory=websocket_factory(ws))
        await connection.connect()

        await connection.close()
        await connection.close()

        assert connection.state == ConnectionState.CLOSED
        assert ws.closed
