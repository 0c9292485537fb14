"""WebSocket provider tests against a real local websockets server."""

from __future__ import annotations

import asyncio
import json

import pytest
from websockets.asyncio.server import serve

from nomisma.errors import ConnectionClosedError, RpcError, RpcTimeoutError
from nomisma.pneuma.ws import WebsocketProvider


class FakeNode:
    """
    Echo-style node: answers ``echo`` after ``params[1]`` seconds, never
    answers ``hang`` and closes the socket on ``drop``.
    """

    def __init__(self) -> None:
        self.connections = 0
        self.received: list[dict] = []

    async def handler(self, websocket) -> None:
        self.connections += 1
        async for message in websocket:
            request = json.loads(message)
            self.received.append(request)
            asyncio.create_task(self._answer(websocket, request))

    async def _answer(self, websocket, request: dict) -> None:
        method, params = request["method"], request["params"]
        if method == "hang":
            return
        if method == "drop":
            await websocket.close()
            return
        if method == "fail":
            response = {"jsonrpc": "2.0", "id": request["id"], "error": {"code": -1, "message": "boom"}}
        else:
            await asyncio.sleep(params[1] if len(params) > 1 else 0)
            response = {"jsonrpc": "2.0", "id": request["id"], "result": params[0]}
        await websocket.send(json.dumps(response))


@pytest.fixture()
async def node():
    fake = FakeNode()
    async with serve(fake.handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        fake.url = f"ws://127.0.0.1:{port}"
        yield fake


class TestWebsocketProvider:
    async def test_call(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url)
        try:
            assert await provider.call("echo", "0x01") == "0x01"
        finally:
            await provider.close()

    async def test_out_of_order_replies_reach_their_callers(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url)
        try:
            results = await asyncio.gather(
                provider.call("echo", "slow", 0.2),
                provider.call("echo", "fast", 0),
                provider.call("echo", "medium", 0.1),
            )
        finally:
            await provider.close()

        assert results == ["slow", "fast", "medium"]
        assert node.connections == 1

    async def test_error_response(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url)
        try:
            with pytest.raises(RpcError, match="boom"):
                await provider.call("fail")
        finally:
            await provider.close()

    async def test_timeout_keeps_connection(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url, timeout=0.1)
        try:
            with pytest.raises(RpcTimeoutError):
                await provider.call("hang")
            assert provider.connected
            assert await provider.call("echo", "after") == "after"
        finally:
            await provider.close()
        assert node.connections == 1

    async def test_close_rejects_waiters(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url, timeout=5)
        waiter = asyncio.create_task(provider.call("hang"))
        while not node.received:
            await asyncio.sleep(0.01)

        await provider.close()

        with pytest.raises(ConnectionClosedError):
            await waiter
        assert not provider.connected

    async def test_reconnects_after_close(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url)
        try:
            await provider.call("echo", 1)
            await provider.close()
            assert await provider.call("echo", 2) == 2
        finally:
            await provider.close()
        assert node.connections == 2

    async def test_connect_failure(self) -> None:
        provider = WebsocketProvider("ws://127.0.0.1:9", timeout=1)
        with pytest.raises(RpcError, match="Connect failed"):
            await provider.call("echo", 1)

    async def test_server_drop_leaves_waiter_to_its_timeout(self, node: FakeNode) -> None:
        provider = WebsocketProvider(node.url, timeout=0.3)
        try:
            with pytest.raises(RpcTimeoutError):
                await provider.call("drop")
            assert not provider.connected
            assert await provider.call("echo", "again") == "again"
        finally:
            await provider.close()
        assert node.connections == 2

    @pytest.mark.parametrize("url", ["http://127.0.0.1:9", "ws://"])
    async def test_invalid_uri_is_rpc_error(self, url: str) -> None:
        provider = WebsocketProvider(url)
        with pytest.raises(RpcError, match="Connect failed"):
            await provider.call("echo", 1)
