"""
JSON-RPC transport over a persistent WebSocket.

One connection is shared by every call. Requests are written as soon as the
connection is open; a background reader routes each response to its caller
by ``id``, so concurrent calls may be answered in any order.

- connect:  lazily, under a lock, re-opened after ``close()``
- timeout:  per call; expiry fails that call only, the socket stays up
- close:    outstanding callers get ``ConnectionClosedError``
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import InvalidHandshake, InvalidURI

from ..errors import ConnectionClosedError, RpcError, RpcTimeoutError
from .rpc import DEFAULT_TIMEOUT, build_request, unwrap_response

logger = logging.getLogger(__name__)


class WebsocketProvider:
    """
    Multiplexed JSON-RPC provider.

    Args:
        url: ws(s) URL of the node
        timeout: Per-call timeout in seconds

    Example:
        async with Client(WebsocketProvider("ws://localhost:12535")) as client:
            epoch = await client.epoch_number()
    """

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.url = url
        self.timeout = timeout
        self._conn: Optional[ClientConnection] = None
        self._reader: Optional[asyncio.Task] = None
        self._pending: dict[str, asyncio.Future] = {}
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"WebsocketProvider(url={self.url!r}, timeout={self.timeout})"

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def _connection(self) -> ClientConnection:
        async with self._lock:
            if self._conn is None:
                logger.debug("ws connecting to %s", self.url)
                self._conn = await connect(self.url)
                self._reader = asyncio.create_task(self._read(self._conn))
            return self._conn

    async def _read(self, conn: ClientConnection) -> None:
        try:
            async for message in conn:
                self._dispatch(message)
        except websockets.ConnectionClosed as exc:
            logger.warning("ws connection to %s lost: %s", self.url, exc)
        finally:
            if self._conn is conn:
                self._conn = None

    def _dispatch(self, message: str | bytes) -> None:
        try:
            body = json.loads(message)
        except ValueError:
            logger.warning("ws dropped non-JSON message from %s", self.url)
            return

        if not isinstance(body, dict):
            logger.warning("ws dropped unexpected message from %s: %r", self.url, body)
            return

        future = self._pending.get(str(body.get("id")))
        if future is None:
            logger.debug("ws response with unknown id %r", body.get("id"))
        elif not future.done():
            future.set_result(body)

    async def call(self, method: str, *params: Any) -> Any:
        """
        Call a JSON-RPC method over the shared connection.

        Raises:
            RpcTimeoutError: If the response does not arrive within ``timeout``
            ConnectionClosedError: If ``close()`` runs while waiting
            RpcError: On a JSON-RPC error response or a failed connect
        """
        payload = build_request(method, list(params))
        rid = payload["id"]
        start = time.monotonic()

        try:
            conn = await self._connection()
        except (OSError, asyncio.TimeoutError, InvalidHandshake, InvalidURI) as exc:
            raise RpcError(f"Connect failed: {exc}", method=method, request_id=rid) from exc

        future = asyncio.get_running_loop().create_future()
        self._pending[rid] = future
        try:
            try:
                await conn.send(json.dumps(payload))
            except websockets.ConnectionClosed as exc:
                logger.warning("ws send of %s id=%s failed: %s", method, rid, exc)
            body = await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise RpcTimeoutError(
                f"timeout when call {method} after {self.timeout}s",
                method=method,
                request_id=rid,
            ) from exc
        finally:
            self._pending.pop(rid, None)

        logger.debug(
            "ws %s id=%s params=%s duration=%.1fms",
            method,
            rid,
            params,
            (time.monotonic() - start) * 1000,
        )
        return unwrap_response(body, method, rid)

    async def close(self) -> None:
        """Close the connection and fail every outstanding call."""
        async with self._lock:
            conn, reader = self._conn, self._reader
            self._conn = None
            self._reader = None

            for rid, future in list(self._pending.items()):
                if not future.done():
                    future.set_exception(
                        ConnectionClosedError("connection closed", request_id=rid)
                    )
            self._pending.clear()

            if conn is not None:
                await conn.close()
            if reader is not None:
                await reader

    async def __aenter__(self) -> "WebsocketProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
