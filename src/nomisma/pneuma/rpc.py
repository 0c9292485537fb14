"""
JSON-RPC transport over HTTP.

Lightweight alternative to web3.py: uses httpx for HTTP. One call is one
POST; the response is matched to the request by the JSON-RPC envelope and an
``error`` member is raised as ``RpcError``.

``create_provider`` picks the HTTP or WebSocket transport from the URL.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from ..errors import RpcError, RpcTimeoutError
from ..utils import request_id

logger = logging.getLogger(__name__)

# Default RPC endpoint (local node)
DEFAULT_RPC_URL = "http://localhost:12537"
DEFAULT_TIMEOUT = 60.0


def build_request(method: str, params: list[Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id(), "method": method, "params": params}


def unwrap_response(body: Any, method: str, rid: Optional[str]) -> Any:
    """Return the ``result`` of a response body or raise its ``error``."""
    if not isinstance(body, dict):
        raise RpcError("Invalid JSON-RPC response type", method=method, data=body, request_id=rid)

    error = body.get("error")
    if error:
        if isinstance(error, dict):
            raise RpcError(
                str(error.get("message", "Unknown error")),
                method=method,
                code=error.get("code"),
                data=error.get("data"),
                request_id=rid,
            )
        raise RpcError(str(error), method=method, request_id=rid)

    return body.get("result")


class HttpProvider:
    """
    Single-shot JSON-RPC provider.

    Args:
        url: Full JSON-RPC http(s) URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)

    Example:
        provider = HttpProvider("http://localhost:12537")
        epoch = await provider.call("cfx_epochNumber")
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"HttpProvider(url={self.url!r}, timeout={self.timeout})"

    async def call(self, method: str, *params: Any) -> Any:
        """
        Call a JSON-RPC method.

        Args:
            method: RPC method name (e.g., "cfx_getTransactionByHash")
            params: Positional RPC parameters

        Returns:
            ``result`` field of the RPC response

        Raises:
            RpcTimeoutError: If no response arrives within ``timeout``
            RpcError: On HTTP failure or a JSON-RPC error response
        """
        payload = build_request(method, list(params))
        rid = payload["id"]
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as exc:
            raise RpcTimeoutError(
                f"timeout when call {method} after {self.timeout}s",
                method=method,
                request_id=rid,
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise RpcError(
                f"HTTP {exc.response.status_code}",
                method=method,
                data=exc.response.text[:256],
                request_id=rid,
            ) from exc
        except httpx.HTTPError as exc:
            raise RpcError(f"Network error: {exc}", method=method, request_id=rid) from exc
        except ValueError as exc:
            raise RpcError("Non-JSON response from RPC", method=method, request_id=rid) from exc

        logger.debug(
            "rpc %s id=%s params=%s duration=%.1fms",
            method,
            rid,
            params,
            (time.monotonic() - start) * 1000,
        )
        return unwrap_response(body, method, rid)

    async def close(self) -> None:
        """Nothing to release: every call uses its own connection."""


def create_provider(url: str, **options: Any) -> Any:
    """
    Create a provider for ``url``.

    ``http``/``https`` URLs give an ``HttpProvider``, ``ws``/``wss`` URLs a
    ``WebsocketProvider``, an empty URL gives None.
    """
    if not isinstance(url, str):
        raise TypeError("provider url must be str")

    if url == "":
        return None
    if url.startswith("http"):
        return HttpProvider(url, **options)
    if url.startswith("ws"):
        from .ws import WebsocketProvider

        return WebsocketProvider(url, **options)
    raise ValueError(f'Invalid protocol or url "{url}"')
