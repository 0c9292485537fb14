"""
Client - typed wrappers over the node's ``cfx_*`` JSON-RPC methods.

Parameters go through the canonical domain types before they hit the wire
and numeric fields of the responses are parsed into ints. The two send
methods return a ``PendingTransaction`` instead of a bare hash.

Example:
    async with Client("http://localhost:12537") as client:
        balance = await client.get_balance(address)
        receipt = await client.send_transaction(options).executed()
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Optional

from ..canon.hex import hex_to_int, to_hex
from ..canon import types
from .parse import parse_block, parse_number, parse_receipt, parse_transaction
from .pending import PendingTransaction
from .rpc import create_provider
from .tx import required_option, call_options, send_options

logger = logging.getLogger(__name__)

# cfx_getConfirmationRiskByHash answers in units of 1 / (2**256 - 1)
MAX_RISK = 2**256 - 1


def returns_pending(method: Callable[..., Awaitable[str]]) -> Callable[..., PendingTransaction]:
    """Wrap a coroutine method that resolves to a tx hash into a PendingTransaction."""

    @functools.wraps(method)
    def wrapper(self: "Client", *args: Any, **kwargs: Any) -> PendingTransaction:
        return PendingTransaction(self, method(self, *args, **kwargs))

    return wrapper


def _address_of(value: Any) -> str:
    # Accounts carry their own address; anything else is coerced.
    return types.to_address(getattr(value, "address", value))


class Client:
    """
    A client of one ledger node.

    Args:
        provider: Provider instance, or a URL handed to ``create_provider``
        default_epoch: Epoch used when a method's epoch is omitted
        default_gas_price: Gas price filled into transactions that omit it
        default_gas: Gas limit filled into transactions that omit it
        **options: Provider options when ``provider`` is a URL (e.g. timeout)
    """

    def __init__(
        self,
        provider: Any = "",
        *,
        default_epoch: Any = types.LATEST_STATE,
        default_gas_price: Any = None,
        default_gas: Any = None,
        **options: Any,
    ) -> None:
        if isinstance(provider, str):
            provider = create_provider(provider, **options)
        self.provider = provider
        self.default_epoch = default_epoch
        self.default_gas_price = default_gas_price
        self.default_gas = default_gas

    def __repr__(self) -> str:
        return f"Client(provider={self.provider!r}, default_epoch={self.default_epoch!r})"

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _call(self, method: str, *params: Any) -> Any:
        if self.provider is None:
            raise RuntimeError("client has no provider")
        return await self.provider.call(method, *params)

    def _epoch(self, epoch: Any) -> str:
        return types.to_epoch(self.default_epoch if epoch is None else epoch)

    # ------------------------------------------------------------------
    # Chain state
    # ------------------------------------------------------------------

    async def gas_price(self) -> int:
        """Current gas price oracle, in drip."""
        return parse_number(await self._call("cfx_gasPrice"))

    async def epoch_number(self, epoch: Any = None) -> int:
        """Epoch number of ``epoch`` (defaults to the latest mined epoch)."""
        if epoch is None:
            return parse_number(await self._call("cfx_epochNumber"))
        return parse_number(await self._call("cfx_epochNumber", types.to_epoch(epoch)))

    async def get_logs(
        self,
        *,
        from_epoch: Any = None,
        to_epoch: Any = None,
        address: Any = None,
        topics: Optional[list[Any]] = None,
    ) -> list[dict[str, Any]]:
        """Logs matching a filter; unset filter fields are omitted."""
        log_filter: dict[str, Any] = {}
        if from_epoch is not None:
            log_filter["fromEpoch"] = types.to_epoch(from_epoch)
        if to_epoch is not None:
            log_filter["toEpoch"] = types.to_epoch(to_epoch)
        if address is not None:
            log_filter["address"] = _address_of(address)
        if topics is not None:
            log_filter["topics"] = [None if topic is None else to_hex(topic) for topic in topics]
        return await self._call("cfx_getLogs", log_filter)

    async def get_balance(self, address: Any, epoch: Any = None) -> int:
        """Balance of ``address`` in drip."""
        result = await self._call("cfx_getBalance", _address_of(address), self._epoch(epoch))
        return parse_number(result)

    async def get_transaction_count(self, address: Any, epoch: Any = None) -> int:
        """Number of transactions sent from ``address`` (its next nonce)."""
        result = await self._call("cfx_getTransactionCount", _address_of(address), self._epoch(epoch))
        return parse_number(result)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def get_blocks_by_epoch(self, epoch: Any) -> list[str]:
        return await self._call("cfx_getBlocksByEpoch", types.to_epoch(epoch))

    async def get_block_by_hash(self, block_hash: Any, detail: bool = False) -> Optional[dict[str, Any]]:
        """Block by hash; ``detail`` returns full transaction objects."""
        result = await self._call("cfx_getBlockByHash", types.to_block_hash(block_hash), bool(detail))
        return parse_block(result)

    async def get_block_by_epoch_number(self, epoch: Any, detail: bool = False) -> Optional[dict[str, Any]]:
        result = await self._call("cfx_getBlockByEpochNumber", types.to_epoch(epoch), bool(detail))
        return parse_block(result)

    async def get_block_by_hash_with_pivot_assumption(
        self,
        block_hash: Any,
        pivot_block_hash: Any,
        epoch: Any,
    ) -> Optional[dict[str, Any]]:
        result = await self._call(
            "cfx_getBlockByHashWithPivotAssumption",
            types.to_block_hash(block_hash),
            types.to_block_hash(pivot_block_hash),
            types.to_epoch(epoch),
        )
        return parse_block(result)

    async def get_risk_coefficient(self, block_hash: Any) -> Optional[float]:
        """
        Confirmation risk of a block, in [0, 1].

        Returns:
            None when the node has no risk estimate for the block
        """
        result = await self._call("cfx_getConfirmationRiskByHash", types.to_block_hash(block_hash))
        if result is None:
            return None
        return hex_to_int(to_hex(result)) / MAX_RISK

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def get_transaction_by_hash(self, tx_hash: Any) -> Optional[dict[str, Any]]:
        result = await self._call("cfx_getTransactionByHash", types.to_tx_hash(tx_hash))
        return parse_transaction(result)

    async def get_transaction_receipt(self, tx_hash: Any) -> Optional[dict[str, Any]]:
        result = await self._call("cfx_getTransactionReceipt", types.to_tx_hash(tx_hash))
        return parse_receipt(result)

    async def _fill_defaults(self, options: dict[str, Any], *, nonce: bool) -> dict[str, Any]:
        options = dict(options)
        if options.get("gasPrice") is None:
            options["gasPrice"] = self.default_gas_price
        if options.get("gas") is None:
            options["gas"] = self.default_gas
        if nonce and options.get("nonce") is None:
            options["nonce"] = await self.get_transaction_count(options["from"])
        return options

    @returns_pending
    async def send_transaction(self, options: dict[str, Any]) -> str:
        """
        Send a transaction.

        ``gasPrice`` / ``gas`` fall back to the client defaults and ``nonce``
        to the sender's transaction count. When ``from`` is an ``Account``
        the transaction is signed locally and sent raw; otherwise the node
        signs it (``cfx_sendTransaction``).

        Returns:
            PendingTransaction resolving to the transaction hash
        """
        sender = required_option(options, "from", "Address")
        options = await self._fill_defaults(options, nonce=True)

        if hasattr(sender, "sign_transaction"):
            tx = sender.sign_transaction(options)
            logger.debug("signed locally: from=%s nonce=%s hash=%s", sender.address, tx.nonce, tx.hash)
            return await self._send_raw(tx.serialize())

        return await self._call("cfx_sendTransaction", send_options(options))

    async def _send_raw(self, raw: Any) -> str:
        return await self._call("cfx_sendRawTransaction", to_hex(raw))

    @returns_pending
    async def send_raw_transaction(self, raw: Any) -> str:
        """Submit a signed, serialized transaction."""
        return await self._send_raw(raw)

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    async def get_code(self, address: Any, epoch: Any = None) -> str:
        return await self._call("cfx_getCode", _address_of(address), self._epoch(epoch))

    async def call(self, options: dict[str, Any], epoch: Any = None) -> str:
        """Execute a message call without creating a transaction."""
        options = await self._fill_defaults(options, nonce=options.get("from") is not None)
        if options.get("from") is not None:
            options["from"] = _address_of(options["from"])
        return await self._call("cfx_call", call_options(options), self._epoch(epoch))

    async def estimate_gas(self, options: dict[str, Any]) -> int:
        """Gas the call would use."""
        options = await self._fill_defaults(options, nonce=options.get("from") is not None)
        if options.get("from") is not None:
            options["from"] = _address_of(options["from"])
        return parse_number(await self._call("cfx_estimateGas", call_options(options)))
