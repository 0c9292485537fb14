"""
PendingTransaction - follow a submitted transaction to a terminal stage.

Stages, each built on the previous one:

    submitted -> mined -> executed -> confirmed (-> deployed)

- mined:     the node reports a ``blockHash`` for the transaction
- executed:  a receipt exists with ``outcomeStatus == 0``; any other status
             raises ``TransactionOutcomeError`` at once
- confirmed: the risk coefficient of the receipt's block drops below
             ``threshold``
- deployed:  ``contractCreated`` of the confirmed receipt

Every wait polls every ``interval_ms`` until ``timeout_ms`` has elapsed and
then raises ``WaitTimeoutError``. One deadline covers all stages of a call.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Generator, Optional, TypeVar

from ..canon.types import to_tx_hash
from ..errors import TransactionOutcomeError, WaitTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL_MS = 1000
DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_THRESHOLD = 0.01


def _clock_ms() -> float:
    return time.time() * 1000


async def sleep_ms(ms: float) -> None:
    if ms > 0:
        await asyncio.sleep(ms / 1000)


class _Timer:
    """Wall-clock schedule: each tick lands ``interval`` after the previous one."""

    def __init__(self) -> None:
        self.start = _clock_ms()
        self.last = self.start

    def elapsed(self) -> float:
        return _clock_ms() - self.start

    async def tick(self, interval_ms: float) -> None:
        await sleep_ms(interval_ms + self.last - _clock_ms())
        self.last = _clock_ms()


class _Deadline:
    """Shared budget for one wait call, possibly spanning several stages."""

    def __init__(self, tx_hash: str, timeout_ms: float) -> None:
        self.tx_hash = tx_hash
        self.timeout_ms = timeout_ms
        self.timer = _Timer()

    def check(self, stage: str) -> None:
        if self.timer.elapsed() >= self.timeout_ms:
            raise WaitTimeoutError(
                f"transaction {self.tx_hash} not {stage} after {self.timeout_ms}ms",
                tx_hash=self.tx_hash,
                timeout_ms=self.timeout_ms,
            )


async def poll(
    func: Callable[[], Awaitable[Optional[T]]],
    deadline: _Deadline,
    stage: str,
    interval_ms: float = DEFAULT_INTERVAL_MS,
) -> T:
    """
    Call ``func`` until it returns something other than None.

    The deadline is checked before every call, so an exhausted budget
    raises without touching the node.
    """
    while True:
        deadline.check(stage)
        result = await func()
        if result is not None:
            return result
        logger.debug("tx %s not %s yet, elapsed %.0fms", deadline.tx_hash, stage, deadline.timer.elapsed())
        await deadline.timer.tick(interval_ms)


class PendingTransaction:
    """
    Handle returned by ``Client.send_transaction`` / ``send_raw_transaction``.

    Awaiting the handle gives the transaction hash. The submission starts on
    the first await, on the loop doing the awaiting, and is shared by every
    later wait. A handle may therefore be created outside a running loop.

    Example:
        pending = client.send_transaction({"from": account, "to": ADDRESS, "value": 1})
        tx_hash = await pending
        receipt = await pending.confirmed(timeout_ms=60_000)
    """

    def __init__(self, client: Any, source: Awaitable[str] | str) -> None:
        self.client = client
        self._source = source
        self._task: Optional[asyncio.Future] = None

    def __await__(self) -> Generator[Any, None, str]:
        return self._hash().__await__()

    async def _hash(self) -> str:
        if isinstance(self._source, str):
            return to_tx_hash(self._source)
        if self._task is None:
            self._task = asyncio.ensure_future(self._source)
        return to_tx_hash(await self._task)

    async def get(self, delay_ms: float = 0) -> Optional[dict[str, Any]]:
        """Transaction by hash (None when the node does not know it yet)."""
        await sleep_ms(delay_ms)
        return await self.client.get_transaction_by_hash(await self)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _deadline(self, delay_ms: float, timeout_ms: float) -> _Deadline:
        tx_hash = await self
        await sleep_ms(delay_ms)
        return _Deadline(tx_hash, timeout_ms)

    async def _mined(self, deadline: _Deadline, interval_ms: float) -> dict[str, Any]:
        async def observe() -> Optional[dict[str, Any]]:
            tx = await self.client.get_transaction_by_hash(deadline.tx_hash)
            if tx and tx.get("blockHash"):
                return tx
            return None

        return await poll(observe, deadline, "mined", interval_ms)

    async def _executed(self, deadline: _Deadline, interval_ms: float) -> dict[str, Any]:
        await self._mined(deadline, interval_ms)

        async def observe() -> Optional[dict[str, Any]]:
            receipt = await self.client.get_transaction_receipt(deadline.tx_hash)
            if not receipt:
                return None
            status = receipt.get("outcomeStatus")
            if status != 0:
                raise TransactionOutcomeError(
                    f'transaction "{deadline.tx_hash}" execute failed, outcomeStatus {status}',
                    tx_hash=deadline.tx_hash,
                    outcome_status=status,
                    receipt=receipt,
                )
            return receipt

        return await poll(observe, deadline, "executed", interval_ms)

    async def _confirmed(
        self,
        deadline: _Deadline,
        interval_ms: float,
        threshold: float,
    ) -> dict[str, Any]:
        receipt = await self._executed(deadline, interval_ms)

        async def observe() -> Optional[dict[str, Any]]:
            risk = await self.client.get_risk_coefficient(receipt["blockHash"])
            if risk is not None and risk < threshold:
                return receipt
            return None

        return await poll(observe, deadline, "confirmed", interval_ms)

    async def mined(
        self,
        *,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        delay_ms: float = 0,
    ) -> dict[str, Any]:
        """
        Wait until the transaction is packed into a block.

        Returns:
            Transaction object with a non-null ``blockHash``

        Raises:
            WaitTimeoutError: If not mined within ``timeout_ms``
        """
        deadline = await self._deadline(delay_ms, timeout_ms)
        return await self._mined(deadline, interval_ms)

    async def executed(
        self,
        *,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        delay_ms: float = 0,
    ) -> dict[str, Any]:
        """
        Wait until the transaction is mined and executed successfully.

        Returns:
            Receipt with ``outcomeStatus == 0``

        Raises:
            TransactionOutcomeError: If the receipt reports a failed outcome
            WaitTimeoutError: If not executed within ``timeout_ms``
        """
        deadline = await self._deadline(delay_ms, timeout_ms)
        return await self._executed(deadline, interval_ms)

    async def confirmed(
        self,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        delay_ms: float = 0,
    ) -> dict[str, Any]:
        """
        Wait until the executed transaction's block is safe enough.

        Args:
            threshold: Risk coefficient bound, in (0, 1)

        Returns:
            Receipt of the confirmed transaction
        """
        deadline = await self._deadline(delay_ms, timeout_ms)
        return await self._confirmed(deadline, interval_ms, threshold)

    async def deployed(
        self,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        delay_ms: float = 0,
    ) -> Optional[str]:
        """Wait for confirmation and return the created contract address."""
        receipt = await self.confirmed(
            threshold=threshold,
            interval_ms=interval_ms,
            timeout_ms=timeout_ms,
            delay_ms=delay_ms,
        )
        status = receipt.get("outcomeStatus")
        if status != 0:
            raise TransactionOutcomeError(
                f'transaction "{receipt.get("transactionHash")}" deploy failed with {status}',
                tx_hash=receipt.get("transactionHash"),
                outcome_status=status,
                receipt=receipt,
            )
        return receipt.get("contractCreated")
