"""Confirmation state machine against an in-memory fake client."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import pytest

from nomisma.errors import TransactionOutcomeError, WaitTimeoutError
from nomisma.pneuma.pending import PendingTransaction

TX_HASH = "0x" + "ab" * 32
BLOCK_HASH = "0x" + "cd" * 32
CONTRACT = "0x" + "ee" * 20


class FakeClient:
    """Scripted node: each getter pops the next answer and repeats the last one."""

    def __init__(
        self,
        transactions: list[Optional[dict]],
        receipts: Optional[list[Optional[dict]]] = None,
        risks: Optional[list[Optional[float]]] = None,
    ) -> None:
        self.transactions = transactions
        self.receipts = receipts or [None]
        self.risks = risks or [None]
        self.calls: list[str] = []

    @staticmethod
    def _next(answers: list) -> Any:
        return answers.pop(0) if len(answers) > 1 else answers[0]

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[dict]:
        self.calls.append("tx")
        return self._next(self.transactions)

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        self.calls.append("receipt")
        return self._next(self.receipts)

    async def get_risk_coefficient(self, block_hash: str) -> Optional[float]:
        self.calls.append("risk")
        return self._next(self.risks)


def _tx(block_hash: Optional[str] = BLOCK_HASH) -> dict:
    return {"hash": TX_HASH, "blockHash": block_hash}


def _receipt(status: int = 0, contract: Optional[str] = None) -> dict:
    return {
        "transactionHash": TX_HASH,
        "blockHash": BLOCK_HASH,
        "outcomeStatus": status,
        "contractCreated": contract,
    }


FAST = {"interval_ms": 1, "timeout_ms": 2000}


class TestHandle:
    async def test_await_gives_hash(self) -> None:
        pending = PendingTransaction(FakeClient([None]), TX_HASH.upper().replace("0X", "0x"))
        assert await pending == TX_HASH

    async def test_source_resolves_once(self) -> None:
        submissions = 0

        async def submit() -> str:
            nonlocal submissions
            submissions += 1
            return TX_HASH

        pending = PendingTransaction(FakeClient([_tx()]), submit())
        assert await pending == TX_HASH
        assert await pending == TX_HASH
        await pending.mined(**FAST)
        assert submissions == 1

    def test_handle_created_outside_a_loop(self) -> None:
        submissions = 0

        async def submit() -> str:
            nonlocal submissions
            submissions += 1
            return TX_HASH

        pending = PendingTransaction(FakeClient([None]), submit())
        assert submissions == 0

        async def wait() -> str:
            return await pending

        assert asyncio.run(wait()) == TX_HASH
        assert submissions == 1

    async def test_submission_error_reaches_waiter(self) -> None:
        async def submit() -> str:
            raise RuntimeError("rejected")

        pending = PendingTransaction(FakeClient([None]), submit())
        with pytest.raises(RuntimeError, match="rejected"):
            await pending.mined(**FAST)

    async def test_get(self) -> None:
        pending = PendingTransaction(FakeClient([_tx(None)]), TX_HASH)
        assert await pending.get() == _tx(None)


class TestMined:
    async def test_waits_for_block_hash(self) -> None:
        client = FakeClient([None, _tx(None), _tx()])
        tx = await PendingTransaction(client, TX_HASH).mined(**FAST)
        assert tx["blockHash"] == BLOCK_HASH
        assert client.calls == ["tx", "tx", "tx"]

    async def test_timeout(self) -> None:
        pending = PendingTransaction(FakeClient([_tx(None)]), TX_HASH)
        with pytest.raises(WaitTimeoutError) as exc_info:
            await pending.mined(interval_ms=10, timeout_ms=50)
        assert exc_info.value.tx_hash == TX_HASH
        assert exc_info.value.timeout_ms == 50
        assert isinstance(exc_info.value, TimeoutError)

    async def test_zero_timeout_never_observes(self) -> None:
        client = FakeClient([_tx()])
        with pytest.raises(WaitTimeoutError):
            await PendingTransaction(client, TX_HASH).mined(timeout_ms=0)
        assert client.calls == []

    async def test_zero_timeout_confirmed_fails_even_when_final(self) -> None:
        client = FakeClient([_tx()], receipts=[_receipt()], risks=[0.0])
        with pytest.raises(WaitTimeoutError):
            await PendingTransaction(client, TX_HASH).confirmed(timeout_ms=0)
        assert client.calls == []

    async def test_interval_is_respected(self) -> None:
        client = FakeClient([None, None, _tx()])
        start = time.monotonic()
        await PendingTransaction(client, TX_HASH).mined(interval_ms=50, timeout_ms=5000)
        assert time.monotonic() - start >= 0.09


class TestExecuted:
    async def test_success(self) -> None:
        client = FakeClient([_tx()], receipts=[None, _receipt()])
        receipt = await PendingTransaction(client, TX_HASH).executed(**FAST)
        assert receipt["outcomeStatus"] == 0
        assert client.calls == ["tx", "receipt", "receipt"]

    async def test_requires_mined_first(self) -> None:
        client = FakeClient([_tx(None), _tx()], receipts=[_receipt()])
        await PendingTransaction(client, TX_HASH).executed(**FAST)
        assert client.calls[:2] == ["tx", "tx"]

    async def test_failed_outcome_raises_without_retry(self) -> None:
        client = FakeClient([_tx()], receipts=[_receipt(status=1)])
        with pytest.raises(TransactionOutcomeError) as exc_info:
            await PendingTransaction(client, TX_HASH).executed(**FAST)
        assert exc_info.value.outcome_status == 1
        assert exc_info.value.tx_hash == TX_HASH
        assert client.calls.count("receipt") == 1


class TestConfirmed:
    async def test_waits_for_low_risk(self) -> None:
        client = FakeClient([_tx()], receipts=[_receipt()], risks=[None, 0.5, 0.001])
        receipt = await PendingTransaction(client, TX_HASH).confirmed(**FAST)
        assert receipt == _receipt()
        assert client.calls.count("risk") == 3

    async def test_threshold(self) -> None:
        client = FakeClient([_tx()], receipts=[_receipt()], risks=[0.2])
        receipt = await PendingTransaction(client, TX_HASH).confirmed(threshold=0.5, **FAST)
        assert receipt["blockHash"] == BLOCK_HASH

    async def test_deadline_is_shared_across_stages(self) -> None:
        client = FakeClient([_tx(None)] * 3 + [_tx()], receipts=[_receipt()], risks=[0.9])
        start = time.monotonic()
        with pytest.raises(WaitTimeoutError):
            await PendingTransaction(client, TX_HASH).confirmed(interval_ms=20, timeout_ms=150)
        assert time.monotonic() - start < 1.0


class TestDeployed:
    async def test_returns_contract(self) -> None:
        client = FakeClient([_tx()], receipts=[_receipt(contract=CONTRACT)], risks=[0.0])
        assert await PendingTransaction(client, TX_HASH).deployed(**FAST) == CONTRACT

    async def test_delay(self) -> None:
        client = FakeClient([_tx()], receipts=[_receipt(contract=CONTRACT)], risks=[0.0])
        start = time.monotonic()
        await PendingTransaction(client, TX_HASH).deployed(delay_ms=50, **FAST)
        assert time.monotonic() - start >= 0.045


class TestIndependence:
    async def test_pending_transactions_poll_independently(self) -> None:
        slow = FakeClient([None, None, None, _tx()])
        fast = FakeClient([_tx()])
        results = await asyncio.gather(
            PendingTransaction(slow, TX_HASH).mined(interval_ms=10, timeout_ms=2000),
            PendingTransaction(fast, TX_HASH).mined(interval_ms=10, timeout_ms=2000),
        )
        assert all(tx["blockHash"] == BLOCK_HASH for tx in results)
        assert len(fast.calls) == 1
        assert len(slow.calls) == 4
