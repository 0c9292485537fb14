"""
Response parsing - turn the hex quantities of node objects into ints.

Only the listed fields are converted; everything else (hashes, addresses,
data) stays canonical hex. Missing or null fields are left untouched.
"""

from __future__ import annotations

from typing import Any, Optional

NUMBER_FIELDS = (
    "epochNumber",
    "nonce",
    "height",
    "size",
    "timestamp",
    "gasLimit",
    "gas",
    "gasUsed",
    "index",
    "transactionIndex",
    "status",
    "outcomeStatus",
    "v",
)

BIG_NUMBER_FIELDS = (
    "value",
    "gasPrice",
    "difficulty",
)


def parse_number(value: Any) -> Any:
    """Parse a ``0x`` hex quantity; ints pass through, None stays None."""
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, str):
        if value in ("0x", "0X"):
            return 0
        return int(value, 16)
    return value


def _parse_fields(obj: dict[str, Any]) -> dict[str, Any]:
    result = dict(obj)
    for name in NUMBER_FIELDS + BIG_NUMBER_FIELDS:
        if result.get(name) is not None:
            result[name] = parse_number(result[name])
    return result


def parse_transaction(tx: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if tx is None:
        return None
    return _parse_fields(tx)


def parse_receipt(receipt: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if receipt is None:
        return None
    return _parse_fields(receipt)


def parse_block(block: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Parse a block; full transaction objects are parsed too, hashes are kept."""
    if block is None:
        return None
    result = _parse_fields(block)
    transactions = result.get("transactions")
    if isinstance(transactions, list):
        result["transactions"] = [
            parse_transaction(tx) if isinstance(tx, dict) else tx for tx in transactions
        ]
    return result
