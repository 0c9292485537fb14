"""
Domain value types built on the canonical hex codec.

Each helper coerces its input through ``to_hex`` and then enforces a
post-condition (fixed byte length, integer amount, epoch sentinel).
"""

from __future__ import annotations

from decimal import Decimal, DecimalException, InvalidOperation, localcontext
from typing import Any

from ..errors import FormatError
from .hex import to_hex

EARLIEST = "earliest"
LATEST_STATE = "latest_state"
LATEST_MINED = "latest_mined"

EPOCH_TAGS = (EARLIEST, LATEST_STATE, LATEST_MINED)

GDRIP = Decimal(10) ** 9
CFX = Decimal(10) ** 18


def _fixed_length(value: Any, size: int, name: str) -> str:
    string = to_hex(value)
    if len(string) != 2 + size * 2:
        raise FormatError(f"{value!r} do not match {name} length", value)
    return string


def to_address(value: Any) -> str:
    """20-byte account address."""
    return _fixed_length(value, 20, "Address")


def to_private_key(value: Any) -> str:
    """32-byte secp256k1 private key."""
    return _fixed_length(value, 32, "PrivateKey")


def to_block_hash(value: Any) -> str:
    return _fixed_length(value, 32, "BlockHash")


def to_tx_hash(value: Any) -> str:
    return _fixed_length(value, 32, "TxHash")


def _number(value: Any) -> Any:
    """Parse numeric text the way amounts are written: decimal or 0x-hex."""
    if value is None:
        raise FormatError("amount can not be None", value)
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            try:
                return int(text, 16)
            except ValueError as exc:
                raise FormatError(f"{value!r} is not a number", value) from exc
        try:
            value = Decimal(text)
        except InvalidOperation as exc:
            raise FormatError(f"{value!r} is not a number", value) from exc
    elif isinstance(value, float):
        value = Decimal(repr(value))
    if isinstance(value, Decimal) and not value.is_finite():
        raise FormatError(f"{value!r} is not a finite number", value)
    return value


def to_epoch(value: Any) -> str:
    """
    Epoch reference: one of the sentinel tags or a number.

    Tags are matched case-insensitively and returned lowercase. ``None`` is
    treated as epoch 0.
    """
    if isinstance(value, str) and value.lower() in EPOCH_TAGS:
        return value.lower()
    if value is None:
        return to_hex(0)
    return to_hex(_number(value))


def to_drip(value: Any) -> str:
    """Amount in drip (the smallest unit); must be a non-negative integer."""
    return to_hex(_number(value))


def _scaled(value: Any, factor: Decimal, unit: str) -> str:
    number = _number(value)
    if isinstance(number, int):
        number = Decimal(number)
    if not isinstance(number, Decimal):
        raise FormatError(f"{value!r} is not a number", value)
    try:
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(number.as_tuple().digits) + 40)
            scaled = number * factor
            integral = scaled == scaled.to_integral_value()
    except DecimalException as exc:
        raise FormatError(f"{value!r} is not a number", value) from exc
    if not integral:
        raise FormatError(f"can not parse {value!r} {unit} to Drip in integer", value)
    return to_drip(int(scaled))


def drip_from_gdrip(value: Any) -> str:
    """Convert an amount in GDrip (10**9 drip) to drip."""
    return _scaled(value, GDRIP, "GDrip")


def drip_from_cfx(value: Any) -> str:
    """Convert an amount in CFX (10**18 drip) to drip."""
    return _scaled(value, CFX, "CFX")
