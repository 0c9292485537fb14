"""
Canonical hex codec.

Every value entering nomisma is first reduced to a canonical hex string:
lowercase, ``0x``-prefixed, with an even number of digits. ``0x`` alone is
the empty value.

Converting back to bytes has one deliberate asymmetry: the single zero byte
``0x00`` becomes the empty byte string, so that integer zero and "nothing"
encode identically on the wire.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..errors import FormatError
from ..utils import datetime_to_ms

HEX_PATTERN = re.compile(r"^0x([0-9a-f][0-9a-f])*$")

EMPTY = "0x"


def is_hex(value: Any) -> bool:
    """Check if ``value`` is already a canonical hex string."""
    return isinstance(value, str) and HEX_PATTERN.match(value) is not None


def _integral(value: Any) -> int:
    """Return ``value`` as an int if it is a non-negative integral number."""
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise FormatError(f"{value!r} is not an integer", value)
        number = int(value)
    elif isinstance(value, Decimal):
        try:
            if not value.is_finite() or value != value.to_integral_value():
                raise FormatError(f"{value!r} is not an integer", value)
            number = int(value)
        except InvalidOperation as exc:
            raise FormatError(f"{value!r} is not an integer", value) from exc
    else:
        number = value

    if number < 0:
        raise FormatError(f"{value!r} is negative", value)
    return number


def to_hex(value: Any) -> str:
    """
    Convert ``value`` to a canonical hex string.

    Args:
        value: ``None``, bytes-like, non-negative integral number (``int``,
            integral ``float`` or ``Decimal``), hex text (case-insensitive,
            optionally ``0x``-prefixed) or ``datetime``.

    Returns:
        Canonical hex string, e.g. ``"0x0a"``.

    Raises:
        FormatError: If the value has an unsupported type or shape.
    """
    if value is None:
        return EMPTY

    if isinstance(value, bool):
        raise FormatError(f"{value!r} do not match hex string", value)

    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()

    if isinstance(value, (int, float, Decimal)):
        number = _integral(value)
        return to_hex(format(number, "x"))

    if isinstance(value, datetime):
        return to_hex(datetime_to_ms(value))

    if isinstance(value, str):
        string = value.lower()
        if not string.startswith("0x"):
            string = "0x" + string
        if len(string) % 2:
            string = "0x0" + string[2:]
        if not is_hex(string):
            raise FormatError(f"{value!r} do not match hex string", value)
        return string

    raise FormatError(f"{value!r} do not match hex string", value)


def hex_to_bytes(value: str) -> bytes:
    """
    Convert a canonical hex string to bytes.

    ``"0x00"`` converts to ``b""`` (zero collapse).

    Raises:
        FormatError: If ``value`` is not canonical hex.
    """
    if not is_hex(value):
        raise FormatError(f"{value!r} do not match hex string", value)

    data = bytes.fromhex(value[2:])
    if data == b"\x00":
        return b""
    return data


def hex_to_int(value: str) -> int:
    """Interpret a canonical hex string as an unsigned big-endian integer."""
    if not is_hex(value):
        raise FormatError(f"{value!r} do not match hex string", value)
    return int(value, 16) if value != EMPTY else 0
