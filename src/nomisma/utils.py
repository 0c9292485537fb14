from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone

from eth_hash.auto import keccak

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def random_bytes(size: int) -> bytes:
    return secrets.token_bytes(size)


def now_ms() -> int:
    return int(time.time() * 1000)


def datetime_to_ms(value: datetime) -> int:
    """Milliseconds since the Unix epoch; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - UNIX_EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def request_id() -> str:
    """Millisecond clock followed by seven random digits (20 digits today)."""
    return f"{now_ms()}{secrets.randbelow(10**7):07d}"


def int_to_big_endian(value: int) -> bytes:
    """Minimal big-endian encoding; zero encodes as the empty byte string."""
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")
