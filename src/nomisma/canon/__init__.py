"""
Canon - canonical value forms shared by every other layer.

- hex:   canonical hex codec (``to_hex``, ``hex_to_bytes``)
- types: fixed-length and enumerated domain types built on the codec
"""

from .hex import EMPTY, hex_to_bytes, hex_to_int, is_hex, to_hex
from .types import (
    EARLIEST,
    LATEST_MINED,
    LATEST_STATE,
    drip_from_cfx,
    drip_from_gdrip,
    to_address,
    to_block_hash,
    to_drip,
    to_epoch,
    to_private_key,
    to_tx_hash,
)

__all__ = [
    "EMPTY",
    "EARLIEST",
    "LATEST_MINED",
    "LATEST_STATE",
    "drip_from_cfx",
    "drip_from_gdrip",
    "hex_to_bytes",
    "hex_to_int",
    "is_hex",
    "to_address",
    "to_block_hash",
    "to_drip",
    "to_epoch",
    "to_hex",
    "to_private_key",
    "to_tx_hash",
]
