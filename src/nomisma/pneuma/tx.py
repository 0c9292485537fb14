"""
Transaction - canonical encoding, digest, signing and sender recovery.

Wire layout (RLP list):

    unsigned: [nonce, gasPrice, gas, to, value, data]
    signed:   [nonce, gasPrice, gas, to, value, data, v, r, s]

Quantities are written as minimal big-endian bytes (zero is the empty
string). The keccak-256 digest of the unsigned encoding is the message that
gets signed; the transaction hash is keccak-256 of the signed encoding.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import rlp

from ..canon.hex import EMPTY, hex_to_bytes, hex_to_int, to_hex
from ..canon.types import to_address, to_drip, to_private_key
from ..errors import FormatError
from ..sigil.eth import recover_address, sign_digest
from ..utils import int_to_big_endian, keccak256

SIGNATURE_FIELDS = ("r", "s", "v")


def required_option(options: Mapping[str, Any], name: str, kind: str) -> Any:
    value = options.get(name)
    if value is None:
        raise FormatError(f"`{name}` is required and should match `{kind}`", options)
    return value


def send_options(options: Mapping[str, Any]) -> dict[str, str]:
    """
    Canonicalize options for a node-signed ``cfx_sendTransaction``.

    ``from``, ``nonce``, ``gasPrice`` and ``gas`` are required; ``to`` and
    ``value`` are dropped when absent and ``data`` defaults to ``0x``.
    """
    result = {
        "from": to_address(required_option(options, "from", "Address")),
        "nonce": to_hex(required_option(options, "nonce", "Hex")),
        "gasPrice": to_drip(required_option(options, "gasPrice", "Drip")),
        "gas": to_hex(required_option(options, "gas", "Hex")),
        "data": to_hex(options.get("data") or EMPTY),
    }
    if options.get("to") is not None:
        result["to"] = to_address(options["to"])
    if options.get("value") is not None:
        result["value"] = to_drip(options["value"])
    return result


def call_options(options: Mapping[str, Any]) -> dict[str, str]:
    """
    Canonicalize options for ``cfx_call`` / ``cfx_estimateGas``.

    Only ``to`` is required; every other field is passed through when set.
    """
    coerce = {
        "from": to_address,
        "nonce": to_hex,
        "gasPrice": to_drip,
        "gas": to_hex,
        "value": to_drip,
        "data": to_hex,
    }
    result = {"to": to_address(required_option(options, "to", "Address"))}
    for name, func in coerce.items():
        if options.get(name) is not None:
            result[name] = func(options[name])
    return result


class Transaction:
    """
    A ledger transaction.

    Every field is held as a canonical hex string. ``to`` is ``0x`` for a
    contract creation; the signature fields are ``None`` until ``sign()``.

    Example:
        tx = Transaction(nonce=0, gasPrice=1, gas=21000, to=ADDRESS, value=0)
        tx.sign(private_key)
        raw = tx.serialize()
    """

    def __init__(
        self,
        *,
        nonce: Any,
        gasPrice: Any,
        gas: Any,
        to: Any = None,
        value: Any = 0,
        data: Any = None,
        r: Any = None,
        s: Any = None,
        v: Any = None,
    ) -> None:
        present = [name for name, field in zip(SIGNATURE_FIELDS, (r, s, v)) if field is not None]
        if present and len(present) != len(SIGNATURE_FIELDS):
            raise FormatError(f"signature needs all of r, s, v; got only {', '.join(present)}", present)

        self.nonce = to_hex(nonce)
        self.gasPrice = to_drip(gasPrice)
        self.gas = to_hex(gas)
        self.to = EMPTY if to is None else to_address(to)
        self.value = to_drip(value)
        self.data = to_hex(data)
        self.r: Optional[str] = None if r is None else to_hex(r)
        self.s: Optional[str] = None if s is None else to_hex(s)
        self.v: Optional[str] = None if v is None else to_hex(v)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "Transaction":
        """Build from a mapping; keys outside the transaction fields are ignored."""
        names = ("nonce", "gasPrice", "gas", "to", "value", "data", *SIGNATURE_FIELDS)
        fields = {name: options[name] for name in names if options.get(name) is not None}
        for name in ("nonce", "gasPrice", "gas"):
            required_option(fields, name, "Drip" if name == "gasPrice" else "Hex")
        return cls(**fields)

    def __repr__(self) -> str:
        return (
            f"Transaction(nonce={self.nonce}, gasPrice={self.gasPrice}, gas={self.gas}, "
            f"to={self.to}, value={self.value}, data={self.data}, "
            f"r={self.r}, s={self.s}, v={self.v})"
        )

    @property
    def signed(self) -> bool:
        return all(getattr(self, name) is not None for name in SIGNATURE_FIELDS)

    def encode(self, include_signature: bool = False) -> bytes:
        """
        RLP-encode the transaction.

        Args:
            include_signature: Append v, r, s (all must be set).
        """
        raw = [
            int_to_big_endian(hex_to_int(self.nonce)),
            int_to_big_endian(hex_to_int(self.gasPrice)),
            int_to_big_endian(hex_to_int(self.gas)),
            hex_to_bytes(self.to),
            int_to_big_endian(hex_to_int(self.value)),
            hex_to_bytes(self.data),
        ]
        if include_signature:
            if not self.signed:
                raise FormatError("transaction is not signed", self)
            raw.extend(int_to_big_endian(hex_to_int(getattr(self, name))) for name in ("v", "r", "s"))
        return rlp.encode(raw)

    def digest(self) -> bytes:
        """keccak-256 of the unsigned encoding."""
        return keccak256(self.encode())

    @property
    def hash(self) -> Optional[str]:
        """keccak-256 of the signed encoding; None until the transaction is signed."""
        if not self.signed:
            return None
        return to_hex(keccak256(self.encode(include_signature=True)))

    def sign(self, private_key: str | bytes) -> None:
        """Sign with a private key and set r, s, v together."""
        r, s, v = sign_digest(self.digest(), to_private_key(private_key))
        self.r = to_hex(r.to_bytes(32, "big"))
        self.s = to_hex(s.to_bytes(32, "big"))
        self.v = to_hex(v)

    @property
    def sender(self) -> Optional[str]:
        """
        Address recovered from the signature.

        None when a signature field is missing or does not recover; callers
        must treat that as "unsigned or invalid".
        """
        if not self.signed:
            return None
        try:
            digest = self.digest()
            r, s, v = (hex_to_int(getattr(self, name)) for name in SIGNATURE_FIELDS)
        except FormatError:
            return None
        return recover_address(digest, r, s, v)

    def serialize(self) -> str:
        """Canonical hex of the signed encoding, ready for ``cfx_sendRawTransaction``."""
        return to_hex(self.encode(include_signature=True))
