"""
Wallet - local accounts that sign transactions in-process.

An ``Account`` passed as ``from`` to ``Client.send_transaction`` makes the
client sign locally and submit the raw transaction.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional

from .canon.hex import to_hex
from .canon.types import to_private_key
from .errors import SignatureError
from .pneuma.tx import Transaction
from .sigil import keystore
from .sigil.eth import private_key_to_address, random_private_key


class Account:
    """
    A private key and its address.

    Example:
        account = Account("0xa816...d393")
        tx = account.sign_transaction({"nonce": 0, "gasPrice": 1, "gas": 21000, "to": ADDRESS})
    """

    def __init__(self, private_key: Any) -> None:
        self.private_key = to_private_key(private_key)
        self.address = private_key_to_address(self.private_key)

    def __repr__(self) -> str:
        return f"Account(address={self.address})"

    def __str__(self) -> str:
        return self.address

    def sign_transaction(self, options: Mapping[str, Any]) -> Transaction:
        """
        Build and sign a transaction from ``options``.

        Raises:
            SignatureError: If the signature does not recover to this account
        """
        tx = Transaction.from_options(options)
        tx.sign(self.private_key)
        if tx.sender != self.address:
            raise SignatureError(f"Invalid signature, transaction sender != {self.address}")
        return tx

    def encrypt(self, password: str | bytes) -> dict[str, str]:
        """Keystore record (as a dict) protecting this account's key."""
        raw = bytes.fromhex(self.private_key[2:])
        return keystore.encrypt(raw, password).to_dict()

    @classmethod
    def decrypt(cls, record: Mapping[str, Any], password: str | bytes) -> "Account":
        """Restore an account from a keystore record."""
        return cls(keystore.decrypt(dict(record), password))


class Wallet:
    """
    Table of accounts, reachable by address or by private key.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __iter__(self) -> Iterator[Account]:
        seen: set[str] = set()
        for account in self._accounts.values():
            if account.address not in seen:
                seen.add(account.address)
                yield account

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def create(self, entropy: Optional[Any] = None) -> Account:
        """Create and add an account from a fresh random key."""
        extra = None if entropy is None else bytes.fromhex(to_hex(entropy)[2:])
        return self.add(random_private_key(extra))

    def get(self, key: Any) -> Optional[Account]:
        """Look up by address or private key (any accepted hex form)."""
        try:
            return self._accounts.get(to_hex(key))
        except ValueError:
            return None

    def add(self, private_key: Any) -> Account:
        """Add an account; adding a known key returns the existing account."""
        private_key = to_private_key(private_key)
        account = self.get(private_key)
        if account is None:
            account = Account(private_key)
            self._accounts[account.address] = account
            self._accounts[account.private_key] = account
        return account

    def remove(self, key: Any) -> Optional[Account]:
        account = self.get(key)
        if account is not None:
            self._accounts.pop(account.address, None)
            self._accounts.pop(account.private_key, None)
        return account

    def clear(self) -> None:
        self._accounts.clear()
