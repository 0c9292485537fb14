"""
nomisma - client library for building, signing and tracking ledger transactions.
"""

__version__ = "0.1.0"

__all__ = [
    # Errors
    "NomismaError",
    "FormatError",
    "KeystoreError",
    "AuthenticationError",
    "VersionError",
    "SignatureError",
    "RpcError",
    "RpcTimeoutError",
    "ConnectionClosedError",
    "TransactionOutcomeError",
    "WaitTimeoutError",
    # Canonical values
    "to_hex",
    "hex_to_bytes",
    "to_address",
    "to_private_key",
    "to_block_hash",
    "to_tx_hash",
    "to_epoch",
    "to_drip",
    "drip_from_gdrip",
    "drip_from_cfx",
    # Transactions
    "Transaction",
    # Node access
    "Client",
    "HttpProvider",
    "WebsocketProvider",
    "PendingTransaction",
    "create_provider",
    # Accounts
    "Account",
    "Wallet",
]

from .errors import (
    AuthenticationError,
    ConnectionClosedError,
    FormatError,
    KeystoreError,
    NomismaError,
    RpcError,
    RpcTimeoutError,
    SignatureError,
    TransactionOutcomeError,
    VersionError,
    WaitTimeoutError,
)
from .canon import (
    drip_from_cfx,
    drip_from_gdrip,
    hex_to_bytes,
    to_address,
    to_block_hash,
    to_drip,
    to_epoch,
    to_hex,
    to_private_key,
    to_tx_hash,
)
from .pneuma.tx import Transaction
from .pneuma.client import Client
from .pneuma.pending import PendingTransaction
from .pneuma.rpc import HttpProvider, create_provider
from .pneuma.ws import WebsocketProvider
from .wallet import Account, Wallet
