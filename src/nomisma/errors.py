"""
Typed error classes for nomisma.

Every failure raised by the library derives from ``NomismaError`` so callers
can catch one base class, while still being able to branch on the specific
failure mode.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
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
]


class NomismaError(Exception):
    """Base class for all nomisma errors."""


class FormatError(NomismaError, ValueError):
    """A value could not be coerced to its canonical or domain form."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class KeystoreError(NomismaError, ValueError):
    pass


class AuthenticationError(KeystoreError):
    """Keystore MAC mismatch: wrong password or corrupted record."""


class VersionError(KeystoreError):
    """Keystore record was written by an unsupported version."""


class SignatureError(NomismaError, ValueError):
    pass


class RpcError(NomismaError):
    """Raised when a JSON-RPC call fails or returns an error object."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        code: Optional[int] = None,
        data: Any = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.method = method
        self.code = code
        self.data = data
        self.request_id = request_id

    def __str__(self) -> str:
        parts = [f"RPC[{self.method or '-'}]"]
        if self.code is not None:
            parts.append(f"code={self.code}")
        parts.append(f"msg={self.message!r}")
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)


class RpcTimeoutError(RpcError, TimeoutError):
    """No response arrived for a request before its deadline."""


class ConnectionClosedError(RpcError):
    """The transport was closed while the request was still waiting."""


class TransactionOutcomeError(NomismaError):
    """The node reported a non-success outcome for an executed transaction."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        outcome_status: Optional[int] = None,
        receipt: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash
        self.outcome_status = outcome_status
        self.receipt = receipt


class WaitTimeoutError(NomismaError, TimeoutError):
    """A confirmation wait did not reach its stage before the deadline."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        timeout_ms: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash
        self.timeout_ms = timeout_ms
