"""
ECDSA / secp256k1 key management for nomisma.

This module handles the keys used for:
- Transaction signing over a keccak-256 digest
- Sender recovery from (r, s, v)
- Local key persistence in ~/.nomisma/.env as PRIVATE_KEY (hex format)

Addresses are the last 20 bytes of keccak-256 of the 64-byte uncompressed
public key, written as canonical lowercase hex.

Dependencies: eth-account / eth-keys (no full web3.py needed)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from ..canon.types import to_address, to_private_key
from ..errors import FormatError
from ..utils import keccak256, random_bytes

# Default config directory
NOMISMA_DIR = Path.home() / ".nomisma"
NOMISMA_ENV = NOMISMA_DIR / ".env"


def _key_bytes(private_key: str | bytes) -> bytes:
    # Not hex_to_bytes: a 32-byte key must never collapse.
    return bytes.fromhex(to_private_key(private_key)[2:])


def random_private_key(entropy: Optional[bytes] = None) -> str:
    """
    Generate a random private key.

    Args:
        entropy: Optional 32 bytes mixed into the key material.

    Returns:
        0x-prefixed canonical hex private key
    """
    if entropy is None:
        entropy = random_bytes(32)
    if len(entropy) != 32:
        raise FormatError(f"entropy must be 32 bytes, got {len(entropy)}", entropy)
    return to_private_key(keccak256(random_bytes(64) + bytes(entropy) + random_bytes(64)))


def private_key_to_address(private_key: str | bytes) -> str:
    """Canonical address derived from a private key."""
    account = Account.from_key(_key_bytes(private_key))
    return to_address(account.address)


def public_key_to_address(public_key: bytes) -> str:
    """
    Address of a 64-byte public key (or 65 bytes with the 0x04 prefix).
    """
    if len(public_key) == 65:
        public_key = public_key[1:]
    if len(public_key) != 64:
        raise FormatError(f"public key must be 64 bytes, got {len(public_key)}", public_key)
    return to_address(keccak256(public_key)[-20:])


def sign_digest(digest: bytes, private_key: str | bytes) -> tuple[int, int, int]:
    """
    Sign a 32-byte digest (RFC 6979 deterministic nonce, low-s).

    Returns:
        Tuple of (r, s, v) where v is the recovery id (0 or 1)
    """
    signature = keys.PrivateKey(_key_bytes(private_key)).sign_msg_hash(digest)
    return signature.r, signature.s, signature.v


def recover_address(digest: bytes, r: int, s: int, v: int) -> Optional[str]:
    """
    Recover the signer address from a digest and signature.

    Returns:
        Canonical address, or None if the signature does not recover.
    """
    try:
        signature = keys.Signature(vrs=(v, r, s))
        public_key = signature.recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError, ValueError):
        return None
    return public_key_to_address(public_key.to_bytes())


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, address)
        - private_key_hex: 0x-prefixed hex private key (66 chars)
        - address: 0x-prefixed lowercase address (42 chars)
    """
    private_key = random_private_key()
    return private_key, private_key_to_address(private_key)


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    """
    Save private key to .env file.

    Args:
        private_key: 0x-prefixed hex private key
        env_path: Path to .env file (default: ~/.nomisma/.env)

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or NOMISMA_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    # Read existing .env content or start fresh
    existing = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing["PRIVATE_KEY"] = to_private_key(private_key)

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load ~/.nomisma/.env into the process environment (existing values win)."""
    env_path = env_path or NOMISMA_ENV
    if not env_path.exists():
        return False
    return load_dotenv(env_path, override=False)


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from .env file or environment.

    Args:
        env_path: Path to .env file (default: ~/.nomisma/.env)

    Returns:
        0x-prefixed canonical hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = env_path or NOMISMA_ENV

    if env_path.exists():
        load_dotenv(env_path, override=True)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(
            f"PRIVATE_KEY not found. Run 'nomisma genesis' or set "
            f"PRIVATE_KEY in {env_path}"
        )

    return to_private_key(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    """
    Get the address for a private key.

    Args:
        private_key: 0x-prefixed hex private key.
                     If None, loads from .env.
    """
    if private_key is None:
        private_key = load_private_key()
    return private_key_to_address(private_key)
