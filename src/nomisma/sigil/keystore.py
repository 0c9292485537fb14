"""
Keystore cipher - protect a private key at rest.

Record format (version 3), every field canonical hex:

    {"version": "0x03", "salt": ..., "iv": ..., "cipher": ..., "mac": ...}

- key material: scrypt(password, salt, N=8192, r=8, p=1, dkLen=32)
- cipher:       AES-128-CTR keyed with the first 16 derived bytes
- mac:          keccak256(last 16 derived bytes || cipher)

Decryption verifies the MAC before touching the ciphertext.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..canon.hex import is_hex, to_hex
from ..errors import AuthenticationError, FormatError, VersionError
from ..utils import keccak256, random_bytes

VERSION = 3

SCRYPT_N = 8192
SCRYPT_R = 8
SCRYPT_P = 1
DERIVED_KEY_LENGTH = 32

SALT_LENGTH = 32
IV_LENGTH = 16


@dataclass(frozen=True)
class KeystoreRecord:
    version: str
    salt: str
    iv: str
    cipher: str
    mac: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "KeystoreRecord":
        try:
            return cls(**{name: to_hex(payload[name]) for name in ("version", "salt", "iv", "cipher", "mac")})
        except KeyError as exc:
            raise FormatError(f"keystore record missing field {exc.args[0]!r}", payload) from exc

    def to_dict(self) -> dict[str, str]:
        return {
            "version": self.version,
            "salt": self.salt,
            "iv": self.iv,
            "cipher": self.cipher,
            "mac": self.mac,
        }


def _password_bytes(password: str | bytes) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def _raw(value: str) -> bytes:
    # Keystore fields are byte strings, not quantities: no zero collapse.
    if not is_hex(value):
        raise FormatError(f"{value!r} do not match hex string", value)
    return bytes.fromhex(value[2:])


def _derive(password: bytes, salt: bytes) -> bytes:
    kdf = Scrypt(salt=salt, length=DERIVED_KEY_LENGTH, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
    return kdf.derive(password)


def _aes_128_ctr(key: bytes, iv: bytes, data: bytes) -> bytes:
    # CTR is symmetric: the same call encrypts and decrypts.
    cipher = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    return cipher.update(data) + cipher.finalize()


def encrypt(private_key: bytes, password: str | bytes) -> KeystoreRecord:
    """
    Encrypt a private key with a password.

    Args:
        private_key: Raw private key bytes
        password: Password text (UTF-8) or bytes

    Returns:
        KeystoreRecord with a fresh random salt and IV
    """
    salt = random_bytes(SALT_LENGTH)
    iv = random_bytes(IV_LENGTH)
    derived = _derive(_password_bytes(password), salt)
    cipher = _aes_128_ctr(derived[:16], iv, bytes(private_key))
    mac = keccak256(derived[16:32] + cipher)
    return KeystoreRecord(
        version=to_hex(VERSION),
        salt=to_hex(salt),
        iv=to_hex(iv),
        cipher=to_hex(cipher),
        mac=to_hex(mac),
    )


def decrypt(record: KeystoreRecord | dict[str, Any], password: str | bytes) -> bytes:
    """
    Decrypt a keystore record.

    Raises:
        VersionError: If the record version is not supported
        AuthenticationError: If the MAC does not match (wrong password or
            corrupted record)
    """
    if not isinstance(record, KeystoreRecord):
        record = KeystoreRecord.from_dict(record)

    if record.version != to_hex(VERSION):
        raise VersionError(f"unsupported keystore version {record.version}, expected {to_hex(VERSION)}")

    cipher = _raw(record.cipher)
    derived = _derive(_password_bytes(password), _raw(record.salt))
    mac = keccak256(derived[16:32] + cipher)
    if not hmac.compare_digest(mac, _raw(record.mac)):
        raise AuthenticationError("keystore MAC mismatch (wrong password or corrupted data)")

    return _aes_128_ctr(derived[:16], _raw(record.iv), cipher)
