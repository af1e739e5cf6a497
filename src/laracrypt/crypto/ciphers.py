"""Registry of supported ciphers and key generation."""

from __future__ import annotations

import os
from dataclasses import dataclass

from laracrypt.errors import UnsupportedCipherError

DEFAULT_CIPHER = "aes-256-cbc"
IV_SIZE = 16
# PHP reports a 12-byte IV for GCM; payloads written by PHP carry that size.
GCM_PHP_IV_SIZE = 12
TAG_LEN = 16


@dataclass(frozen=True)
class CipherSpec:
    name: str
    key_size: int
    aead: bool


SUPPORTED_CIPHERS: dict[str, CipherSpec] = {
    "aes-128-cbc": CipherSpec(name="aes-128-cbc", key_size=16, aead=False),
    "aes-256-cbc": CipherSpec(name="aes-256-cbc", key_size=32, aead=False),
    "aes-128-gcm": CipherSpec(name="aes-128-gcm", key_size=16, aead=True),
    "aes-256-gcm": CipherSpec(name="aes-256-gcm", key_size=32, aead=True),
}


def normalize_cipher(cipher: str) -> str:
    if not isinstance(cipher, str):
        return ""
    return cipher.strip().lower()


def supported(cipher: str) -> bool:
    """Return True if the cipher identifier is registered (case-insensitive)."""

    return normalize_cipher(cipher) in SUPPORTED_CIPHERS


def is_aead(cipher: str) -> bool:
    """Return the AEAD flag for a cipher, False when it is unknown."""

    spec = SUPPORTED_CIPHERS.get(normalize_cipher(cipher))
    return spec.aead if spec is not None else False


def get_cipher_spec(cipher: str) -> CipherSpec:
    spec = SUPPORTED_CIPHERS.get(normalize_cipher(cipher))
    if spec is None:
        raise UnsupportedCipherError(f"Unsupported cipher: {cipher}")
    return spec


def generate_key(cipher: str = DEFAULT_CIPHER) -> bytes:
    """Generate a random key of the size the cipher requires."""

    return os.urandom(get_cipher_spec(cipher).key_size)


__all__ = [
    "CipherSpec",
    "DEFAULT_CIPHER",
    "GCM_PHP_IV_SIZE",
    "IV_SIZE",
    "SUPPORTED_CIPHERS",
    "TAG_LEN",
    "generate_key",
    "get_cipher_spec",
    "is_aead",
    "normalize_cipher",
    "supported",
]
