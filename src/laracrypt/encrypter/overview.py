"""Payload introspection without decryption."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from laracrypt.crypto import ciphers
from laracrypt.crypto.mac import compute_mac, verify_mac
from laracrypt.encrypter.payload import Payload, decode_payload


@dataclass(frozen=True)
class PayloadOverview:
    payload: Payload
    cipher: str
    aead: bool
    iv_len: int
    ciphertext_len: int
    key_len: int
    provided_mac: str
    calculated_mac: str
    mac_matches: bool
    has_tag: bool


def describe_payload(payload: Union[str, bytes], key: bytes, cipher: str) -> PayloadOverview:
    """Decode ``payload`` and report how its MAC relates to ``key``.

    Nothing is decrypted. For AEAD ciphers the MAC fields are still
    reported but ``mac_matches`` is only meaningful for CBC payloads.
    """

    spec = ciphers.get_cipher_spec(cipher)
    decoded = decode_payload(payload, aead=spec.aead)
    return PayloadOverview(
        payload=decoded,
        cipher=spec.name,
        aead=spec.aead,
        iv_len=len(decoded.iv_bytes()),
        ciphertext_len=len(decoded.value_bytes()),
        key_len=len(key),
        provided_mac=decoded.mac,
        calculated_mac=compute_mac(decoded.iv, decoded.value, key),
        mac_matches=verify_mac(decoded, key),
        has_tag=bool(decoded.tag),
    )


__all__ = ["PayloadOverview", "describe_payload"]
