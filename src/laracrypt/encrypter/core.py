"""Encrypter: the encrypt/decrypt pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Any, Mapping, Union

from cryptography.exceptions import InvalidTag

from laracrypt.crypto import ciphers
from laracrypt.crypto.aes import AesCbcEncryptor, AesGcmEncryptor
from laracrypt.crypto.ciphers import DEFAULT_CIPHER, IV_SIZE, CipherSpec
from laracrypt.crypto.keys import DEFAULT_KEY_ENV, resolve_key
from laracrypt.crypto.mac import compute_mac, verify_mac
from laracrypt.encrypter.overview import PayloadOverview, describe_payload
from laracrypt.encrypter.payload import Payload, build_payload, decode_payload, encode_payload_fields
from laracrypt.encrypter.serializer import DEFAULT_SERIALIZER, ValueSerializer, get_serializer
from laracrypt.errors import (
    ConfigurationError,
    DecryptionError,
    LaracryptError,
    MacMismatchError,
)

logger = logging.getLogger(__name__)

KeyLike = Union[str, bytes, bytearray]


class Encrypter:
    """Encrypts values into Laravel-compatible payloads and back.

    The key, cipher and serializer are fixed at construction; an instance
    holds no other state and may be shared between threads.

    ``serializer`` is ``"php"`` (default, full PHP grammar), ``"php-scalar"``
    or ``"json"``, or any object with ``serialize``/``unserialize``.
    """

    def __init__(
        self,
        key: KeyLike | None,
        cipher: str = DEFAULT_CIPHER,
        serializer: Union[str, ValueSerializer] = DEFAULT_SERIALIZER,
    ) -> None:
        spec = ciphers.get_cipher_spec(cipher)
        key_bytes = resolve_key(key)
        if len(key_bytes) != spec.key_size:
            raise ConfigurationError(
                f"Invalid key length for {spec.name}. "
                f"Expected {spec.key_size} bytes, got {len(key_bytes)} bytes."
            )

        self._key = key_bytes
        self._spec: CipherSpec = spec
        self._serializer = get_serializer(serializer)
        logger.debug("Encrypter configured (cipher=%s, serializer=%s)", spec.name, self._serializer.name)

    @classmethod
    def from_environment(
        cls,
        cipher: str = DEFAULT_CIPHER,
        serializer: Union[str, ValueSerializer] = DEFAULT_SERIALIZER,
        *,
        env_var: str = DEFAULT_KEY_ENV,
        environ: Mapping[str, str] | None = None,
    ) -> "Encrypter":
        """Build an encrypter whose key comes from ``env_var`` (``APP_KEY``)."""

        return cls(resolve_key(None, env_var=env_var, environ=environ), cipher, serializer)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cipher={self._spec.name!r}, serializer={self._serializer.name!r})"

    @staticmethod
    def supported(cipher: str) -> bool:
        return ciphers.supported(cipher)

    @staticmethod
    def generate_key(cipher: str = DEFAULT_CIPHER) -> bytes:
        """Generate a random key for ``cipher``."""

        return ciphers.generate_key(cipher)

    def is_aead(self) -> bool:
        return self._spec.aead

    def get_cipher(self) -> str:
        return self._spec.name

    def get_key(self) -> bytes:
        return self._key

    @property
    def serializer(self) -> ValueSerializer:
        return self._serializer

    def encrypt(self, value: Any, serialize: bool = True) -> str:
        """Encrypt ``value`` and return the base64 payload.

        With ``serialize=False`` the value must already be ``str`` or
        ``bytes`` and is encrypted as-is.
        """

        iv = os.urandom(IV_SIZE)
        if serialize:
            plaintext = self._serializer.serialize(value).encode("utf-8")
        elif isinstance(value, str):
            plaintext = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray)):
            plaintext = bytes(value)
        else:
            raise TypeError("Unserialized values must be str or bytes.")

        if self._spec.aead:
            ciphertext, tag = AesGcmEncryptor.encrypt(self._key, iv, plaintext)
            fields = build_payload(iv, ciphertext, tag=tag)
        else:
            ciphertext = AesCbcEncryptor.encrypt(self._key, iv, plaintext)
            fields = build_payload(iv, ciphertext)
            fields = replace(fields, mac=compute_mac(fields.iv, fields.value, self._key))

        logger.debug("Encrypted %d plaintext bytes with %s", len(plaintext), self._spec.name)
        return encode_payload_fields(fields)

    def encrypt_string(self, value: str) -> str:
        """Encrypt a string without serialization."""

        if not isinstance(value, str):
            raise TypeError("The value must be a string.")
        return self.encrypt(value, serialize=False)

    def decrypt(self, payload: Union[str, bytes], unserialize: bool = True) -> Any:
        """Decrypt a payload.

        Every failure surfaces as :class:`DecryptionError`, chained to the
        underlying cause. For CBC ciphers the MAC is checked before any
        decryption happens.
        """

        try:
            decoded = decode_payload(payload, aead=self._spec.aead)
            if not self._spec.aead and not verify_mac(decoded, self._key):
                logger.warning("Rejected payload with invalid MAC (cipher=%s)", self._spec.name)
                raise MacMismatchError("The MAC is invalid.")
            plaintext = self._decrypt_payload(decoded).decode("utf-8")
            result = self._serializer.unserialize(plaintext) if unserialize else plaintext
        except InvalidTag as exc:
            logger.warning("Rejected payload with invalid authentication tag (cipher=%s)", self._spec.name)
            raise DecryptionError("Decryption failed: The authentication tag is invalid.") from exc
        except (LaracryptError, ValueError) as exc:
            raise DecryptionError(f"Decryption failed: {exc}") from exc

        logger.debug("Decrypted payload with %s", self._spec.name)
        return result

    def decrypt_string(self, payload: Union[str, bytes]) -> str:
        """Decrypt a payload without unserialization."""

        return self.decrypt(payload, unserialize=False)

    def describe(self, payload: Union[str, bytes]) -> PayloadOverview:
        """Inspect a payload with this encrypter's key, without decrypting it."""

        return describe_payload(payload, self._key, self._spec.name)

    def _decrypt_payload(self, payload: Payload) -> bytes:
        iv = payload.iv_bytes()
        ciphertext = payload.value_bytes()
        if self._spec.aead:
            return AesGcmEncryptor.decrypt(self._key, iv, ciphertext, payload.tag_bytes())
        return AesCbcEncryptor.decrypt(self._key, iv, ciphertext)


__all__ = ["Encrypter", "KeyLike"]
