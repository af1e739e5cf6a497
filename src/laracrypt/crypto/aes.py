"""AES-CBC and AES-GCM helpers on top of ``cryptography``."""

from __future__ import annotations

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from laracrypt.crypto.ciphers import TAG_LEN

BLOCK_SIZE_BITS = 128


class AesCbcEncryptor:
    """AES-CBC with PKCS#7 padding, the format OpenSSL uses by default."""

    @staticmethod
    def encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    @staticmethod
    def decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
        if len(ciphertext) == 0 or len(ciphertext) % (BLOCK_SIZE_BITS // 8):
            raise ValueError("Ciphertext length is not a multiple of the block size")
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()


class AesGcmEncryptor:
    """AES-GCM without associated data; the tag travels separately."""

    @staticmethod
    def encrypt(key: bytes, iv: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
        encryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return ciphertext, encryptor.tag

    @staticmethod
    def decrypt(key: bytes, iv: bytes, ciphertext: bytes, tag: bytes) -> bytes:
        if len(tag) != TAG_LEN:
            raise InvalidTag("Authentication tag has the wrong length")
        decryptor = Cipher(algorithms.AES(key), modes.GCM(iv, tag)).decryptor()
        return decryptor.update(ciphertext) + decryptor.finalize()


__all__ = ["AesCbcEncryptor", "AesGcmEncryptor", "BLOCK_SIZE_BITS", "InvalidTag"]
