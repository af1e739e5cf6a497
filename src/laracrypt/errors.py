"""Custom exceptions for laracrypt."""

from __future__ import annotations


class LaracryptError(Exception):
    """Base exception for laracrypt."""


class ConfigurationError(LaracryptError):
    """Key or cipher configuration is missing or invalid."""


class UnsupportedCipherError(ConfigurationError):
    """Cipher identifier is not registered."""


class InvalidPayloadError(LaracryptError):
    """Encrypted payload envelope is malformed."""


class MacMismatchError(LaracryptError):
    """Payload MAC does not match the recomputed value."""


class SerializationError(LaracryptError):
    """Value has no representable serialized form."""


class DecryptionError(LaracryptError):
    """Payload could not be decrypted.

    The underlying failure is chained as ``__cause__`` and exposed as
    :attr:`cause` so callers can tell a MAC mismatch from other failures.
    """

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    @property
    def mac_mismatch(self) -> bool:
        return isinstance(self.__cause__, MacMismatchError)
