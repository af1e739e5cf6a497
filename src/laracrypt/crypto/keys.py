"""Encryption key normalisation.

Keys arrive either as raw bytes or as text in one of the forms an
application ``APP_KEY`` takes:

* ``base64:<b64>`` - the prefixed form written by ``key:generate``;
* bare base64 text that decodes to a valid AES key length;
* any other text, used as raw key bytes.
"""

from __future__ import annotations

import base64
import binascii
import os
from typing import Mapping

from laracrypt.errors import ConfigurationError

KEY_PREFIX = "base64:"
DEFAULT_KEY_ENV = "APP_KEY"
_BASE64_KEY_SIZES = (16, 32)


def _strict_b64decode(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


def parse_key(key: str | bytes | bytearray) -> bytes:
    """Turn a caller-supplied key into raw key bytes."""

    if isinstance(key, (bytes, bytearray)):
        return bytes(key)
    if not isinstance(key, str):
        raise ConfigurationError(f"Encryption key must be str or bytes, got {type(key).__name__}")

    if key.startswith(KEY_PREFIX):
        try:
            return _strict_b64decode(key[len(KEY_PREFIX) :])
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise ConfigurationError("Encryption key has an invalid base64 payload") from exc

    try:
        decoded = _strict_b64decode(key)
    except (binascii.Error, UnicodeEncodeError):
        decoded = None
    if decoded is not None and len(decoded) in _BASE64_KEY_SIZES:
        return decoded
    return key.encode("utf-8")


def resolve_key(
    key: str | bytes | bytearray | None = None,
    *,
    env_var: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> bytes:
    """Return key bytes from ``key`` or, when asked to, from the environment.

    The environment is consulted only when ``env_var`` is given and no
    explicit key was passed.
    """

    if key is None and env_var is not None:
        source = os.environ if environ is None else environ
        key = source.get(env_var) or None

    if key is None or len(key) == 0:
        where = f" and {env_var} is not set" if env_var else ""
        raise ConfigurationError(f"No encryption key provided{where}")
    return parse_key(key)


def format_key(key: bytes) -> str:
    """Render key bytes in the ``base64:`` form used for ``APP_KEY``."""

    return KEY_PREFIX + base64.b64encode(key).decode("ascii")


__all__ = [
    "DEFAULT_KEY_ENV",
    "KEY_PREFIX",
    "format_key",
    "parse_key",
    "resolve_key",
]
