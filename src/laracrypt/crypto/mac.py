"""HMAC-SHA256 over the base64 text of the IV and ciphertext."""

from __future__ import annotations

import hashlib
import hmac
from typing import Mapping, Protocol, Union

MAC_HEX_LEN = 64


class _HasMacFields(Protocol):
    iv: str
    value: str
    mac: str


def compute_mac(iv_b64: str, value_b64: str, key: bytes) -> str:
    """Return the hex MAC for a payload.

    The message is the concatenation of the two base64 *strings*, not of
    the decoded bytes.
    """

    message = (iv_b64 + value_b64).encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def verify_mac(payload: Union[_HasMacFields, Mapping[str, str]], key: bytes) -> bool:
    """Recompute the MAC and compare it in constant time.

    Never raises: an absent or wrong-length MAC is simply invalid.
    """

    if isinstance(payload, Mapping):
        iv, value, provided = payload.get("iv", ""), payload.get("value", ""), payload.get("mac", "")
    else:
        iv, value, provided = payload.iv, payload.value, payload.mac

    calculated = compute_mac(str(iv or ""), str(value or ""), key)
    provided_bytes = str(provided or "").encode("utf-8", "replace")
    matches = hmac.compare_digest(calculated.encode("ascii"), provided_bytes)
    return bool(provided) and len(provided_bytes) == len(calculated) and matches


__all__ = ["MAC_HEX_LEN", "compute_mac", "verify_mac"]
