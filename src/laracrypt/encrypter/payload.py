"""Payload envelope: base64-wrapped JSON ``{iv, value, mac, tag}``."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import asdict, dataclass
from typing import Any

from laracrypt.crypto.ciphers import GCM_PHP_IV_SIZE, IV_SIZE, TAG_LEN
from laracrypt.errors import InvalidPayloadError

PAYLOAD_FIELDS = ("iv", "value", "mac", "tag")


@dataclass(frozen=True)
class Payload:
    iv: str
    value: str
    mac: str = ""
    tag: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def iv_bytes(self) -> bytes:
        return _b64decode(self.iv, "iv")

    def value_bytes(self) -> bytes:
        return _b64decode(self.value, "value")

    def tag_bytes(self) -> bytes:
        return _b64decode(self.tag, "tag") if self.tag else b""


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str, field: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidPayloadError(f"Payload field {field!r} is not valid base64") from exc


def build_payload(iv: bytes, ciphertext: bytes, *, mac: str = "", tag: bytes = b"") -> Payload:
    return Payload(
        iv=_b64encode(iv),
        value=_b64encode(ciphertext),
        mac=mac,
        tag=_b64encode(tag) if tag else "",
    )


def encode_payload(iv: bytes, ciphertext: bytes, mac: str = "", tag: bytes = b"") -> str:
    """Build the envelope and return it base64-encoded."""

    return encode_payload_fields(build_payload(iv, ciphertext, mac=mac, tag=tag))


def encode_payload_fields(payload: Payload) -> str:
    # Compact separators match PHP's json_encode output.
    encoded = json.dumps(payload.to_dict(), separators=(",", ":"))
    return _b64encode(encoded.encode("utf-8"))


def _load_json(payload: str | bytes) -> Any:
    if not isinstance(payload, (str, bytes)):
        raise InvalidPayloadError(f"Payload must be str or bytes, got {type(payload).__name__}")
    if isinstance(payload, str):
        try:
            raw = payload.strip().encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidPayloadError("Payload is not valid base64") from exc
    else:
        raw = payload.strip()
    if not raw:
        raise InvalidPayloadError("Payload is empty")

    try:
        decoded = base64.b64decode(raw, validate=True)
    except binascii.Error as exc:
        raise InvalidPayloadError("Payload is not valid base64") from exc

    try:
        return json.loads(decoded.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidPayloadError("Payload is not valid JSON") from exc
    except RecursionError as exc:
        raise InvalidPayloadError("Payload JSON is nested too deeply") from exc


def _require_text(data: dict[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value:
        raise InvalidPayloadError(f"Payload is missing {field!r}")
    return value


def decode_payload(payload: str | bytes, *, aead: bool) -> Payload:
    """Decode and structurally validate an envelope.

    Raises :class:`InvalidPayloadError` on malformed base64 or JSON, missing
    fields, or fields of the wrong size. No key material is involved.
    """

    data = _load_json(payload)
    if not isinstance(data, dict):
        raise InvalidPayloadError("Payload is not a JSON object")

    iv = _require_text(data, "iv")
    value = _require_text(data, "value")

    mac = data.get("mac") or ""
    if not isinstance(mac, str):
        raise InvalidPayloadError("Payload 'mac' must be a string")
    if not aead and not mac:
        raise InvalidPayloadError("Payload is missing 'mac'")

    if aead and "tag" not in data:
        raise InvalidPayloadError("Payload is missing 'tag'")
    tag = data.get("tag") or ""
    if not isinstance(tag, str):
        raise InvalidPayloadError("Payload 'tag' must be a string")
    if not aead and tag:
        raise InvalidPayloadError("Payload carries a tag but the cipher does not support AEAD")

    result = Payload(iv=iv, value=value, mac=mac, tag=tag)

    iv_len = len(result.iv_bytes())
    allowed_iv = (IV_SIZE, GCM_PHP_IV_SIZE) if aead else (IV_SIZE,)
    if iv_len not in allowed_iv:
        raise InvalidPayloadError(f"Payload IV must be {IV_SIZE} bytes, got {iv_len}")
    result.value_bytes()
    if tag and len(result.tag_bytes()) != TAG_LEN:
        raise InvalidPayloadError(f"Payload tag must be {TAG_LEN} bytes")

    return result


__all__ = [
    "PAYLOAD_FIELDS",
    "Payload",
    "build_payload",
    "decode_payload",
    "encode_payload",
    "encode_payload_fields",
]
