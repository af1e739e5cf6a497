"""Public encrypter API re-exported for external users."""
from __future__ import annotations

from laracrypt.encrypter.core import Encrypter
from laracrypt.encrypter.overview import PayloadOverview, describe_payload
from laracrypt.encrypter.payload import Payload, decode_payload, encode_payload
from laracrypt.encrypter.serializer import (
    JsonSerializer,
    PhpSerializer,
    ScalarPhpSerializer,
    ValueKind,
    ValueSerializer,
    get_serializer,
)

__all__ = [
    "Encrypter",
    "JsonSerializer",
    "Payload",
    "PayloadOverview",
    "PhpSerializer",
    "ScalarPhpSerializer",
    "ValueKind",
    "ValueSerializer",
    "decode_payload",
    "describe_payload",
    "encode_payload",
    "get_serializer",
]
