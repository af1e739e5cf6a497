"""Value serialization applied before encryption and after decryption.

Three interchangeable serializers are provided and picked by name when an
:class:`~laracrypt.encrypter.core.Encrypter` is built:

``php``
    Full PHP ``serialize()`` grammar through :mod:`phpserialize`. This is
    what Laravel's ``encrypt()`` helper produces and expects.
``php-scalar``
    A reduced rendition of the same grammar covering scalars only. Lists
    and maps are embedded as a JSON string token, so they come back as text
    unless the peer wrapped them in an ``a:`` token.
``json``
    ``j:<json>`` for structured values and ``s:<text>`` for strings. Not
    understood by PHP; meant for Python-to-Python use.

``unserialize`` is lenient in every mode: text that does not parse is
returned unchanged and a warning is logged.
"""

from __future__ import annotations

import json
import logging
import math
import re
from enum import Enum
from typing import Any, Protocol, Union

import phpserialize

from laracrypt.errors import ConfigurationError, SerializationError

logger = logging.getLogger(__name__)

SerializerName = str


class ValueKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"
    SEQUENCE = "sequence"
    MAP = "map"


def classify(value: Any) -> ValueKind:
    """Return the kind of a value, or raise if it cannot be serialized."""

    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAP
    raise SerializationError(f"Cannot serialize value of type: {type(value).__name__}")


def ensure_representable(value: Any) -> ValueKind:
    """Classify ``value`` and every value nested inside it."""

    kind = classify(value)
    if kind is ValueKind.SEQUENCE:
        for item in value:
            ensure_representable(item)
    elif kind is ValueKind.MAP:
        for key, item in value.items():
            if isinstance(key, bool) or not isinstance(key, (str, int)):
                raise SerializationError(f"Cannot serialize map key of type: {type(key).__name__}")
            ensure_representable(item)
    return kind


def _dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class ValueSerializer(Protocol):
    name: str

    def serialize(self, value: Any) -> str: ...

    def unserialize(self, text: str) -> Any: ...


class PhpSerializer:
    """PHP ``serialize()`` grammar backed by :mod:`phpserialize`."""

    name = "php"

    def serialize(self, value: Any) -> str:
        ensure_representable(value)
        return phpserialize.dumps(value, charset="utf-8").decode("utf-8")

    def unserialize(self, text: str) -> Any:
        try:
            data = _from_php(phpserialize.loads(text.encode("utf-8"), charset="utf-8", decode_strings=True))
        except (ValueError, RecursionError) as exc:
            logger.warning("Unable to unserialize PHP value (%s); returning raw text", exc)
            return text
        return data


def _from_php(data: Any) -> Any:
    # PHP has a single array type; keys 0..n-1 in order are a list.
    if isinstance(data, dict):
        converted = {key: _from_php(item) for key, item in data.items()}
        if list(converted) == list(range(len(converted))):
            return list(converted.values())
        return converted
    return data


_STRING_TOKEN = re.compile(r'^s:(\d+):"(.*)";$', re.DOTALL)
_INT_TOKEN = re.compile(r"^i:(-?\d+);$")
_FLOAT_TOKEN = re.compile(r"^d:([^;]+);$")
_BOOL_TOKEN = re.compile(r"^b:([01]);$")
_EMBEDDED_JSON = re.compile(r's:\d+:"([\[{].*[\]}])"', re.DOTALL)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return repr(value)


def _string_token(text: str) -> str:
    return f's:{len(text.encode("utf-8"))}:"{text}";'


class ScalarPhpSerializer:
    """Scalar subset of the PHP grammar, implemented in-package."""

    name = "php-scalar"

    def serialize(self, value: Any) -> str:
        kind = ensure_representable(value)
        if kind is ValueKind.STRING:
            return _string_token(value)
        if kind is ValueKind.INTEGER:
            return f"i:{value};"
        if kind is ValueKind.FLOAT:
            return f"d:{_format_float(value)};"
        if kind is ValueKind.BOOLEAN:
            return f"b:{int(value)};"
        if kind is ValueKind.NULL:
            return "N;"
        return _string_token(_dump_json(value))

    def unserialize(self, text: str) -> Any:
        if text == "N;":
            return None

        string_match = _STRING_TOKEN.match(text)
        int_match = _INT_TOKEN.match(text)
        float_match = _FLOAT_TOKEN.match(text)
        if string_match:
            # Declared length counts UTF-8 bytes.
            if len(string_match.group(2).encode("utf-8")) == int(string_match.group(1)):
                return string_match.group(2)
        elif int_match:
            return int(int_match.group(1))
        elif float_match:
            try:
                return float(float_match.group(1))
            except ValueError:
                pass
        elif _BOOL_TOKEN.match(text):
            return text == "b:1;"
        elif text.startswith("a:"):
            embedded = _EMBEDDED_JSON.search(text)
            if embedded:
                try:
                    return json.loads(embedded.group(1))
                except (json.JSONDecodeError, RecursionError):
                    pass

        logger.warning("Unrecognised serialized value; returning raw text")
        return text


class JsonSerializer:
    """``j:``/``s:`` tagged JSON serialization."""

    name = "json"

    def serialize(self, value: Any) -> str:
        kind = ensure_representable(value)
        if kind is ValueKind.STRING:
            return "s:" + value
        return "j:" + _dump_json(value)

    def unserialize(self, text: str) -> Any:
        if text.startswith("j:"):
            try:
                return json.loads(text[2:])
            except (json.JSONDecodeError, RecursionError) as exc:
                logger.warning("Unable to decode JSON value (%s); returning raw text", exc)
                return text
        if text.startswith("s:"):
            return text[2:]
        return text


SERIALIZERS: dict[str, type] = {
    PhpSerializer.name: PhpSerializer,
    ScalarPhpSerializer.name: ScalarPhpSerializer,
    JsonSerializer.name: JsonSerializer,
}
DEFAULT_SERIALIZER = PhpSerializer.name


def get_serializer(serializer: Union[SerializerName, ValueSerializer]) -> ValueSerializer:
    """Resolve a serializer name, or pass a serializer instance through."""

    if isinstance(serializer, str):
        factory = SERIALIZERS.get(serializer.lower())
        if factory is None:
            choices = ", ".join(sorted(SERIALIZERS))
            raise ConfigurationError(f"Unknown serializer {serializer!r} (expected one of: {choices})")
        return factory()
    if callable(getattr(serializer, "serialize", None)) and callable(getattr(serializer, "unserialize", None)):
        return serializer
    raise ConfigurationError(f"Invalid serializer: {serializer!r}")


__all__ = [
    "DEFAULT_SERIALIZER",
    "JsonSerializer",
    "PhpSerializer",
    "SERIALIZERS",
    "ScalarPhpSerializer",
    "ValueKind",
    "ValueSerializer",
    "classify",
    "ensure_representable",
    "get_serializer",
]
