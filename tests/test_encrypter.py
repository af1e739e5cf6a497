import base64

import pytest

from laracrypt.crypto.ciphers import generate_key
from laracrypt.encrypter import Encrypter, PayloadOverview
from laracrypt.errors import ConfigurationError, InvalidPayloadError, UnsupportedCipherError

RAW_KEY = b"12345678901234567890123456789012"


@pytest.mark.parametrize(
    ("cipher", "size"),
    [("aes-128-cbc", 16), ("aes-256-cbc", 32), ("aes-128-gcm", 16), ("aes-256-gcm", 32)],
)
def test_construct_with_matching_key(cipher: str, size: int) -> None:
    encrypter = Encrypter(b"k" * size, cipher)
    assert encrypter.get_cipher() == cipher
    assert encrypter.is_aead() == cipher.endswith("gcm")


def test_cipher_name_is_case_insensitive() -> None:
    assert Encrypter(RAW_KEY, "AES-256-CBC").get_cipher() == "aes-256-cbc"


@pytest.mark.parametrize(
    ("key", "cipher"),
    [
        (b"k" * 16, "aes-256-cbc"),
        (b"k" * 32, "aes-128-cbc"),
        (b"k" * 31, "aes-256-gcm"),
        ("short", "aes-256-cbc"),
    ],
)
def test_invalid_key_length(key, cipher: str) -> None:
    with pytest.raises(ConfigurationError, match="Invalid key length"):
        Encrypter(key, cipher)


def test_key_length_message_names_sizes() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        Encrypter(b"k" * 10)
    assert str(excinfo.value) == "Invalid key length for aes-256-cbc. Expected 32 bytes, got 10 bytes."


@pytest.mark.parametrize("cipher", ["aes-192-cbc", "des", "", "aes-256-ctr"])
def test_unsupported_cipher(cipher: str) -> None:
    with pytest.raises(UnsupportedCipherError, match="Unsupported cipher"):
        Encrypter(RAW_KEY, cipher)


@pytest.mark.parametrize("cipher", [None, 256, b"aes-256-cbc"])
def test_non_text_cipher_rejected(cipher) -> None:
    with pytest.raises(UnsupportedCipherError):
        Encrypter(RAW_KEY, cipher)


def test_unsupported_cipher_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        Encrypter(RAW_KEY, "rot13")


@pytest.mark.parametrize("key", [None, "", b""])
def test_missing_key(key) -> None:
    with pytest.raises(ConfigurationError, match="No encryption key provided"):
        Encrypter(key)


def test_key_forms_resolve_to_same_bytes(app_key: str) -> None:
    bare = base64.b64encode(RAW_KEY).decode()
    for key in (app_key, bare, RAW_KEY, RAW_KEY.decode(), bytearray(RAW_KEY)):
        assert Encrypter(key).get_key() == RAW_KEY


def test_static_helpers() -> None:
    assert Encrypter.supported("aes-128-gcm")
    assert not Encrypter.supported("aes-192-cbc")
    assert len(Encrypter.generate_key()) == 32
    assert len(Encrypter.generate_key("aes-128-cbc")) == 16
    assert Encrypter.generate_key() != Encrypter.generate_key()


def test_repr_hides_key(encrypter: Encrypter) -> None:
    text = repr(encrypter)
    assert "aes-256-cbc" in text
    assert "php" in text
    assert RAW_KEY.decode() not in text
    assert "MTIz" not in text


def test_from_environment(app_key: str) -> None:
    encrypter = Encrypter.from_environment(environ={"APP_KEY": app_key})
    assert encrypter.get_key() == RAW_KEY


def test_from_environment_custom_variable() -> None:
    key = generate_key("aes-128-gcm")
    env = {"CRYPT_KEY": "base64:" + base64.b64encode(key).decode()}
    encrypter = Encrypter.from_environment("aes-128-gcm", env_var="CRYPT_KEY", environ=env)
    assert encrypter.get_key() == key


def test_from_environment_reads_process_env(monkeypatch: pytest.MonkeyPatch, app_key: str) -> None:
    monkeypatch.setenv("APP_KEY", app_key)
    assert Encrypter.from_environment().get_key() == RAW_KEY


def test_from_environment_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_KEY", raising=False)
    with pytest.raises(ConfigurationError, match="APP_KEY is not set"):
        Encrypter.from_environment()


def test_explicit_constructor_ignores_environment(monkeypatch: pytest.MonkeyPatch, app_key: str) -> None:
    monkeypatch.setenv("APP_KEY", app_key)
    with pytest.raises(ConfigurationError):
        Encrypter(None)


def test_custom_serializer_object() -> None:
    class Upper:
        name = "upper"

        def serialize(self, value):
            return str(value).upper()

        def unserialize(self, text):
            return text.lower()

    encrypter = Encrypter(RAW_KEY, serializer=Upper())
    assert encrypter.decrypt(encrypter.encrypt("MiXeD")) == "mixed"
    assert encrypter.serializer.name == "upper"


def test_describe_cbc_payload(encrypter: Encrypter) -> None:
    payload = encrypter.encrypt("Hello")
    overview = encrypter.describe(payload)

    assert isinstance(overview, PayloadOverview)
    assert overview.cipher == "aes-256-cbc"
    assert not overview.aead
    assert overview.iv_len == 16
    assert overview.ciphertext_len == 16
    assert overview.key_len == 32
    assert overview.mac_matches
    assert overview.provided_mac == overview.calculated_mac
    assert not overview.has_tag


def test_describe_reports_mac_mismatch(encrypter: Encrypter) -> None:
    payload = Encrypter(b"z" * 32).encrypt("Hello")
    overview = encrypter.describe(payload)
    assert not overview.mac_matches
    assert overview.provided_mac != overview.calculated_mac


def test_describe_gcm_payload() -> None:
    encrypter = Encrypter(generate_key("aes-256-gcm"), "aes-256-gcm")
    overview = encrypter.describe(encrypter.encrypt("Hello"))
    assert overview.aead
    assert overview.has_tag
    assert overview.provided_mac == ""


def test_describe_rejects_malformed_payload(encrypter: Encrypter) -> None:
    with pytest.raises(InvalidPayloadError):
        encrypter.describe("not a payload")
