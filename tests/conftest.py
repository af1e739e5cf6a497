import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

RAW_KEY = b"12345678901234567890123456789012"
APP_KEY = "base64:MTIzNDU2Nzg5MDEyMzQ1Njc4OTAxMjM0NTY3ODkwMTI="


@pytest.fixture
def app_key() -> str:
    return APP_KEY


@pytest.fixture
def encrypter():
    from laracrypt.encrypter import Encrypter

    return Encrypter(APP_KEY)
