"""Laravel-compatible encryption for Python."""

from importlib.metadata import PackageNotFoundError, version

from laracrypt.encrypter import Encrypter

__all__ = ["Encrypter", "__version__"]

try:
    __version__ = version("laracrypt")
except PackageNotFoundError:  # pragma: no cover - happens only from source checkout
    __version__ = "0.0.0-dev"
