"""Command line interface for laracrypt."""

from __future__ import annotations

import base64
import json
from importlib.metadata import PackageNotFoundError, version
from typing import Callable

import click
from rich.console import Console
from rich.table import Table

from laracrypt import __version__
from laracrypt.crypto.ciphers import DEFAULT_CIPHER, SUPPORTED_CIPHERS, generate_key
from laracrypt.crypto.keys import DEFAULT_KEY_ENV, format_key
from laracrypt.encrypter import Encrypter
from laracrypt.encrypter.serializer import DEFAULT_SERIALIZER, SERIALIZERS
from laracrypt.errors import (
    ConfigurationError,
    DecryptionError,
    InvalidPayloadError,
    SerializationError,
)

EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_CRYPTO = 2
EXIT_CORRUPT = 4

console = Console()

_cipher_option = click.option(
    "--cipher",
    type=click.Choice(sorted(SUPPORTED_CIPHERS), case_sensitive=False),
    default=DEFAULT_CIPHER,
    show_default=True,
    help="Cipher used for the payload.",
)
_key_option = click.option(
    "--key",
    "key_opt",
    envvar=DEFAULT_KEY_ENV,
    help=f"Encryption key (base64:..., base64 or raw). Defaults to ${DEFAULT_KEY_ENV}.",
)
_serializer_option = click.option(
    "--serializer",
    type=click.Choice(sorted(SERIALIZERS), case_sensitive=False),
    default=DEFAULT_SERIALIZER,
    show_default=True,
    help="Value serialization format.",
)


def _package_version() -> str:
    try:
        return version("laracrypt")
    except PackageNotFoundError:
        return __version__


def _handle_action(action: Callable[[], None]) -> int:
    try:
        action()
    except DecryptionError as exc:
        if exc.mac_mismatch:
            console.print("[red]Error: the MAC is invalid[/red]")
        else:
            console.print(f"[red]{exc}[/red]")
        return EXIT_CRYPTO
    except InvalidPayloadError as exc:
        console.print(f"[red]Invalid payload:[/red] {exc}")
        return EXIT_CORRUPT
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return EXIT_USAGE
    except SerializationError as exc:
        console.print(f"[red]Cannot serialize value:[/red] {exc}")
        return EXIT_USAGE
    return EXIT_SUCCESS


def _echo_value(value: object) -> None:
    # Plain output so results can be piped.
    if isinstance(value, str):
        click.echo(value)
    else:
        click.echo(json.dumps(value, ensure_ascii=False))


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=False,
)
@click.version_option(version=_package_version(), prog_name="laracrypt")
def cli() -> None:
    """Encrypt and decrypt Laravel-compatible payloads."""


@cli.command("generate-key", help="Generate a random key for a cipher.")
@_cipher_option
@click.option("--raw", is_flag=True, default=False, help="Print bare base64 without the base64: prefix.")
def generate_key_cmd(cipher: str, raw: bool) -> None:
    key = generate_key(cipher)
    click.echo(base64.b64encode(key).decode("ascii") if raw else format_key(key))


@cli.command(
    help="Encrypt a value into a payload.",
    epilog="Examples:\n  laracrypt encrypt 'Hello World' --key base64:...\n  laracrypt encrypt '{\"a\": 1}' --json",
)
@click.argument("value")
@_key_option
@_cipher_option
@_serializer_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Parse VALUE as JSON before encrypting.")
@click.option("--no-serialize", is_flag=True, default=False, help="Encrypt VALUE as a plain string.")
@click.pass_context
def encrypt(
    ctx: click.Context,
    value: str,
    key_opt: str | None,
    cipher: str,
    serializer: str,
    as_json: bool,
    no_serialize: bool,
) -> None:
    def _run() -> None:
        encrypter = Encrypter(key_opt, cipher, serializer)
        if no_serialize:
            click.echo(encrypter.encrypt_string(value))
            return
        try:
            data = json.loads(value) if as_json else value
        except json.JSONDecodeError as exc:
            raise SerializationError(f"VALUE is not valid JSON: {exc}") from exc
        click.echo(encrypter.encrypt(data))

    ctx.exit(_handle_action(_run))


@cli.command(help="Decrypt a payload and print its value.")
@click.argument("payload")
@_key_option
@_cipher_option
@_serializer_option
@click.option("--no-unserialize", is_flag=True, default=False, help="Print the decrypted text as-is.")
@click.pass_context
def decrypt(
    ctx: click.Context,
    payload: str,
    key_opt: str | None,
    cipher: str,
    serializer: str,
    no_unserialize: bool,
) -> None:
    def _run() -> None:
        encrypter = Encrypter(key_opt, cipher, serializer)
        if no_unserialize:
            _echo_value(encrypter.decrypt_string(payload))
        else:
            _echo_value(encrypter.decrypt(payload))

    ctx.exit(_handle_action(_run))


@cli.command(help="Show payload fields and MAC status without decrypting.")
@click.argument("payload")
@_key_option
@_cipher_option
@click.pass_context
def inspect(ctx: click.Context, payload: str, key_opt: str | None, cipher: str) -> None:
    def _run() -> None:
        overview = Encrypter(key_opt, cipher).describe(payload)
        table = Table(show_header=False, box=None)
        table.add_row("Cipher", f"{overview.cipher} ({'AEAD' if overview.aead else 'CBC + HMAC-SHA256'})")
        table.add_row("IV", f"{overview.payload.iv} ({overview.iv_len} bytes)")
        table.add_row("Ciphertext", f"{overview.ciphertext_len} bytes")
        table.add_row("Key length", f"{overview.key_len} bytes")
        if overview.aead:
            table.add_row("Tag", overview.payload.tag or "(missing)")
        else:
            table.add_row("MAC (provided)", overview.provided_mac)
            table.add_row("MAC (calculated)", overview.calculated_mac)
            status = "[green]match[/green]" if overview.mac_matches else "[red]mismatch[/red]"
            table.add_row("MAC status", status)

        console.print("[bold]Payload[/bold]")
        console.print(table)

    ctx.exit(_handle_action(_run))


@cli.command("version", help="Show version information.")
def version_cmd() -> None:
    click.echo(f"laracrypt {_package_version()}")


def main(argv: list[str] | None = None) -> int:
    try:
        return cli.main(args=argv, prog_name="laracrypt", standalone_mode=False)
    except SystemExit as exc:  # noqa: TRY003
        code = exc.code if isinstance(exc.code, int) else EXIT_USAGE
        return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
