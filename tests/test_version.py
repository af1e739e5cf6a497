from click.testing import CliRunner


def test_version_attribute() -> None:
    import laracrypt

    assert isinstance(laracrypt.__version__, str)
    assert laracrypt.__version__


def test_cli_reports_version() -> None:
    from laracrypt import __version__
    from laracrypt.cli import cli

    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "laracrypt" in result.output
    assert __version__ in result.output

    command_result = runner.invoke(cli, ["version"])

    assert command_result.exit_code == 0
    assert "laracrypt" in command_result.output
    assert __version__ in command_result.output


def test_version_command_matches_installed_metadata() -> None:
    from laracrypt.cli import _package_version, cli

    result = CliRunner().invoke(cli, ["version"])

    assert result.exit_code == 0
    assert result.output == f"laracrypt {_package_version()}\n"
