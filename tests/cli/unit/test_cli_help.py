"""CLI smoke tests."""

from click.testing import CliRunner
from avro_codegen.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "generate-config" in result.output
    assert "idl2schema" in result.output
    assert "generate" in result.output


def test_generate_help_lists_configuration_options() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["generate", "--help"])

    assert result.exit_code == 0
    assert "--config" in result.output
    assert "--project-dir" in result.output
    assert "--verbose" in result.output
