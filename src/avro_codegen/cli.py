"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from avro_codegen.configuration import (
    DEFAULT_CONFIG_FILENAME,
    BuildConfiguration,
    ConfigurationError,
    default_configuration,
    load_configuration,
    write_placeholder_configuration,
)
from avro_codegen.idl_compilation import IdlParseError, SchemaConflictError
from avro_codegen.pipeline import (
    IDL_TO_SCHEMA_TASK,
    SCHEMA_TO_SOURCES_TASK,
    TaskGraphError,
    run_task,
)
from avro_codegen.schema_management import SchemaParseError, SchemaSerializationError
from avro_codegen.source_generation import SourceRenderError

_PIPELINE_ERRORS = (
    ConfigurationError,
    IdlParseError,
    SchemaConflictError,
    SchemaParseError,
    SchemaSerializationError,
    SourceRenderError,
    TaskGraphError,
    OSError,
)
_PACKAGE_LOGGER = logging.getLogger("avro_codegen")


class CliError(Exception):
    """Custom CLI error."""


def _configuration_options(command: Callable[..., Any]) -> Callable[..., Any]:
    command = click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Log pipeline progress to stderr.",
    )(command)
    command = click.option(
        "--project-dir",
        "project_dir",
        required=False,
        default=".",
        show_default=True,
        type=click.Path(file_okay=False, path_type=str),
        help="Project directory used for default paths when no configuration is given",
    )(command)
    return click.option(
        "--config",
        "config_path",
        required=False,
        type=click.Path(path_type=str),
        help="Path to YAML/JSON build configuration file",
    )(command)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="avro-codegen")
def cli() -> None:
    """Avro IDL, schema and Python source generation pipeline."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML build configuration to write",
)
def generate_config(output_path: str) -> None:
    """Generate a build configuration with the default settings and guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="idl2schema")
@_configuration_options
def idl_to_schema(config_path: str | None, project_dir: str, verbose: bool) -> None:
    """Compile Avro IDL files into canonical Avro schema files."""
    _run_and_echo(IDL_TO_SCHEMA_TASK, config_path, project_dir, verbose)


@cli.command(name="generate")
@_configuration_options
def generate(config_path: str | None, project_dir: str, verbose: bool) -> None:
    """Compile IDL files, then generate Python sources from all schema files."""
    _run_and_echo(SCHEMA_TO_SOURCES_TASK, config_path, project_dir, verbose)


def _run_and_echo(task_name: str, config_path: str | None, project_dir: str, verbose: bool) -> None:
    handler = _attach_log_handler() if verbose else None
    try:
        outputs = run_task(task_name, _resolve_configuration(config_path, project_dir))
    except _PIPELINE_ERRORS as exc:
        raise CliError(str(exc)) from exc
    finally:
        if handler is not None:
            _PACKAGE_LOGGER.removeHandler(handler)
    for path in outputs[task_name]:
        click.echo(str(path))


def _resolve_configuration(config_path: str | None, project_dir: str) -> BuildConfiguration:
    if config_path is not None:
        return load_configuration(config_path)
    candidate = Path(project_dir) / DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        return load_configuration(candidate)
    return default_configuration(project_dir)


def _attach_log_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    _PACKAGE_LOGGER.setLevel(logging.INFO)
    _PACKAGE_LOGGER.addHandler(handler)
    return handler


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
