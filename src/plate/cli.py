"""Plate CLI

Usage:
    plate render page.html.plate -p name=World     # render a template file
    plate render -I templates page.html.plate      # search templates/ too
    plate render --string 'Hi [[ _get("name") ]]' -p name=you
    plate render --preprocess-only page.html.plate # show the generated program
    plate version
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler

from plate._version import __version__
from plate.config import RenderOptions, load_defaults
from plate.engine import Engine
from plate.exceptions import PlateError

console = Console(stderr=True)

typer_app = typer.Typer(
    help="Render templates that use Python as the template language.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the plate CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (PLATE_DEBUG=1): DEBUG level - search path, cache hits, compiles
    """
    if os.environ.get("PLATE_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("PLATE_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    plate_logger = logging.getLogger("plate")
    plate_logger.setLevel(level)
    plate_logger.handlers = [handler]
    plate_logger.propagate = False


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


def parse_params(items: Optional[List[str]]) -> dict[str, Any]:
    """Parse key=value pairs; values are read as YAML scalars."""
    params: dict[str, Any] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {item!r}")
        try:
            params[key] = yaml.safe_load(value) if value else ""
        except yaml.YAMLError:
            params[key] = value
    return params


def load_params_file(path: Path) -> dict[str, Any]:
    """Load template parameters from a YAML mapping."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain a mapping")
    return data


@typer_app.command()
def render(
    template: str = typer.Argument(
        ..., help="Template file name, or template text with --string."
    ),
    param: Optional[List[str]] = typer.Option(
        None, "-p", "--param", help="Template parameter as key=value."
    ),
    params_file: Optional[Path] = typer.Option(
        None, "--params-file", help="YAML file with template parameters."
    ),
    path: Optional[List[str]] = typer.Option(
        None, "-I", "--path", help="Directory to search for templates."
    ),
    string: bool = typer.Option(
        False, "--string", help="Treat TEMPLATE as template text."
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Input is already a program, skip tag parsing."
    ),
    preprocess_only: bool = typer.Option(
        False, "--preprocess-only", help="Print the generated program instead."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", envvar="PLATE_CONFIG", help="YAML file with defaults."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Render a template and print its output."""
    setup_logging(verbose)

    params: dict[str, Any] = {}
    if params_file is not None:
        params.update(load_params_file(params_file))
    params.update(parse_params(param))

    # only flags given on the command line may shadow the config defaults
    data: dict[str, Any] = {"params": params, "path": list(path or [])}
    data["input_string" if string else "input_file"] = template
    if raw:
        data["raw"] = True
    if preprocess_only:
        data["preprocess_only"] = True

    try:
        defaults = load_defaults(config) if config is not None else None
        output = Engine(defaults=defaults).render(RenderOptions(**data))
    except (PlateError, FileNotFoundError, ValueError) as exc:
        exit_with_error(str(exc))

    typer.echo(output, nl=False)


@typer_app.command()
def version() -> None:
    """Show version and exit."""
    typer.echo(f"plate {__version__}")


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
