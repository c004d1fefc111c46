"""Entry point of the ``ota`` command.

:func:`run_with_boundary` is where every failure ends up: domain errors
are printed as ``Error: ...`` (plus an optional ``Hint: ...``) and turned
into the exit codes of :mod:`ota_cli.cli.exit_codes`; Ctrl+C and
unexpected exceptions get their own codes.

Notes
-----
* argparse only gathers the two positional tokens and the flag values.
  Resolving the tokens and checking flags is left to :mod:`ota_cli.core`,
  so ``ota DEVICE List`` works and errors carry stable prefixes.
* Results go to stdout; messages, logs and the progress bar go to stderr.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ota_cli.cli import exit_codes
from ota_cli.cli.console import configure_logging, console, escape_markup, print_result
from ota_cli.exceptions import InputError, NotImplementedCommandError, OtaCliError
from ota_cli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

FLAGS: tuple[tuple[str, str], ...] = (
    ("name", "Name of the device, group, package or campaign."),
    ("id", "Device identifier reported by the device itself."),
    ("type", "Device type tag for 'device create'."),
    ("device", "Device id."),
    ("group", "Group id."),
    ("campaign", "Campaign id."),
    ("update", "Update id."),
    ("targets", "Path to a YAML/JSON targets file for 'update create'."),
    ("version", "Package version."),
    ("hardware", "Comma-separated hardware ids for 'package add'."),
    ("path", "Package file to upload."),
    ("url", "Remote package location, instead of --path."),
    ("output", "Where 'package fetch' writes the package."),
    ("groups", "Comma-separated group ids for 'campaign create'."),
    ("filter", "Name filter for list subcommands."),
    ("limit", "Maximum number of list results."),
    ("offset", "Number of list results to skip."),
    ("campaigner", "Campaigner service URL ('init')."),
    ("director", "Director service URL ('init')."),
    ("registry", "Device registry URL ('init')."),
    ("reposerver", "Package repository URL ('init')."),
    ("auth-server", "OAuth2 server URL ('init')."),
    ("client-id", "OAuth2 client id ('init')."),
    ("client-secret", "OAuth2 client secret ('init')."),
)
"""Value-taking flags, passed on to the core keyed by their dashed name."""


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser.

    ``ota <command> [<subcommand>] [--flag value ...]``.  ``-V`` prints
    the program version because ``--version`` is the package version.
    """
    parser = argparse.ArgumentParser(
        prog="ota",
        description="Manage fleet over-the-air updates.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-V",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show the program version and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: per-user config directory).",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="init, campaign, device, group, package or update.",
    )
    parser.add_argument(
        "subcommand",
        nargs="?",
        default=None,
        help="Subcommand of the chosen command, e.g. 'list'.",
    )
    for flag, help_text in FLAGS:
        parser.add_argument(f"--{flag}", default=None, help=help_text)
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt for missing values ('init').",
    )
    return parser


def _collect_flags(args: argparse.Namespace) -> dict[str, str]:
    """Return supplied flag values keyed by their dashed flag name."""
    flags: dict[str, str] = {}
    for flag, _ in FLAGS:
        value = getattr(args, flag.replace("-", "_"))
        if value is not None:
            flags[flag] = value
    if args.interactive:
        flags["interactive"] = "true"
    return flags


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------

def _build_backends(
    config_path: Path | None,
    progress_callback: Callable[[dict[str, Any]], None] | None,
) -> Any:
    """Instantiate the HTTP clients and configuration store."""
    from ota_cli.cli.init_prompt import prompt_missing_values
    from ota_cli.infra import build_backends

    return build_backends(
        config_path=config_path,
        prompt=prompt_missing_values,
        progress_callback=progress_callback,
    )


def _wants_progress(command: str, subcommand: str | None) -> bool:
    """Whether the invocation streams a package and should show a bar."""
    from ota_cli.core.commands import Command, Invocation, PackageCommand, resolve

    try:
        invocation = resolve(command, subcommand)
    except InputError:
        return False
    return invocation == Invocation(Command.PACKAGE, PackageCommand.FETCH)


def _render(result: object) -> None:
    if isinstance(result, Path):
        console.print(f"[bold green]Wrote[/bold green] {escape_markup(str(result))}")
        return
    print_result(result)


def _run(args: argparse.Namespace) -> int:
    from ota_cli.cli.progress import TransferProgress
    from ota_cli.core.command_service import CommandService

    flags = _collect_flags(args)
    with contextlib.ExitStack() as stack:
        progress: TransferProgress | None = None
        if _wants_progress(args.command, args.subcommand):
            progress = stack.enter_context(TransferProgress())
        service = CommandService(_build_backends(args.config, progress))
        result = service.execute(args.command, args.subcommand, flags)

    _render(result)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Parse *argv* (``sys.argv[1:]`` when ``None``) and run one command.

    Domain errors propagate; :func:`run_with_boundary` renders them.
    Returns the process exit code on success.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    return _run(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def exit_code_for(exc: OtaCliError) -> int:
    """Map a domain error to its process exit code."""
    if isinstance(exc, InputError):
        return exit_codes.INVALID_INPUT
    if isinstance(exc, NotImplementedCommandError):
        return exit_codes.NOT_IMPLEMENTED
    return exit_codes.GENERAL_ERROR


def run_with_boundary(argv: list[str] | None = None) -> int:
    """Run :func:`main`, converting every failure into an exit code."""
    try:
        return main(argv)
    except OtaCliError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape_markup(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape_markup(exc.hint)}")
        return exit_code_for(exc)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return exit_codes.KEYBOARD_INTERRUPT
    except Exception as exc:  # noqa: BLE001
        logger.debug("unhandled exception", exc_info=True)
        console.print(
            "[bold red]Internal error[/bold red] (rerun with -vv for a traceback): "
            f"{type(exc).__name__}: {escape_markup(str(exc))}"
        )
        return exit_codes.UNEXPECTED_ERROR


def cli() -> None:
    """Console-script entry: exit with the code of :func:`run_with_boundary`."""
    sys.exit(run_with_boundary())
