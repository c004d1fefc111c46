"""Core / service layer — command grammar, validation and routing.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from ota_cli.core.command_service import CommandService
from ota_cli.core.commands import Command, Invocation, resolve, resolve_command, resolve_subcommand
from ota_cli.core.dispatcher import Backends, Dispatcher
from ota_cli.core.models import Config, Parameters
from ota_cli.core.parameters import extract

__all__: list[str] = [
    "Backends",
    "Command",
    "CommandService",
    "Config",
    "Dispatcher",
    "Invocation",
    "Parameters",
    "extract",
    "resolve",
    "resolve_command",
    "resolve_subcommand",
]
