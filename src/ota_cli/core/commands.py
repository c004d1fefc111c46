"""Command taxonomy and case-insensitive token resolution.

Two independent resolution passes are made per invocation: the first
token selects a :class:`Command`, the second selects a member of that
command's own subcommand enum.  Each command owns a separate enum, so a
subcommand is only ever meaningful next to its parent.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ota_cli.exceptions import UnknownCommandError, UnknownSubcommandError


# ---------------------------------------------------------------------------
# Top-level commands
# ---------------------------------------------------------------------------

class Command(Enum):
    """Top-level verb selecting a backend domain."""

    INIT = "init"
    CAMPAIGN = "campaign"
    DEVICE = "device"
    GROUP = "group"
    PACKAGE = "package"
    UPDATE = "update"


# ---------------------------------------------------------------------------
# Per-command subcommands
# ---------------------------------------------------------------------------

class CampaignCommand(Enum):
    LIST = "list"
    CREATE = "create"
    LAUNCH = "launch"
    CANCEL = "cancel"


class DeviceCommand(Enum):
    LIST = "list"
    CREATE = "create"
    DELETE = "delete"


class GroupCommand(Enum):
    LIST = "list"
    CREATE = "create"
    ADD = "add"
    RENAME = "rename"
    REMOVE = "remove"


class PackageCommand(Enum):
    LIST = "list"
    ADD = "add"
    FETCH = "fetch"


class UpdateCommand(Enum):
    CREATE = "create"
    LAUNCH = "launch"


Subcommand = Union[CampaignCommand, DeviceCommand, GroupCommand, PackageCommand, UpdateCommand]

SUBCOMMANDS: dict[Command, type[Enum]] = {
    Command.CAMPAIGN: CampaignCommand,
    Command.DEVICE: DeviceCommand,
    Command.GROUP: GroupCommand,
    Command.PACKAGE: PackageCommand,
    Command.UPDATE: UpdateCommand,
}
"""Subcommand enum owned by each command.  ``INIT`` takes none."""


# ---------------------------------------------------------------------------
# Resolved pair
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Invocation:
    """A resolved (command, subcommand) pair.

    Construction fails with :class:`ValueError` when *subcommand* does not
    belong to *command*, so a foreign pairing cannot exist at runtime.
    """

    command: Command
    subcommand: Subcommand | None = None

    def __post_init__(self) -> None:
        expected = SUBCOMMANDS.get(self.command)
        if expected is None:
            if self.subcommand is not None:
                raise ValueError(f"{self.command.value} takes no subcommand")
        elif not isinstance(self.subcommand, expected):
            raise ValueError(
                f"{self.subcommand!r} is not a {self.command.value} subcommand"
            )

    def __str__(self) -> str:
        if self.subcommand is None:
            return self.command.value
        return f"{self.command.value} {self.subcommand.value}"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_command(token: str) -> Command:
    """Map *token* to a :class:`Command`, ignoring case.

    Raises
    ------
    UnknownCommandError
        When the lower-cased token matches no command literal.
    """
    try:
        return Command(token.lower())
    except ValueError:
        raise UnknownCommandError(token) from None


def resolve_subcommand(command: Command, token: str | None) -> Subcommand | None:
    """Map *token* to a member of *command*'s subcommand enum, ignoring case.

    ``INIT`` accepts only an absent token and resolves to ``None``.

    Raises
    ------
    UnknownSubcommandError
        When the token matches no literal of *command*, when *command*
        requires a subcommand and none was given, or when ``INIT`` is
        given one.
    """
    enum_type = SUBCOMMANDS.get(command)
    if enum_type is None:
        if token is None:
            return None
        raise UnknownSubcommandError(command.value, token)

    choices = tuple(member.value for member in enum_type)
    if token is None:
        raise UnknownSubcommandError(command.value, "", choices=choices)
    try:
        return enum_type(token.lower())  # type: ignore[return-value]
    except ValueError:
        raise UnknownSubcommandError(command.value, token, choices=choices) from None


def resolve(command_token: str, subcommand_token: str | None = None) -> Invocation:
    """Run both resolution passes and return the resolved pair."""
    command = resolve_command(command_token)
    return Invocation(command, resolve_subcommand(command, subcommand_token))
