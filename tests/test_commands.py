"""Tests for command/subcommand resolution (core/commands.py).

Resolution is pure: these tests need no mocks.  They verify:

* Every literal resolves regardless of case.
* Anything else fails with the matching typed error.
* ``Invocation`` refuses subcommands from another command.
"""

from __future__ import annotations

import pytest

from ota_cli.core.commands import (
    SUBCOMMANDS,
    CampaignCommand,
    Command,
    DeviceCommand,
    GroupCommand,
    Invocation,
    PackageCommand,
    UpdateCommand,
    resolve,
    resolve_command,
    resolve_subcommand,
)
from ota_cli.exceptions import InputError, UnknownCommandError, UnknownSubcommandError


def _case_variants(literal: str) -> list[str]:
    return [literal, literal.upper(), literal.capitalize(), literal.swapcase().capitalize()]


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------

class TestResolveCommand:
    @pytest.mark.parametrize("command", list(Command))
    def test_every_literal_in_any_case(self, command: Command) -> None:
        for token in _case_variants(command.value):
            assert resolve_command(token) is command

    @pytest.mark.parametrize(
        "token",
        ["frobnicate", "", "camp", "campaigns", " init", "init ", "devices", "list"],
    )
    def test_unknown_token(self, token: str) -> None:
        with pytest.raises(UnknownCommandError) as exc_info:
            resolve_command(token)
        assert exc_info.value.token == token

    def test_unknown_command_message_prefix(self) -> None:
        with pytest.raises(UnknownCommandError) as exc_info:
            resolve_command("frobnicate")
        assert str(exc_info.value) == "unknown command: 'frobnicate'"

    def test_unknown_command_is_input_error(self) -> None:
        assert issubclass(UnknownCommandError, InputError)

    def test_resolution_is_idempotent(self) -> None:
        assert resolve_command("Group") is resolve_command("Group")


# ---------------------------------------------------------------------------
# Second level
# ---------------------------------------------------------------------------

ALL_PAIRS = [
    (command, sub)
    for command, enum_type in SUBCOMMANDS.items()
    for sub in enum_type
]


class TestResolveSubcommand:
    def test_every_command_but_init_has_subcommands(self) -> None:
        assert set(SUBCOMMANDS) == set(Command) - {Command.INIT}

    @pytest.mark.parametrize(("command", "sub"), ALL_PAIRS)
    def test_every_literal_in_any_case(self, command: Command, sub: object) -> None:
        for token in _case_variants(sub.value):  # type: ignore[attr-defined]
            assert resolve_subcommand(command, token) is sub

    def test_literal_sets(self) -> None:
        assert {m.value for m in CampaignCommand} == {"list", "create", "launch", "cancel"}
        assert {m.value for m in DeviceCommand} == {"list", "create", "delete"}
        assert {m.value for m in GroupCommand} == {"list", "create", "add", "rename", "remove"}
        assert {m.value for m in PackageCommand} == {"list", "add", "fetch"}
        assert {m.value for m in UpdateCommand} == {"create", "launch"}

    def test_subcommand_of_other_domain_rejected(self) -> None:
        # "delete" is a device subcommand only.
        with pytest.raises(UnknownSubcommandError) as exc_info:
            resolve_subcommand(Command.GROUP, "delete")
        assert exc_info.value.parent == "group"
        assert exc_info.value.token == "delete"

    def test_message_prefix(self) -> None:
        with pytest.raises(UnknownSubcommandError) as exc_info:
            resolve_subcommand(Command.UPDATE, "cancel")
        assert str(exc_info.value).startswith("unknown subcommand: update 'cancel'")
        assert exc_info.value.hint is not None
        assert "create, launch" in exc_info.value.hint

    def test_missing_subcommand_rejected(self) -> None:
        with pytest.raises(UnknownSubcommandError):
            resolve_subcommand(Command.DEVICE, None)

    def test_init_takes_no_subcommand(self) -> None:
        assert resolve_subcommand(Command.INIT, None) is None

    def test_init_rejects_subcommand(self) -> None:
        with pytest.raises(UnknownSubcommandError):
            resolve_subcommand(Command.INIT, "list")


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------

class TestInvocation:
    def test_resolve_returns_pair(self) -> None:
        assert resolve("CAMPAIGN", "Launch") == Invocation(
            Command.CAMPAIGN, CampaignCommand.LAUNCH
        )

    def test_resolve_init(self) -> None:
        assert resolve("init") == Invocation(Command.INIT)

    def test_foreign_pair_rejected(self) -> None:
        with pytest.raises(ValueError):
            Invocation(Command.GROUP, DeviceCommand.LIST)

    def test_missing_subcommand_rejected(self) -> None:
        with pytest.raises(ValueError):
            Invocation(Command.PACKAGE)

    def test_init_with_subcommand_rejected(self) -> None:
        with pytest.raises(ValueError):
            Invocation(Command.INIT, PackageCommand.LIST)

    def test_same_literal_in_two_domains_is_distinct(self) -> None:
        # Both have a "list" member, but they are different values.
        assert CampaignCommand.LIST != DeviceCommand.LIST
        assert Invocation(Command.CAMPAIGN, CampaignCommand.LIST) != Invocation(
            Command.DEVICE, DeviceCommand.LIST
        )

    def test_str(self) -> None:
        assert str(Invocation(Command.GROUP, GroupCommand.RENAME)) == "group rename"
        assert str(Invocation(Command.INIT)) == "init"
