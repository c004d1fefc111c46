"""Smoke tests — verify scaffold wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

import pytest

from ota_cli import __version__
from ota_cli.cli import exit_codes
from ota_cli.cli.app import cli
from ota_cli.exceptions import (
    ApiError,
    AuthenticationError,
    BackendFailureError,
    ConfigError,
    EnvironmentError,
    InputError,
    InvalidIdentifierError,
    InvalidParameterError,
    MissingParameterError,
    NotImplementedCommandError,
    OtaCliError,
    TargetsFileError,
    UnknownCommandError,
    UnknownSubcommandError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            InputError,
            NotImplementedCommandError,
            BackendFailureError,
            ConfigError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(self, exc_class: type[OtaCliError]) -> None:
        assert issubclass(exc_class, OtaCliError)

    @pytest.mark.parametrize(
        "exc_class",
        [
            UnknownCommandError,
            UnknownSubcommandError,
            MissingParameterError,
            InvalidIdentifierError,
            InvalidParameterError,
        ],
    )
    def test_parse_errors_are_input_errors(self, exc_class: type[OtaCliError]) -> None:
        assert issubclass(exc_class, InputError)

    @pytest.mark.parametrize("exc_class", [ApiError, AuthenticationError, TargetsFileError])
    def test_service_errors_are_backend_failures(self, exc_class: type[OtaCliError]) -> None:
        assert issubclass(exc_class, BackendFailureError)

    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(OtaCliError, Exception)

    def test_message_is_prefixed(self) -> None:
        assert str(OtaCliError("boom")) == "error: boom"
        assert str(ConfigError("boom")) == "config error: boom"

    def test_hint_is_stored(self) -> None:
        err = OtaCliError("boom", hint="try this")
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert OtaCliError("boom").hint is None

    def test_prefixes_are_distinct_per_kind(self) -> None:
        prefixes = {
            UnknownCommandError.prefix,
            UnknownSubcommandError.prefix,
            MissingParameterError.prefix,
            InvalidIdentifierError.prefix,
            NotImplementedCommandError.prefix,
            BackendFailureError.prefix,
        }
        assert len(prefixes) == 6


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2

    def test_invalid_input_is_three(self) -> None:
        assert exit_codes.INVALID_INPUT == 3

    def test_not_implemented_is_four(self) -> None:
        assert exit_codes.NOT_IMPLEMENTED == 4

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130


# ---------------------------------------------------------------------------
# Console-script entry
# ---------------------------------------------------------------------------

class TestConsoleScript:
    def test_cli_exits_with_boundary_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["ota", "frobnicate"])
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.INVALID_INPUT
