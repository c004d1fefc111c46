"""Custom exception hierarchy for ota-cli.

All exceptions that cross layer boundaries must inherit from
:class:`OtaCliError`.  Raw third-party exceptions (e.g. from httpx or
PyYAML) must NEVER propagate beyond the infrastructure layer — they must
be caught and re-raised as a typed subclass defined here.

Every class carries a stable :attr:`OtaCliError.prefix` so scripts and
operators can tell "bad input" apart from "backend rejected the request"
by the first words of the message.

Hierarchy
---------
OtaCliError
├── InputError
│   ├── UnknownCommandError
│   ├── UnknownSubcommandError
│   ├── MissingParameterError
│   ├── InvalidIdentifierError
│   └── InvalidParameterError
├── NotImplementedCommandError
├── BackendFailureError
│   ├── ApiError
│   ├── AuthenticationError
│   └── TargetsFileError
├── ConfigError
└── EnvironmentError
"""

from __future__ import annotations


class OtaCliError(Exception):
    """Base exception for all ota-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    prefix: str = "error"
    """Stable, human-readable message prefix for this failure kind."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""

    def __str__(self) -> str:
        return f"{self.prefix}: {super().__str__()}"


# --- Parse-time input errors -----------------------------------------------

class InputError(OtaCliError):
    """Raised when the command line itself is invalid.

    Always detected before any backend call is attempted.
    """

    prefix = "invalid input"


class UnknownCommandError(InputError):
    """Raised when a top-level token matches no command literal."""

    prefix = "unknown command"

    def __init__(self, token: str) -> None:
        super().__init__(
            repr(token),
            hint="Valid commands: init, campaign, device, group, package, update.",
        )
        self.token: str = token


class UnknownSubcommandError(InputError):
    """Raised when a subcommand token matches no literal of its command."""

    prefix = "unknown subcommand"

    def __init__(self, parent: str, token: str, *, choices: tuple[str, ...] = ()) -> None:
        hint = f"Valid {parent} subcommands: {', '.join(choices)}." if choices else None
        super().__init__(f"{parent} {token!r}", hint=hint)
        self.parent: str = parent
        self.token: str = token


class MissingParameterError(InputError):
    """Raised when a required flag is absent for the resolved subcommand."""

    prefix = "missing parameter"

    def __init__(self, name: str) -> None:
        super().__init__(f"--{name}", hint=f"Pass --{name} <value>.")
        self.name: str = name


class InvalidIdentifierError(InputError):
    """Raised when a flag value cannot be parsed into its identifier type."""

    prefix = "invalid identifier"

    def __init__(self, name: str, raw_value: str, cause: str) -> None:
        super().__init__(f"--{name} {raw_value!r} ({cause})")
        self.name: str = name
        self.raw_value: str = raw_value
        self.cause: str = cause


class InvalidParameterError(InputError):
    """Raised when a present flag has a value of the wrong shape."""

    prefix = "invalid parameter"

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"--{name} {reason}")
        self.name: str = name


# --- Dispatch --------------------------------------------------------------

class NotImplementedCommandError(OtaCliError):
    """Raised for a resolved command with no supported backend operation."""

    prefix = "not implemented"


class BackendFailureError(OtaCliError):
    """Raised when the single invoked backend operation fails."""

    prefix = "backend failure"


class ApiError(BackendFailureError):
    """Raised for HTTP transport errors and non-success status codes."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code


class AuthenticationError(BackendFailureError):
    """Raised when an access token cannot be obtained."""


class TargetsFileError(BackendFailureError):
    """Raised when a targets file is unreadable or malformed."""


# --- Environment / configuration -------------------------------------------

class ConfigError(OtaCliError):
    """Raised when the CLI configuration is missing or unreadable."""

    prefix = "config error"


class EnvironmentError(OtaCliError):
    """Raised when a required runtime dependency is not available."""

    prefix = "environment error"
