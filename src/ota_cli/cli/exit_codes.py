"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit — command completed without error."""

GENERAL_ERROR: int = 1
"""A known OtaCliError was caught, typically a backend failure."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

INVALID_INPUT: int = 3
"""Unknown command/subcommand, missing flag or malformed identifier."""

NOT_IMPLEMENTED: int = 4
"""The command resolved but has no supported backend operation."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
