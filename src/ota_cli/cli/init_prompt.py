"""Interactive prompts for ``ota init --interactive``.

Asks for each configuration value that was not given as a flag.  Only
the CLI layer talks to the terminal; the configuration store receives
this module's :func:`prompt_missing_values` as a plain callback.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ota_cli.exceptions import EnvironmentError, MissingParameterError

QUESTIONS: dict[str, str] = {
    "campaigner": "Campaigner service URL:",
    "director": "Director service URL:",
    "registry": "Device registry URL:",
    "reposerver": "Package repository URL:",
    "auth-server": "OAuth2 server URL (blank for none):",
    "client-id": "OAuth2 client id (blank for none):",
    "client-secret": "OAuth2 client secret (blank for none):",
}

SECRET_FLAGS: frozenset[str] = frozenset({"client-secret"})


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompting."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def prompt_missing_values(names: Sequence[str]) -> dict[str, str]:
    """Prompt for each flag in *names* and return the non-blank answers.

    Raises
    ------
    KeyboardInterrupt
        If the user presses Ctrl+C during a prompt.
    MissingParameterError
        If the user cancels a prompt (``None`` answer).
    """
    questionary = _import_questionary()
    answers: dict[str, str] = {}
    for name in names:
        message = QUESTIONS.get(name, f"{name}:")
        question = (
            questionary.password(message)
            if name in SECRET_FLAGS
            else questionary.text(message)
        )
        answer: str | None = question.ask()  # Returns None on Ctrl+C / Esc
        if answer is None:
            raise MissingParameterError(name)
        if answer.strip():
            answers[name] = answer.strip()
    return answers
