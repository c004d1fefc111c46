"""Core command service — one resolve → extract → dispatch cycle.

This is the central service consumed by the CLI layer.  It depends on a
:class:`~ota_cli.core.dispatcher.Backends` set injected at construction
time, keeping the core free of any external-system imports.

Guarantees
----------
* Resolution and extraction complete before configuration is loaded or
  any backend is touched; the first failure ends the run.
* The configuration is loaded once, handed to the single backend call,
  and written back only when that call refreshed the access token.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ota_cli.core.commands import Command, resolve
from ota_cli.core.dispatcher import Backends, Dispatcher
from ota_cli.core.models import Config
from ota_cli.core.parameters import extract

logger = logging.getLogger(__name__)


class CommandService:
    """Stateless service that runs one CLI invocation to completion.

    Parameters
    ----------
    backends:
        Collaborators used for dispatch and for loading/saving
        configuration.
    """

    def __init__(self, backends: Backends) -> None:
        self._backends: Backends = backends
        self._dispatcher: Dispatcher = Dispatcher(backends)

    def execute(
        self,
        command: str,
        subcommand: str | None,
        flags: Mapping[str, str | None],
    ) -> Any:
        """Resolve, validate and dispatch a single command.

        Parameters
        ----------
        command:
            Raw top-level token, e.g. ``"Campaign"``.
        subcommand:
            Raw second-level token, or ``None`` when absent.
        flags:
            Flag values keyed by name without dashes.

        Raises
        ------
        InputError
            For unknown tokens, missing flags or malformed identifiers.
        NotImplementedCommandError
            For commands without a backend operation.
        ConfigError
            When no configuration has been initialised.
        BackendFailureError
            When the backend call fails.
        """
        invocation = resolve(command, subcommand)
        parameters = extract(invocation, flags)
        logger.info("running %s", invocation)

        if invocation.command is Command.INIT:
            return self._dispatcher.dispatch(invocation, parameters, None)

        config = self._backends.configurer.load_default()
        token_before = config.access_token
        result = self._dispatcher.dispatch(invocation, parameters, config)
        self._persist_token(config, token_before)
        return result

    def _persist_token(self, config: Config, token_before: str | None) -> None:
        if config.access_token != token_before:
            logger.debug("access token refreshed; saving configuration")
            self._backends.configurer.save(config)
