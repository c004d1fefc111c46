"""Infrastructure: YAML configuration storage.

The configuration lives in a single YAML file.  Its location is, in
order of precedence:

1. the explicit path handed to :class:`ConfigStore` (``--config``),
2. ``$OTA_CLI_CONFIG``,
3. ``platformdirs.user_config_dir("ota-cli")/config.yml``.

Rules
-----
* No user-facing output; interactive prompting is injected by the CLI.
* PyYAML and OS errors are re-raised as
  :class:`~ota_cli.exceptions.ConfigError`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from ota_cli.core.models import Config
from ota_cli.exceptions import ConfigError, MissingParameterError

logger = logging.getLogger(__name__)

APP_NAME = "ota-cli"
ENV_CONFIG = "OTA_CLI_CONFIG"

SERVICE_FLAGS: tuple[str, ...] = ("campaigner", "director", "registry", "reposerver")
"""``init`` flags naming the service base URLs; all are required."""

AUTH_FLAGS: tuple[str, ...] = ("auth-server", "client-id", "client-secret")
"""``init`` flags for OAuth2 client credentials; optional as a set."""

Prompt = Callable[[Sequence[str]], Mapping[str, str]]
"""Callback asked for values of the named ``init`` flags."""


def default_config_path() -> Path:
    """Return the configuration file path used when none is given."""
    env = os.environ.get(ENV_CONFIG)
    if env:
        return Path(env).expanduser()
    return Path(user_config_dir(APP_NAME)) / "config.yml"


# ---------------------------------------------------------------------------
# (De)serialisation (pure)
# ---------------------------------------------------------------------------

def config_to_dict(config: Config) -> dict[str, Any]:
    data: dict[str, Any] = {
        "campaigner": config.campaigner_url,
        "director": config.director_url,
        "registry": config.registry_url,
        "reposerver": config.reposerver_url,
    }
    if config.has_auth:
        data["auth"] = {
            "server": config.auth_server,
            "client_id": config.client_id,
            "client_secret": config.client_secret,
        }
    if config.access_token:
        data["token"] = {
            "access_token": config.access_token,
            "expires_at": config.token_expires_at,
        }
    return data


_REINIT_HINT = "Run 'ota init' to recreate it."


def _optional_text(section: str, values: Mapping[str, Any], key: str) -> str | None:
    value = values.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ConfigError(
        f"'{section}.{key}' must be a string, got {type(value).__name__}",
        hint=_REINIT_HINT,
    )


def _expiry(token: Mapping[str, Any]) -> float | None:
    expires = token.get("expires_at")
    if expires is None:
        return None
    try:
        return float(expires)
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"'token.expires_at' must be a timestamp, got {expires!r}",
            hint=_REINIT_HINT,
        ) from exc


def config_from_dict(data: Mapping[str, Any]) -> Config:
    """Build a :class:`Config` from parsed YAML.

    Raises
    ------
    ConfigError
        When a service URL is missing, a section has the wrong shape or a
        value has the wrong type.
    """
    missing = [name for name in SERVICE_FLAGS if not data.get(name)]
    if missing:
        raise ConfigError(
            f"configuration is missing: {', '.join(missing)}",
            hint=_REINIT_HINT,
        )
    auth = data.get("auth") or {}
    token = data.get("token") or {}
    if not isinstance(auth, Mapping) or not isinstance(token, Mapping):
        raise ConfigError("'auth' and 'token' must be mappings", hint=_REINIT_HINT)

    return Config(
        campaigner_url=str(data["campaigner"]),
        director_url=str(data["director"]),
        registry_url=str(data["registry"]),
        reposerver_url=str(data["reposerver"]),
        auth_server=_optional_text("auth", auth, "server"),
        client_id=_optional_text("auth", auth, "client_id"),
        client_secret=_optional_text("auth", auth, "client_secret"),
        access_token=_optional_text("token", token, "access_token"),
        token_expires_at=_expiry(token),
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ConfigStore:
    """Loads, saves and bootstraps the YAML configuration file.

    Satisfies :class:`~ota_cli.core.protocols.Configurer` structurally.

    Parameters
    ----------
    path:
        Explicit file location; defaults to :func:`default_config_path`.
    prompt:
        Optional callback used by ``init --interactive`` to ask for
        missing values.
    """

    def __init__(self, path: Path | None = None, *, prompt: Prompt | None = None) -> None:
        self.path: Path = path if path is not None else default_config_path()
        self._prompt: Prompt | None = prompt

    def load_default(self) -> Config:
        """Read the configuration file.

        Raises
        ------
        ConfigError
            When the file does not exist or cannot be parsed.
        """
        if not self.path.is_file():
            raise ConfigError(
                f"no configuration found at {self.path}",
                hint="Run 'ota init --campaigner URL --director URL "
                "--registry URL --reposerver URL' first.",
            )
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ConfigError(f"{self.path} does not contain a mapping")
        logger.debug("loaded configuration from %s", self.path)
        return config_from_dict(data)

    def save(self, config: Config) -> None:
        """Write *config* to :attr:`path`, creating parent directories."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(config_to_dict(config), sort_keys=False),
                encoding="utf-8",
            )
            os.chmod(self.path, 0o600)
        except OSError as exc:
            raise ConfigError(f"cannot write {self.path}: {exc}") from exc
        logger.debug("saved configuration to %s", self.path)

    def init_from_flags(self, flags: Mapping[str, str]) -> Path:
        """Create the configuration from ``init`` flags and save it.

        With ``--interactive`` and a prompt callback, any missing flag is
        asked for instead of failing.

        Returns
        -------
        Path
            Where the configuration was written.

        Raises
        ------
        MissingParameterError
            When a service URL flag is absent, or when only part of the
            auth flag set is supplied.
        """
        values: dict[str, str] = {
            name: flags[name]
            for name in (*SERVICE_FLAGS, *AUTH_FLAGS)
            if flags.get(name)
        }

        if flags.get("interactive") and self._prompt is not None:
            wanted = [name for name in (*SERVICE_FLAGS, *AUTH_FLAGS) if name not in values]
            if wanted:
                answers = self._prompt(wanted)
                values.update({k: v for k, v in answers.items() if v})

        for name in SERVICE_FLAGS:
            if name not in values:
                raise MissingParameterError(name)
        given_auth = [name for name in AUTH_FLAGS if name in values]
        if given_auth and len(given_auth) != len(AUTH_FLAGS):
            missing = next(name for name in AUTH_FLAGS if name not in values)
            raise MissingParameterError(missing)

        config = Config(
            campaigner_url=values["campaigner"],
            director_url=values["director"],
            registry_url=values["registry"],
            reposerver_url=values["reposerver"],
            auth_server=values.get("auth-server"),
            client_id=values.get("client-id"),
            client_secret=values.get("client-secret"),
        )
        self.save(config)
        logger.info("configuration written to %s", self.path)
        return self.path
